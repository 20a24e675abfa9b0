"""CLI to classify query sequences against every profile HMM in a gallery.

Each query is scored against all models; the label of the best-scoring model
is reported together with the family-level prediction derived from it, and
per-model scores are written as CSV.
"""

from __future__ import annotations

import argparse
import logging
import sys
from functools import partial
from pathlib import Path
from typing import Dict, List, Optional

from .constants import (
    ALIGNED_TRAINING_FOLDER,
    CLASSIFICATION_FOLDER,
    FASTA_SUFFIXES,
    MODEL_SUFFIX,
    MODELS_FOLDER,
    N_WORKERS,
)

# Add the repository root to the Python path
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from taxhmm.algorithms import LogOdds, ProfileHMM, build_profile_hmm  # pylint: disable=C0413
from taxhmm.classification import ClassificationDriver, ModelSource  # pylint: disable=C0413
from taxhmm.types import DNASequence, ModelScore  # pylint: disable=C0413
from taxhmm.utils import (  # pylint: disable=C0413
    Rank,
    Taxonomy,
    clean_query,
    load_profile_hmm,
    read_aligned_fasta,
    read_query_sequences,
)


def collect_gallery(models: Optional[Path], alignments: Optional[Path]) -> Dict[str, ModelSource]:
    """Map labels to saved models (loaded lazily) or to aligned FASTAs (built per worker)."""
    gallery: Dict[str, ModelSource] = {}
    if alignments is not None:
        for path in sorted(alignments.iterdir()):
            if path.suffix in FASTA_SUFFIXES:
                gallery[path.stem] = partial(_build_from_fasta, path)
    else:
        for path in sorted(models.iterdir()):
            if path.suffix == MODEL_SUFFIX:
                gallery[path.stem] = partial(load_profile_hmm, path)
    return gallery


def _build_from_fasta(path: Path) -> ProfileHMM:
    return build_profile_hmm(read_aligned_fasta(path))


def print_report(
    result: ModelScore, best_label: Optional[str], best_score: Optional[LogOdds], n_reports: int
) -> None:
    if result.succeeded:
        line = f"{result.label}: log(Viterbi prob) = {result.score}."
    else:
        line = f"{result.label}: {result.error.splitlines()[0]}."
    if best_label is not None:
        line += f" After {n_reports} HMMs, best match is {best_label} ... log(Viterbi prob) = {best_score}"
    print(line)


def family_prediction(label: str) -> str:
    """Family-level taxonomy of a model label, or the label itself if it is not a taxonomy."""
    try:
        return str(Taxonomy.parse(label).truncated(Rank.FAMILY))
    except ValueError:
        return label


def load_queries(args: argparse.Namespace) -> List[DNASequence]:
    if args.sequence:
        cleaned, dropped = clean_query(args.sequence)
        for char, count in sorted(dropped.items()):
            print(f"Dropping {count} non-ACGT character(s) '{char}' from input sequence")
        return [DNASequence.from_string(cleaned, identifier="query")]
    return read_query_sequences(args.query)


def main() -> None:
    """Classify each query and write per-model scores."""
    parser = argparse.ArgumentParser(
        description="Classify DNA queries against a gallery of profile HMMs."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-q", "--query", type=Path, help="FASTA file of queries.")
    source.add_argument("-s", "--sequence", type=str, help="A single query sequence.")
    gallery = parser.add_mutually_exclusive_group()
    gallery.add_argument("-m", "--models", type=Path, default=MODELS_FOLDER)
    gallery.add_argument(
        "-a",
        "--alignments",
        type=Path,
        nargs="?",
        const=ALIGNED_TRAINING_FOLDER,
        help="Build models from aligned FASTAs instead of loading saved ones.",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=N_WORKERS,
        help="Number of worker processes (1 for serial scoring).",
    )
    parser.add_argument("-o", "--output", type=Path, default=CLASSIFICATION_FOLDER)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.INFO)

    gallery_dir = args.alignments if args.alignments is not None else args.models
    if not gallery_dir.exists():
        raise FileNotFoundError(f"Model directory does not exist: {gallery_dir}")
    models = collect_gallery(
        None if args.alignments is not None else args.models, args.alignments
    )
    if not models:
        raise ValueError(f"No models found in {gallery_dir}")

    driver = ClassificationDriver(max_workers=args.workers, on_report=print_report)
    args.output.mkdir(parents=True, exist_ok=True)

    for query in load_queries(args):
        print(f"\n=== Classifying {query.identifier or 'query'} ({len(query)} nt) ===")
        result = driver.classify(models, query)

        if result.best_label is None:
            print("No HMM computed any log-Viterbi probability for this sequence.")
            print("The query may be unusually short or long, or not from the modeled gene.")
        else:
            print(f"\nPredicted family of the query: {family_prediction(result.best_label)}")
            print(f"Best model: {result.best_label} (log(Viterbi prob) = {result.best_score})")

        csv_path = args.output / f"{query.identifier or 'query'}.csv"
        result.to_frame().to_csv(csv_path, index=False)
        print(f"Wrote {result.n_evaluated} model scores to {csv_path}")


if __name__ == "__main__":
    main()
