"""CLI to split a taxonomically labelled FASTA per genus and select training sets.

Deflines must carry the full taxonomy, e.g.
``>K_Metazoa__P_Porifera__C_Demospongiae__O_Verongida__F_Aplysinellidae__G_Suberea__S_Suberea clavata``.
The unaligned training sets written here must be aligned with an external
multiple-sequence aligner before ``scripts.build_models`` can use them.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

from .constants import (
    ALIGNED_TRAINING_FOLDER,
    FULL_GENUS_FOLDER,
    LABELLED_FASTA_PATH,
    MAX_SEQUENCE_LENGTH,
    MAX_TRAINING_RECORDS,
    MIN_SEQUENCE_LENGTH,
    RANDOM_SEED,
    UNALIGNED_TRAINING_FOLDER,
)

# Add the repository root to the Python path
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from taxhmm.utils import (  # pylint: disable=C0413
    filter_by_length,
    group_by_genus,
    read_query_sequences,
    select_training_records,
    write_fasta,
)


def main() -> None:
    """Write per-genus FASTAs and a training set of each."""
    parser = argparse.ArgumentParser(
        description="Split a labelled FASTA per genus and select training sets."
    )
    parser.add_argument(
        "-f",
        "--fasta",
        type=Path,
        default=LABELLED_FASTA_PATH,
        help="FASTA file with one taxonomically labelled record per sequence.",
    )
    parser.add_argument("--max-records", type=int, default=MAX_TRAINING_RECORDS)
    parser.add_argument("--min-length", type=int, default=MIN_SEQUENCE_LENGTH)
    parser.add_argument("--max-length", type=int, default=MAX_SEQUENCE_LENGTH)
    parser.add_argument("--seed", type=int, default=RANDOM_SEED)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.fasta.exists():
        raise FileNotFoundError(f"Labelled FASTA not found: {args.fasta}")

    records = read_query_sequences(args.fasta)
    kept = filter_by_length(records, args.min_length, args.max_length)
    print(
        f"Kept {len(kept)} of {len(records)} records with length in "
        f"[{args.min_length}, {args.max_length}]"
    )

    groups = group_by_genus(kept)
    rng = np.random.default_rng(args.seed)
    for folder in (FULL_GENUS_FOLDER, UNALIGNED_TRAINING_FOLDER, ALIGNED_TRAINING_FOLDER):
        folder.mkdir(parents=True, exist_ok=True)

    n_to_align = 0
    for nth, (label, genus_records) in enumerate(sorted(groups.items()), start=1):
        file_name = f"{label}.fa"
        write_fasta(genus_records, FULL_GENUS_FOLDER / file_name)

        training = select_training_records(genus_records, args.max_records, rng)
        write_fasta(training, UNALIGNED_TRAINING_FOLDER / file_name)
        if len(training) == 1:
            # A single sequence is its own alignment
            write_fasta(training, ALIGNED_TRAINING_FOLDER / file_name)
        else:
            n_to_align += 1
        print(
            f"   Chose {len(training)} training record(s) for genus {nth} of "
            f"{len(groups)} = {label}"
        )

    print(
        f"\nAlign the {n_to_align} multi-record training sets in "
        f"{UNALIGNED_TRAINING_FOLDER} into {ALIGNED_TRAINING_FOLDER}, "
        "then run: python -m scripts.build_models"
    )


if __name__ == "__main__":
    main()
