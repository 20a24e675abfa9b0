"""CLI to build a profile HMM from every aligned training FASTA and dump YAML."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .constants import (
    ALIGNED_TRAINING_FOLDER,
    BUILD_CONFIG_YAML,
    FASTA_SUFFIXES,
    MODEL_SUFFIX,
    MODELS_FOLDER,
)

# Add the repository root to the Python path
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from taxhmm.algorithms import build_profile_hmm  # pylint: disable=C0413
from taxhmm.errors import ConstructionError, MalformedInputError  # pylint: disable=C0413
from taxhmm.types import BuildConfig  # pylint: disable=C0413
from taxhmm.utils import (  # pylint: disable=C0413
    dump_build_config,
    load_build_config,
    read_aligned_fasta,
    save_profile_hmm,
)


def main() -> None:
    """Build profile HMMs from aligned FASTAs and dump them as YAML."""
    parser = argparse.ArgumentParser(
        description="Build one profile HMM per aligned training FASTA."
    )
    parser.add_argument("-a", "--alignments", type=Path, default=ALIGNED_TRAINING_FOLDER)
    parser.add_argument("-o", "--output", type=Path, default=MODELS_FOLDER)
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="YAML build configuration; defaults are used when omitted.",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.alignments.exists():
        raise FileNotFoundError(f"Alignments directory does not exist: {args.alignments}")
    fastas = sorted(p for p in args.alignments.iterdir() if p.suffix in FASTA_SUFFIXES)
    if not fastas:
        raise ValueError(f"No FASTA files found in {args.alignments}")

    config = load_build_config(args.config) if args.config else BuildConfig()
    args.output.mkdir(parents=True, exist_ok=True)
    BUILD_CONFIG_YAML.parent.mkdir(parents=True, exist_ok=True)
    dump_build_config(config, BUILD_CONFIG_YAML)

    n_built = 0
    for fasta in fastas:
        try:
            model = build_profile_hmm(read_aligned_fasta(fasta), config)
        except (ConstructionError, MalformedInputError) as exc:
            print(f"Skipping {fasta.name}: {exc.message}")
            continue
        save_profile_hmm(model, args.output / f"{fasta.stem}{MODEL_SUFFIX}")
        n_built += 1

    print(f"Wrote {n_built} of {len(fastas)} profile HMMs to {args.output}", file=sys.stdout)


if __name__ == "__main__":
    main()
