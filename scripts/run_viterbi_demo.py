#!/usr/bin/env python3
"""Run Viterbi decoding of one query against one profile HMM and print the path."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure repository modules are importable when invoked as a script
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from taxhmm.algorithms import ProfileHMM, ViterbiDecoder, build_profile_hmm  # pylint: disable=C0413
from taxhmm.types import Alignment  # pylint: disable=C0413
from taxhmm.utils import clean_query, load_profile_hmm, read_aligned_fasta  # pylint: disable=C0413

DEMO_ALIGNMENT = ["AACGT", "AACGT", "AAC-T"]
DEMO_QUERY = "AACGT"


def load_model(args: argparse.Namespace) -> ProfileHMM:
    """Load a saved model, build one from an aligned FASTA, or build the demo model."""
    if args.model is not None:
        return load_profile_hmm(args.model)
    if args.alignment is not None:
        return build_profile_hmm(read_aligned_fasta(args.alignment))
    return build_profile_hmm(Alignment.from_strings(DEMO_ALIGNMENT, name="demo"))


def format_path(observations: str, path) -> str:
    """Return one line per emitted symbol: position, symbol, state."""
    lines = [
        f"{i:>6}  {symbol}  {state}" for i, (symbol, state) in enumerate(zip(observations, path))
    ]
    lines.append(f"{'':>6}     {path[-1]}")
    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Print the Viterbi path of a query through a profile HMM."
    )
    model_source = parser.add_mutually_exclusive_group()
    model_source.add_argument("-m", "--model", type=Path, help="Saved model (YAML).")
    model_source.add_argument("-a", "--alignment", type=Path, help="Aligned FASTA.")
    parser.add_argument("-s", "--sequence", type=str, default=DEMO_QUERY)
    parser.add_argument(
        "--describe",
        action="store_true",
        help="Also print the transitions and emissions of every visited state.",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    hmm = load_model(args)
    query, _ = clean_query(args.sequence)
    result = ViterbiDecoder().decode(hmm, query)

    print(hmm)
    print(f"\nQuery ({len(query)} nt): {query}")
    print("\nViterbi path:")
    print(format_path(query, result.path))
    print(f"\nViterbi log10-score: {result.score}")

    if args.describe:
        for state in dict.fromkeys(result.path[:-1]):
            print()
            print(hmm.describe_state(state))


if __name__ == "__main__":
    main()
