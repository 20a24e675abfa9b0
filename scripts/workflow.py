#!/usr/bin/env python3
"""Run the complete classification workflow."""

from __future__ import annotations

import argparse
import subprocess
import sys

from .constants import ALIGNED_TRAINING_FOLDER


def run(module: str, args: list[str] | None = None) -> None:
    """Run a script."""
    cmd = [sys.executable, "-m", module] + (args or [])
    subprocess.run(cmd, check=True)


def main() -> None:
    """Run the complete classification workflow."""
    parser = argparse.ArgumentParser(description="Run the complete classification workflow.")
    parser.add_argument(
        "--collect",
        action="store_true",
        help="Select training sets from the labelled FASTA first (default: skip)",
    )
    parser.add_argument("-q", "--query", type=str, help="FASTA file of queries to classify.")
    parser.add_argument("-w", "--workers", type=str, default=None)
    opts = parser.parse_args()

    if opts.collect:
        print("\n=== Collecting training sets ===")
        run("scripts.collect_training_sets")
        if not any(ALIGNED_TRAINING_FOLDER.iterdir()):
            print(f"\nAlign the training sets into {ALIGNED_TRAINING_FOLDER} and rerun.")
            return

    print("\n=== Building profile HMMs ===")
    run("scripts.build_models")

    if opts.query:
        print("\n=== Classifying queries ===")
        classify_args = ["--query", opts.query]
        if opts.workers:
            classify_args += ["--workers", opts.workers]
        run("scripts.classify_query", classify_args)

    print("\n=== Workflow complete ===")


if __name__ == "__main__":
    main()
