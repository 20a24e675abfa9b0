"""
This module defines the constants and construction parameters of the profile HMMs
built from DNA alignments. It includes the nucleotide alphabet, the gap markers
accepted in training alignments, the default construction rates, and a validated
container bundling those rates for a single build.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

DNA_BASES: Tuple[str, str, str, str] = ("A", "C", "G", "T")
GAP: str = "-"
GAP_CHARACTERS: Tuple[str, str] = ("-", ".")

DEFAULT_PSEUDOCOUNT_MASS: float = 0.01
DEFAULT_P_MATCH_TO_INSERT: float = 0.01
DEFAULT_P_INSERT_TO_SELF: float = 0.01
DEFAULT_SOFT_DELETE_TAX: float = 0.01

INTEGRITY_TOLERANCE: float = 1.0e-4


def _validate_rate(value: float, context: str) -> None:
    if not 0.0 <= value < 1.0:
        raise ValueError(f"{context} must be in [0, 1), got {value}")


@dataclass(frozen=True)
class BuildConfig:
    """Rates used while synthesizing a profile HMM from an alignment.

    ``alphabet`` may narrow, but never extend, the nucleotides A, C, G, T.
    """

    pseudocount_mass: float = DEFAULT_PSEUDOCOUNT_MASS
    p_match_to_insert: float = DEFAULT_P_MATCH_TO_INSERT
    p_insert_to_self: float = DEFAULT_P_INSERT_TO_SELF
    soft_delete_tax: float = DEFAULT_SOFT_DELETE_TAX
    alphabet: Tuple[str, ...] = DNA_BASES

    def __post_init__(self) -> None:
        _validate_rate(self.pseudocount_mass, "pseudocount_mass")
        _validate_rate(self.p_match_to_insert, "p_match_to_insert")
        _validate_rate(self.p_insert_to_self, "p_insert_to_self")
        _validate_rate(self.soft_delete_tax, "soft_delete_tax")

        object.__setattr__(self, "alphabet", tuple(self.alphabet))
        if not self.alphabet:
            raise ValueError("alphabet must not be empty")
        # Alignment rows are validated as DNA, so only nucleotides can be counted
        foreign = [symbol for symbol in self.alphabet if symbol not in DNA_BASES]
        if foreign:
            raise ValueError(
                f"alphabet must be a subset of {DNA_BASES}, got foreign symbols {foreign}"
            )
        if len(set(self.alphabet)) != len(self.alphabet):
            raise ValueError(f"alphabet has duplicate symbols: {self.alphabet}")


__all__ = [
    "BuildConfig",
    "DNA_BASES",
    "GAP",
    "GAP_CHARACTERS",
    "DEFAULT_PSEUDOCOUNT_MASS",
    "DEFAULT_P_MATCH_TO_INSERT",
    "DEFAULT_P_INSERT_TO_SELF",
    "DEFAULT_SOFT_DELETE_TAX",
    "INTEGRITY_TOLERANCE",
]
