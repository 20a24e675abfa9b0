"""
Typed failures raised by model construction and decoding.

Expected conditions (no Viterbi path, malformed input) carry a message and
an optional suggestion so callers such as the classification driver can
report them per input and keep going.
"""

from __future__ import annotations


class TaxHMMError(Exception):
    """Base exception for taxhmm errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class IntegrityError(TaxHMMError):
    """Raised when a probability row no longer sums to 1 during construction."""

    def __init__(self, context: str, detail: str):
        super().__init__(
            message=f"Integrity violation in {context}: {detail}",
            suggestion=(
                "This indicates a defect in model construction, not bad input. "
                "Please report the alignment that triggered it."
            ),
        )
        self.context = context


class ConstructionError(TaxHMMError, ValueError):
    """Raised when an alignment cannot be turned into a profile HMM."""


class MalformedInputError(TaxHMMError, ValueError):
    """Raised when an alignment or query record cannot be interpreted."""

    def __init__(self, message: str, source: str | None = None):
        where = f" ({source})" if source else ""
        super().__init__(
            message=f"{message}{where}",
            suggestion=(
                "Alignment rows must be equal-length strings over A, C, G, T "
                "and the gap characters '-' or '.'."
            ),
        )
        self.source = source


class NoPathError(TaxHMMError):
    """Raised when no Viterbi path reaches the STOP state."""


class QueryTooShortError(NoPathError):
    """Raised when a query has fewer than 2 non-gap symbols."""

    def __init__(self, n_symbols: int):
        super().__init__(
            message=f"Query has {n_symbols} non-gap symbol(s); at least 2 are required",
            suggestion="Check that the query sequence was read correctly.",
        )
        self.n_symbols = n_symbols


__all__ = [
    "TaxHMMError",
    "IntegrityError",
    "ConstructionError",
    "MalformedInputError",
    "NoPathError",
    "QueryTooShortError",
]
