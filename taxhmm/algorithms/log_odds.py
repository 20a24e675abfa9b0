"""Log10-domain probabilities and read-only log-odds views of probability tables.

Decoding multiplies hundreds of probabilities per path, which underflows in the
linear domain. ``LogOdds`` stores log10(p) instead and represents p == 0 with an
explicit sentinel rather than -inf, so comparisons stay total and no NaN can
leak out of arithmetic on impossible events.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from functools import total_ordering
from types import MappingProxyType
from typing import Hashable, Iterator, Optional, TypeVar

from .distribution import Distribution, JointTable

K = TypeVar("K", bound=Hashable)
V = TypeVar("V", bound=Hashable)


@total_ordering
class LogOdds:
    """log10 of a probability, with a zero-probability sentinel."""

    __slots__ = ("_log",)

    _ZERO: "LogOdds"

    def __init__(self, prob: float):
        if prob < 0.0 or math.isnan(prob):
            raise ValueError(f"Probability must be non-negative, got {prob}")
        self._log: Optional[float] = None if prob == 0.0 else math.log10(prob)

    @classmethod
    def from_log10(cls, value: float) -> "LogOdds":
        """Wrap an already-logged value, e.g. one read back from a report."""
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"log10 value must be finite, got {value}")
        instance = cls.__new__(cls)
        instance._log = value
        return instance

    @classmethod
    def zero(cls) -> "LogOdds":
        return cls._ZERO

    @property
    def is_zero(self) -> bool:
        return self._log is None

    @property
    def value(self) -> Optional[float]:
        """The log10 probability, or None for the zero sentinel."""
        return self._log

    @staticmethod
    def plus(*terms: "LogOdds") -> "LogOdds":
        """Sum the logs, i.e. multiply the probabilities.

        The result is the zero sentinel if any term is.
        """
        total = 0.0
        for term in terms:
            if term._log is None:
                return LogOdds._ZERO
            total += term._log
        result = LogOdds.__new__(LogOdds)
        result._log = total
        return result

    def __add__(self, other: "LogOdds") -> "LogOdds":
        if not isinstance(other, LogOdds):
            return NotImplemented
        return LogOdds.plus(self, other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LogOdds):
            return NotImplemented
        return self._log == other._log

    def __lt__(self, other: "LogOdds") -> bool:
        if not isinstance(other, LogOdds):
            return NotImplemented
        if other._log is None:
            return False
        if self._log is None:
            return True
        return self._log < other._log

    def __hash__(self) -> int:
        return hash(self._log)

    def __repr__(self) -> str:
        return f"LogOdds({self})"

    def __str__(self) -> str:
        return "{0}" if self._log is None else repr(self._log)


LogOdds._ZERO = LogOdds(0.0)


def log_odds_distribution(dist: Distribution[K]) -> Mapping:
    """Read-only key -> LogOdds view derived from a linear distribution."""
    return MappingProxyType({key: LogOdds(prob) for key, prob in dist.items()})


class LogOddsTable(Mapping):
    """Read-only major -> minor -> LogOdds view derived from a JointTable."""

    def __init__(self, table: JointTable[K, V]):
        self._rows = {
            major: log_odds_distribution(dist) for major, dist in table.items()
        }

    def lookup(self, major: K, minor: V) -> Optional[LogOdds]:
        """LogOdds of (major, minor), or None if no such entry is defined."""
        row = self._rows.get(major)
        if row is None:
            return None
        return row.get(minor)

    def __getitem__(self, major: K) -> Mapping:
        return self._rows[major]

    def __iter__(self) -> Iterator:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)


__all__ = ["LogOdds", "LogOddsTable", "log_odds_distribution"]
