"""Shared interfaces for decoding queries against profile HMMs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence, Union

from taxhmm.algorithms.hmm import ProfileHMM
from taxhmm.types import SequenceType, ViterbiResult

Query = Union[str, Sequence[str], SequenceType]


class SequenceDecoder(ABC):
    """Abstract base class for decoding algorithms over profile HMMs."""

    @abstractmethod
    def decode(
        self,
        hmm: ProfileHMM,
        query: Query,
        retain_path: bool = True,
    ) -> ViterbiResult:
        """Score a query against the provided HMM, optionally with its state path."""
        raise NotImplementedError


__all__ = ["SequenceDecoder", "Query"]
