"""Alignment types."""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from taxhmm.errors import MalformedInputError

from .parameters import GAP
from .sequence import DNASequence, SequenceType


@dataclass(frozen=True)
class Alignment:
    """Multiple sequence alignment used to train one profile HMM.

    An alignment may be empty; rejecting it is left to model construction.
    """

    name: Optional[str]
    aligned_sequences: List[SequenceType]

    def __post_init__(self):
        # Validate that all aligned_sequences have aligned=True
        if any(s.aligned is False for s in self.aligned_sequences):
            raise MalformedInputError(
                "All aligned_sequences must have aligned=True.", self.name
            )

        # Validate that all aligned_sequences have the same length
        if any(len(s) != self.columns for s in self.aligned_sequences):
            lengths = sorted({len(s) for s in self.aligned_sequences})
            raise MalformedInputError(
                f"All aligned_sequences must have the same length, found {lengths}.",
                self.name,
            )

    @classmethod
    def from_strings(
        cls, rows: Iterable[str], name: Optional[str] = None
    ) -> "Alignment":
        """Build an alignment from plain row strings, e.g. ``["AAC-T", "AACGT"]``."""
        sequences: List[SequenceType] = []
        for i, row in enumerate(rows):
            try:
                sequences.append(
                    DNASequence.from_string(row, identifier=f"row{i}", aligned=True)
                )
            except ValueError as exc:
                raise MalformedInputError(f"Row {i}: {exc}", name) from exc
        return cls(name=name, aligned_sequences=sequences)

    @classmethod
    def coerce(
        cls, alignment: Union["Alignment", Sequence[str]]
    ) -> "Alignment":
        """Accept either an Alignment or a sequence of row strings."""
        if isinstance(alignment, Alignment):
            return alignment
        if isinstance(alignment, str):
            raise MalformedInputError("Expected a collection of rows, got a string.")
        return cls.from_strings(alignment)

    @property
    def num_sequences(self) -> int:
        """Number of sequences in the alignment."""
        return len(self.aligned_sequences)

    @property
    def columns(self) -> int:
        """Number of columns in the alignment."""
        if not self.aligned_sequences:
            return 0
        return len(self.aligned_sequences[0])

    @property
    def rows(self) -> List[str]:
        """Rows as plain strings."""
        return [seq.text for seq in self.aligned_sequences]

    def column(self, col: int) -> List[str]:
        """Symbols of one column, top to bottom."""
        return [seq.residues[col] for seq in self.aligned_sequences]

    def column_counts(self, col: int) -> Counter:
        """Symbol frequencies of one column, gaps excluded."""
        counts = Counter(self.column(col))
        counts.pop(GAP, None)
        return counts

    def gap_run_lengths_by_start_column(self) -> List[Counter]:
        """For every column, a histogram of the lengths of gap runs starting there."""
        counters: List[Counter] = [Counter() for _ in range(self.columns)]
        for seq in self.aligned_sequences:
            run_start = None
            for col, residue in enumerate(seq.residues):
                if residue == GAP:
                    if run_start is None:
                        run_start = col
                elif run_start is not None:
                    counters[run_start][col - run_start] += 1
                    run_start = None
            if run_start is not None:
                counters[run_start][self.columns - run_start] += 1
        return counters

    def ungapped_rows(self) -> List[str]:
        """Rows with gap markers removed, i.e. the training sequences themselves."""
        return [seq.ungapped().text for seq in self.aligned_sequences]

    def trim(self, n_trim_from_start: int, n_trim_from_end: int) -> "Alignment":
        """Return a copy without the first/last columns."""
        if n_trim_from_start < 0 or n_trim_from_end < 0:
            raise ValueError("Trim amounts must be non-negative.")
        stop = self.columns - n_trim_from_end
        return self._with_sequences(
            [
                type(seq)(
                    identifier=seq.identifier,
                    residues=seq.residues[n_trim_from_start:stop],
                    description=seq.description,
                    aligned=True,
                )
                for seq in self.aligned_sequences
            ]
        )

    def remove_all_gap_records(self) -> "Alignment":
        """Return a copy without rows that consist only of gaps (e.g. after trimming)."""
        return self._with_sequences(
            [
                seq
                for seq in self.aligned_sequences
                if any(residue != GAP for residue in seq.residues)
            ]
        )

    def _with_sequences(self, sequences: List[SequenceType]) -> "Alignment":
        return Alignment(name=self.name, aligned_sequences=sequences)

    def __str__(self) -> str:
        class_name = self.__class__.__name__
        rows_str = "\n".join(f"      {row}" for row in self.rows)
        return (
            f"{class_name} (\n"
            f"   name: {self.name}\n"
            f"   aligned_sequences (columns: {self.columns}):\n{rows_str}\n"
            f")"
        )


__all__ = ["Alignment"]
