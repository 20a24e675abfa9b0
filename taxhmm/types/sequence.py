"""Sequence types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from .parameters import DNA_BASES, GAP, GAP_CHARACTERS


@dataclass(frozen=True)
class SequenceType(ABC):
    """Named residue string; ``aligned`` rows may also hold gap markers."""

    identifier: str
    residues: List[str]
    description: Optional[str] = None
    aligned: bool = False

    def __post_init__(self) -> None:
        self._validate()

    def __len__(self) -> int:
        return len(self.residues)

    @property
    def text(self) -> str:
        """Residues joined into a single string."""
        return "".join(self.residues)

    @property
    def defline(self) -> str:
        """FASTA header line without the leading '>'."""
        if self.description:
            return f"{self.identifier} {self.description}"
        return self.identifier

    def n_gaps(self) -> int:
        return sum(1 for res in self.residues if res == GAP)

    def __str__(self) -> str:
        state = "aligned" if self.aligned else "unaligned"
        return f">{self.defline} ({state}, {len(self)} positions)\n{self.text}"

    @abstractmethod
    def ungapped(self) -> "SequenceType":
        """Return an unaligned copy with every gap marker removed."""
        raise NotImplementedError

    @abstractmethod
    def _validate(self) -> None:
        """Raise ValueError if a residue is not allowed for this sequence type."""
        raise NotImplementedError


@dataclass(frozen=True)
class DNASequence(SequenceType):
    """DNA over A, C, G, T; aligned rows may contain '-' ('.' is read as '-')."""

    def __post_init__(self) -> None:
        # Case and gap markers are normalized before validation
        residues: List[str] = [
            GAP if res in GAP_CHARACTERS else res.upper() for res in self.residues
        ]
        object.__setattr__(self, "residues", residues)
        super().__post_init__()

    @classmethod
    def from_string(
        cls,
        text: str,
        identifier: str = "",
        description: Optional[str] = None,
        aligned: bool = False,
    ) -> "DNASequence":
        return cls(
            identifier=identifier,
            residues=list(text.strip()),
            description=description,
            aligned=aligned,
        )

    def ungapped(self) -> "DNASequence":
        return DNASequence(
            identifier=self.identifier,
            residues=[res for res in self.residues if res != GAP],
            description=self.description,
            aligned=False,
        )

    def _validate(self) -> None:
        allowed = set(DNA_BASES) | ({GAP} if self.aligned else set())
        invalid = sorted({res for res in self.residues if res not in allowed})
        if invalid:
            kind = "aligned DNA" if self.aligned else "DNA"
            raise ValueError(
                f"Invalid {kind} residues in '{self.identifier}': {invalid}; "
                f"allowed: {sorted(allowed)}"
            )


__all__ = ["SequenceType", "DNASequence"]
