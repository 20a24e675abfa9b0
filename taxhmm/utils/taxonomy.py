"""
Taxonomic labels in the strict seven-rank form used to name training groups.

A label such as ``K_Metazoa__P_Porifera__C_Demospongiae__O_Verongida__F_Aplysinellidae__G_Suberea``
is a "__"-separated list of ``<initial>_<value>`` pieces, one per rank from
KINGDOM down to SPECIES. Intermediate ranks are not modeled; missing ranks
(holes) are allowed.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

RANK_SEPARATOR = "__"
_NULL_VALUES = ("", "NULL")


class Rank(Enum):
    """Taxonomic ranks, highest first."""

    KINGDOM = 0
    PHYLUM = 1
    CLASS = 2
    ORDER = 3
    FAMILY = 4
    GENUS = 5
    SPECIES = 6

    @property
    def initial(self) -> str:
        return self.name[0]

    def outranks(self, other: "Rank") -> bool:
        return self.value < other.value

    @classmethod
    def for_initial(cls, initial: str) -> "Rank":
        for rank in cls:
            if rank.initial == initial:
                return rank
        raise ValueError(f"No rank has initial '{initial}'")

    @classmethod
    def span(cls, highest: "Rank", lowest: "Rank") -> List["Rank"]:
        """Ranks from ``highest`` down to ``lowest``, inclusive."""
        if lowest.outranks(highest):
            raise ValueError(f"{highest.name} must not be below {lowest.name}")
        return [rank for rank in cls if highest.value <= rank.value <= lowest.value]


@dataclass(frozen=True)
class Taxonomy:
    """Ordered rank -> value assignments, highest rank first."""

    ranks: Tuple[Tuple[Rank, str], ...] = ()

    def __post_init__(self) -> None:
        ordered = tuple(sorted(dict(self.ranks).items(), key=lambda item: item[0].value))
        object.__setattr__(self, "ranks", ordered)

    @classmethod
    def from_mapping(cls, values: Dict[Rank, str]) -> "Taxonomy":
        return cls(tuple(values.items()))

    @classmethod
    def parse(cls, text: str) -> "Taxonomy":
        """Parse ``K_x__P_y__...`` (also a FASTA defline, with or without '>')."""
        text = text.strip().lstrip(">")
        values: Dict[Rank, str] = {}
        for piece in text.split(RANK_SEPARATOR):
            if not piece:
                continue
            if len(piece) < 2 or piece[1] != "_":
                raise ValueError(f"Malformed taxonomy piece '{piece}' in '{text}'")
            rank = Rank.for_initial(piece[0])
            value = piece[2:].strip()
            if value.upper() not in _NULL_VALUES:
                values[rank] = value
        return cls.from_mapping(values)

    def get(self, rank: Rank) -> Optional[str]:
        return dict(self.ranks).get(rank)

    def __getitem__(self, rank: Rank) -> str:
        return dict(self.ranks)[rank]

    def __contains__(self, rank: object) -> bool:
        return any(r is rank for r, _ in self.ranks)

    def __iter__(self) -> Iterator[Rank]:
        return (rank for rank, _ in self.ranks)

    def __len__(self) -> int:
        return len(self.ranks)

    @property
    def lowest_rank(self) -> Optional[Rank]:
        return self.ranks[-1][0] if self.ranks else None

    def truncated(self, lowest_rank: Rank) -> "Taxonomy":
        """Copy keeping only ``lowest_rank`` and the ranks above it."""
        return Taxonomy(
            tuple((r, v) for r, v in self.ranks if not lowest_rank.outranks(r))
        )

    def without(self, rank: Rank) -> "Taxonomy":
        return Taxonomy(tuple((r, v) for r, v in self.ranks if r is not rank))

    def is_binomial(self) -> bool:
        return Rank.GENUS in self and Rank.SPECIES in self

    def __str__(self) -> str:
        return RANK_SEPARATOR.join(f"{rank.initial}_{value}" for rank, value in self.ranks)


def consensus(
    taxonomies: Iterable[Taxonomy],
    start_rank: Rank = Rank.PHYLUM,
    rng: Optional[np.random.Generator] = None,
) -> Taxonomy:
    """Taxonomy that best represents a collection, e.g. equally scored hits.

    Only the most specific taxonomies are considered. Walking down from
    ``start_rank``, the most common value at each rank is kept and the
    collection narrowed to its owners; ties are broken at random.
    """
    taxonomies = list(taxonomies)
    if not taxonomies:
        raise ValueError("Cannot build a consensus of no taxonomies")
    rng = rng if rng is not None else np.random.default_rng()

    most_specific = max(
        (tax.lowest_rank for tax in taxonomies if tax.lowest_rank is not None),
        key=lambda rank: rank.value,
        default=None,
    )
    if most_specific is None:
        return Taxonomy()
    candidates = [tax for tax in taxonomies if most_specific in tax]

    chosen: Dict[Rank, str] = {}
    for rank in Rank.span(start_rank, Rank.SPECIES):
        populations = Counter(tax.get(rank) for tax in candidates if rank in tax)
        if not populations:
            continue
        top = max(populations.values())
        tied = sorted(value for value, count in populations.items() if count == top)
        rng.shuffle(tied)
        chosen[rank] = tied[0]
        candidates = [tax for tax in candidates if tax.get(rank) == tied[0]]

    return Taxonomy.from_mapping(chosen)


__all__ = ["Rank", "Taxonomy", "consensus", "RANK_SEPARATOR"]
