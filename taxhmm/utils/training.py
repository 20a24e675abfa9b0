"""Selection of per-genus training sets from a taxonomically labelled FASTA."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

import numpy as np

from taxhmm.types import SequenceType

from .taxonomy import Rank, Taxonomy

logger = logging.getLogger(__name__)

MAX_TRAINING_RECORDS = 25
MIN_SEQUENCE_LENGTH = 480
MAX_SEQUENCE_LENGTH = 782


def record_taxonomy(record: SequenceType) -> Taxonomy:
    """Taxonomy encoded in a record's defline (identifier plus description).

    FASTA readers split the defline at the first whitespace, which can fall
    inside the species value, e.g. ``S_Suberea clavata``.
    """
    return Taxonomy.parse(record.defline)


def filter_by_length(
    records: Iterable[SequenceType],
    min_length: int = MIN_SEQUENCE_LENGTH,
    max_length: int = MAX_SEQUENCE_LENGTH,
) -> List[SequenceType]:
    """Keep records whose length lies in [min_length, max_length]."""
    return [record for record in records if min_length <= len(record) <= max_length]


def group_by_genus(records: Iterable[SequenceType]) -> Dict[str, List[SequenceType]]:
    """Group records under their taxonomy label with the species removed."""
    groups: Dict[str, List[SequenceType]] = {}
    for record in records:
        label = str(record_taxonomy(record).without(Rank.SPECIES))
        groups.setdefault(label, []).append(record)
    return groups


def select_training_records(
    records: Iterable[SequenceType],
    max_records: int = MAX_TRAINING_RECORDS,
    rng: Optional[np.random.Generator] = None,
) -> List[SequenceType]:
    """Pick up to ``max_records`` training records spread evenly across species.

    Each species' records are shuffled, then species are visited round-robin,
    each visit taking the next record whose sequence has not been chosen yet.
    """
    if max_records < 1:
        raise ValueError(f"max_records must be >= 1, got {max_records}")
    rng = rng if rng is not None else np.random.default_rng()

    by_species: Dict[Optional[str], List[SequenceType]] = {}
    for record in records:
        species = record_taxonomy(record).get(Rank.SPECIES)
        by_species.setdefault(species, []).append(record)

    species_lists = list(by_species.values())
    for species_records in species_lists:
        rng.shuffle(species_records)

    training: List[SequenceType] = []
    used_sequences = set()
    n_exhausted = 0
    index = 0
    while n_exhausted < len(species_lists) and len(training) < max_records:
        species_records = species_lists[index]
        if species_records:
            while species_records:
                record = species_records.pop(0)
                if record.text not in used_sequences:
                    training.append(record)
                    used_sequences.add(record.text)
                    break
            if not species_records:
                n_exhausted += 1
        index = (index + 1) % len(species_lists)

    logger.debug(
        "Selected %d of up to %d training records from %d species",
        len(training),
        max_records,
        len(species_lists),
    )
    return training


__all__ = [
    "MAX_TRAINING_RECORDS",
    "MIN_SEQUENCE_LENGTH",
    "MAX_SEQUENCE_LENGTH",
    "record_taxonomy",
    "filter_by_length",
    "group_by_genus",
    "select_training_records",
]
