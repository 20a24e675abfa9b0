"""Unit tests for training-set selection."""

from __future__ import annotations

from collections import Counter

import numpy as np
import pytest

from taxhmm.types import DNASequence
from taxhmm.utils.taxonomy import Rank
from taxhmm.utils.training import (
    filter_by_length,
    group_by_genus,
    record_taxonomy,
    select_training_records,
)

GENUS = "K_Metazoa__P_Porifera__F_Aplysinellidae__G_Suberea"


def _residues(i: int, length: int = 8) -> str:
    """A distinct sequence per index."""
    return "".join("ACGT"[(i >> (2 * k)) & 3] for k in range(length))


def _record(species: str, i: int, genus: str = GENUS) -> DNASequence:
    # FASTA readers split the defline at the space inside the species value
    return DNASequence.from_string(
        _residues(i), identifier=f"{genus}__S_Suberea", description=species
    )


def _records(per_species: int = 3):
    return [
        _record(species, 10 * s + n)
        for s, species in enumerate(("alpha", "beta", "gamma"))
        for n in range(per_species)
    ]


def _species_counts(records) -> Counter:
    return Counter(record_taxonomy(r).get(Rank.SPECIES) for r in records)


def test_record_taxonomy_joins_identifier_and_description():
    """Test that a species split at whitespace by the FASTA reader is rejoined."""
    record = _record("clavata", 0)

    assert record_taxonomy(record).get(Rank.SPECIES) == "Suberea clavata"
    assert record_taxonomy(record).get(Rank.GENUS) == "Suberea"


def test_selection_spreads_records_across_species():
    """Test that round-robin selection visits every species before repeating."""
    chosen = select_training_records(_records(), max_records=4, rng=np.random.default_rng(1))
    counts = _species_counts(chosen)

    assert len(chosen) == 4
    assert set(counts) == {"Suberea alpha", "Suberea beta", "Suberea gamma"}
    assert max(counts.values()) == 2


def test_selection_stops_when_records_run_out():
    """Test that fewer records than the cap are all returned once."""
    records = _records(per_species=2)
    chosen = select_training_records(records, rng=np.random.default_rng(1))

    assert len(chosen) == 6
    assert sorted(r.text for r in chosen) == sorted(r.text for r in records)


def test_selection_caps_at_twenty_five_by_default():
    """Test the default training-set size limit."""
    records = [_record("alpha", i) for i in range(40)]

    assert len(select_training_records(records, rng=np.random.default_rng(2))) == 25


def test_selection_skips_duplicate_sequences():
    """Test that a sequence already chosen is never chosen again."""
    records = [_record("alpha", 0), _record("beta", 0), _record("beta", 1)]
    chosen = select_training_records(records, rng=np.random.default_rng(3))

    assert len(chosen) == 2
    assert len({r.text for r in chosen}) == 2


def test_selection_is_reproducible_with_a_seed():
    """Test that the same seed selects the same records."""
    records = _records(per_species=5)
    first = select_training_records(records, max_records=7, rng=np.random.default_rng(42))
    second = select_training_records(records, max_records=7, rng=np.random.default_rng(42))

    assert [r.text for r in first] == [r.text for r in second]


def test_selection_of_no_records_is_empty():
    """Test that an empty genus yields an empty training set."""
    assert select_training_records([], rng=np.random.default_rng(0)) == []
    with pytest.raises(ValueError):
        select_training_records([], max_records=0)


def test_filter_by_length_is_inclusive():
    """Test the sequence length window."""
    records = [DNASequence.from_string("A" * n, identifier=f"r{n}") for n in (3, 4, 6, 7)]

    kept = filter_by_length(records, min_length=4, max_length=6)
    assert [r.identifier for r in kept] == ["r4", "r6"]


def test_group_by_genus_drops_the_species():
    """Test that records are grouped under their genus-level label."""
    other = "K_Metazoa__P_Porifera__F_Aplysinellidae__G_Aplysinella"
    records = [_record("alpha", 0), _record("beta", 1), _record("rara", 2, genus=other)]
    groups = group_by_genus(records)

    assert set(groups) == {GENUS, other}
    assert len(groups[GENUS]) == 2
