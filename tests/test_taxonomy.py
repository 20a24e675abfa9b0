"""Unit tests for taxonomy labels and consensus."""

from __future__ import annotations

import numpy as np
import pytest

from taxhmm.utils.taxonomy import Rank, Taxonomy, consensus

FULL = "K_Metazoa__P_Porifera__C_Demospongiae__O_Verongida__F_Aplysinellidae__G_Suberea__S_Suberea clavata"


def test_parse_and_format_round_trip():
    """Test that a full label parses into seven ranks and prints back unchanged."""
    taxonomy = Taxonomy.parse(FULL)

    assert len(taxonomy) == 7
    assert taxonomy[Rank.GENUS] == "Suberea"
    assert taxonomy.get(Rank.SPECIES) == "Suberea clavata"
    assert taxonomy.lowest_rank is Rank.SPECIES
    assert str(taxonomy) == FULL
    assert Taxonomy.parse(">" + FULL) == taxonomy


def test_parse_allows_holes_and_skips_null_values():
    """Test that missing ranks and NULL placeholders are left out."""
    taxonomy = Taxonomy.parse("P_Nemertea__C_NULL__F_Valenciniidae")

    assert list(taxonomy) == [Rank.PHYLUM, Rank.FAMILY]
    assert Rank.CLASS not in taxonomy
    assert taxonomy.get(Rank.CLASS) is None
    assert str(taxonomy) == "P_Nemertea__F_Valenciniidae"


@pytest.mark.parametrize("text", ["X_Unknown", "KMetazoa", "K"])
def test_parse_rejects_malformed_pieces(text):
    """Test that unknown initials or pieces without '_' raise ValueError."""
    with pytest.raises(ValueError):
        Taxonomy.parse(text)


def test_without_and_truncated():
    """Test rank removal and truncation below a rank."""
    taxonomy = Taxonomy.parse(FULL)

    assert taxonomy.without(Rank.SPECIES).lowest_rank is Rank.GENUS
    family = taxonomy.truncated(Rank.FAMILY)
    assert str(family) == "K_Metazoa__P_Porifera__C_Demospongiae__O_Verongida__F_Aplysinellidae"
    assert taxonomy.is_binomial()
    assert not family.is_binomial()


def test_rank_helpers():
    """Test rank ordering, initials and spans."""
    assert Rank.KINGDOM.outranks(Rank.SPECIES)
    assert not Rank.GENUS.outranks(Rank.FAMILY)
    assert Rank.for_initial("O") is Rank.ORDER
    assert Rank.span(Rank.FAMILY, Rank.SPECIES) == [Rank.FAMILY, Rank.GENUS, Rank.SPECIES]
    with pytest.raises(ValueError):
        Rank.span(Rank.SPECIES, Rank.FAMILY)


def test_consensus_follows_the_majority():
    """Test that each rank takes the most common value among the remaining owners."""
    taxonomies = [
        Taxonomy.parse("K_M__P_A__G_X__S_x1"),
        Taxonomy.parse("K_M__P_A__G_X__S_x1"),
        Taxonomy.parse("K_M__P_A__G_X__S_x2"),
        Taxonomy.parse("K_M__P_B__G_Y__S_y"),
    ]
    result = consensus(taxonomies, rng=np.random.default_rng(0))

    assert str(result) == "P_A__G_X__S_x1"


def test_consensus_ignores_less_specific_taxonomies():
    """Test that only taxonomies reaching the most specific rank vote."""
    taxonomies = [
        Taxonomy.parse("P_A__G_X"),
        Taxonomy.parse("P_A__G_X"),
        Taxonomy.parse("P_B__G_Y__S_y"),
    ]
    result = consensus(taxonomies, rng=np.random.default_rng(0))

    assert str(result) == "P_B__G_Y__S_y"


def test_consensus_tie_breaking_is_seedable():
    """Test that ties are broken reproducibly with a seeded generator."""
    taxonomies = [Taxonomy.parse("P_A__G_X"), Taxonomy.parse("P_A__G_Y")]
    first = consensus(taxonomies, rng=np.random.default_rng(11))
    second = consensus(taxonomies, rng=np.random.default_rng(11))

    assert first == second
    assert first.get(Rank.GENUS) in {"X", "Y"}
    assert first.get(Rank.PHYLUM) == "A"


def test_consensus_of_nothing_is_an_error():
    """Test that an empty collection has no consensus."""
    with pytest.raises(ValueError):
        consensus([])
