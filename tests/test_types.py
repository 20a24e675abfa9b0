"""Unit tests for states, sequences, alignments and build configuration."""

from __future__ import annotations

from collections import Counter

import pytest

from taxhmm.errors import MalformedInputError
from taxhmm.types import Alignment, BuildConfig, DNASequence, START, STOP, State, StateRole


@pytest.mark.parametrize("name", ["M_0", "I_12", "D_3", "START", "STOP"])
def test_state_names_round_trip(name):
    """Test that printing and parsing a state are inverses."""
    assert str(State.parse(name)) == name


@pytest.mark.parametrize("name", ["M", "X_1", "M_-1", "M_a", "stop"])
def test_state_parse_rejects_unknown_names(name):
    """Test that malformed state names raise ValueError."""
    with pytest.raises(ValueError):
        State.parse(name)


def test_state_roles_and_equality():
    """Test role predicates and that the hard flag does not affect identity."""
    assert State.match(2).emits and State.insert(0).emits
    assert not State.delete(1).emits
    assert State.delete(4, hard=True) == State.delete(4)
    assert hash(State.delete(4, hard=True)) == hash(State.delete(4))
    assert START.is_start and STOP.is_stop
    assert State.parse("STOP") is STOP
    assert State.match(1).role is StateRole.MATCH


def test_state_validation():
    """Test that positional roles need an index and START/STOP must not have one."""
    with pytest.raises(ValueError):
        State(StateRole.MATCH)
    with pytest.raises(ValueError):
        State(StateRole.STOP, 3)


def test_state_sort_order():
    """Test that sorting puts START first, STOP last and groups by column."""
    states = [STOP, State.insert(1), State.match(1), START, State.match(0)]

    assert sorted(states, key=State.sort_key) == [
        START,
        State.match(0),
        State.insert(1),
        State.match(1),
        STOP,
    ]


def test_dna_sequence_normalizes_and_validates():
    """Test upper-casing, gap unification and residue validation."""
    seq = DNASequence.from_string("ac.g-t", identifier="s", aligned=True)

    assert seq.text == "AC-G-T"
    assert seq.ungapped().text == "ACGT"
    assert not seq.ungapped().aligned
    with pytest.raises(ValueError):
        DNASequence.from_string("AC-GT", identifier="s")
    with pytest.raises(ValueError):
        DNASequence.from_string("ACNGT", identifier="s")


def test_alignment_columns_and_counts():
    """Test column access and gap-free column counts."""
    alignment = Alignment.from_strings(["AC-T", "AG-T", "CG-A"])

    assert alignment.num_sequences == 3
    assert alignment.columns == 4
    assert alignment.column(1) == ["C", "G", "G"]
    assert alignment.column_counts(1) == Counter({"G": 2, "C": 1})
    assert alignment.column_counts(2) == Counter()
    assert alignment.ungapped_rows() == ["ACT", "AGT", "CGA"]


def test_gap_runs_are_histogrammed_by_start_column():
    """Test run-length histograms, including runs reaching the end."""
    alignment = Alignment.from_strings(["A--T", "AC-T", "ACG-", "----"])
    runs = alignment.gap_run_lengths_by_start_column()

    assert runs[0] == Counter({4: 1})
    assert runs[1] == Counter({2: 1})
    assert runs[2] == Counter({1: 1})
    assert runs[3] == Counter({1: 1})


def test_trim_and_remove_all_gap_records():
    """Test column trimming and dropping rows left with only gaps."""
    alignment = Alignment.from_strings(["AACGT", "A--GT", "AC-TT"], name="trim")
    trimmed = alignment.trim(1, 2)

    assert trimmed.rows == ["AC", "--", "C-"]
    assert trimmed.name == "trim"
    assert trimmed.remove_all_gap_records().rows == ["AC", "C-"]
    with pytest.raises(ValueError):
        alignment.trim(-1, 0)


def test_alignment_validation():
    """Test that ragged or unaligned rows are malformed input."""
    with pytest.raises(MalformedInputError):
        Alignment.from_strings(["AAC", "AACG"])
    with pytest.raises(MalformedInputError):
        Alignment(name=None, aligned_sequences=[DNASequence.from_string("ACGT")])
    with pytest.raises(MalformedInputError):
        Alignment.coerce("ACGT")
    assert Alignment(name="empty", aligned_sequences=[]).columns == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"pseudocount_mass": 1.0},
        {"p_match_to_insert": -0.1},
        {"alphabet": ()},
        {"alphabet": ("A", "-")},
        {"alphabet": ("A", "A")},
        {"alphabet": ("A", "C", "G", "U")},
        {"alphabet": ("a", "c")},
    ],
)
def test_build_config_rejects_invalid_values(kwargs):
    """Test build configuration validation."""
    with pytest.raises(ValueError):
        BuildConfig(**kwargs)


def test_build_config_defaults():
    """Test the default construction rates and alphabet."""
    config = BuildConfig()

    assert config.pseudocount_mass == 0.01
    assert config.p_match_to_insert == 0.01
    assert config.p_insert_to_self == 0.01
    assert config.soft_delete_tax == 0.01
    assert config.alphabet == ("A", "C", "G", "T")
