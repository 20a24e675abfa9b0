"""Unit tests for FASTA reading and writing."""

from __future__ import annotations

import pytest

from taxhmm.errors import MalformedInputError
from taxhmm.types import DNASequence
from taxhmm.utils.fasta import (
    clean_query,
    read_aligned_fasta,
    read_dna_fasta,
    read_query_sequences,
    write_fasta,
)


def _write(tmp_path, name: str, text: str):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_read_aligned_fasta_normalizes_gaps_and_case(tmp_path):
    """Test that '.' gaps become '-' and residues are upper-cased."""
    path = _write(tmp_path, "G_Suberea.fa", ">r1 first\nAAC-T\n>r2\naac.t\n")
    alignment = read_aligned_fasta(path)

    assert alignment.name == "G_Suberea"
    assert alignment.rows == ["AAC-T", "AAC-T"]
    assert [s.identifier for s in alignment.aligned_sequences] == ["r1", "r2"]
    assert alignment.aligned_sequences[0].description == "first"


def test_read_aligned_fasta_rejects_ragged_rows(tmp_path):
    """Test that rows of different length are malformed."""
    path = _write(tmp_path, "ragged.fa", ">r1\nAACGT\n>r2\nAAC\n")

    with pytest.raises(MalformedInputError):
        read_aligned_fasta(path)


def test_read_dna_fasta_rejects_foreign_symbols(tmp_path):
    """Test that non-ACGT residues are reported with the record id."""
    path = _write(tmp_path, "bad.fa", ">ok\nACGT\n>bad\nACXT\n")

    with pytest.raises(MalformedInputError, match="bad"):
        read_dna_fasta(path)


@pytest.mark.parametrize("residues", ["ACNT", "AC*T", "ACUT"])
def test_read_aligned_fasta_names_the_offending_record(tmp_path, residues):
    """Test that ambiguity codes and non-nucleotide characters are both rejected per record."""
    path = _write(tmp_path, "mixed.fa", f">good\nAC-T\n>odd_one\n{residues}\n")

    with pytest.raises(MalformedInputError, match="odd_one"):
        read_aligned_fasta(path)


def test_read_dna_fasta_filters_ids(tmp_path):
    """Test that only requested record ids are returned."""
    path = _write(tmp_path, "seqs.fa", ">a\nACGT\n>b\nGGCC\n>c\nTTAA\n")

    records = read_dna_fasta(path, ids=["a", "c"])
    assert [r.text for r in records] == ["ACGT", "TTAA"]


def test_clean_query_drops_non_acgt():
    """Test that ambiguity codes and punctuation are dropped and counted."""
    cleaned, dropped = clean_query("aacg tNN-Ry\n")

    assert cleaned == "AACGT"
    assert dropped == {"N": 2, "-": 1, "R": 1, "Y": 1}


def test_read_query_sequences_cleans_records(tmp_path):
    """Test that queries are cleaned while keeping their identifiers."""
    path = _write(tmp_path, "queries.fa", ">q1 from the field\nAACNGT\n>q2\nttgca\n")
    queries = read_query_sequences(path)

    assert [q.identifier for q in queries] == ["q1", "q2"]
    assert [q.text for q in queries] == ["AACGT", "TTGCA"]
    assert queries[0].description == "from the field"


def test_write_fasta_round_trip(tmp_path):
    """Test that written records read back unchanged."""
    records = [
        DNASequence.from_string("AAC-T", identifier="r1", description="kept", aligned=True),
        DNASequence.from_string("AACGT", identifier="r2", aligned=True),
    ]
    path = tmp_path / "out.fa"
    write_fasta(records, path)
    alignment = read_aligned_fasta(path, name="copy")

    assert alignment.name == "copy"
    assert alignment.rows == ["AAC-T", "AACGT"]
    assert [s.identifier for s in alignment.aligned_sequences] == ["r1", "r2"]
    assert alignment.aligned_sequences[0].description == "kept"
