"""Utility functions for the project."""

from .fasta import (
    clean_query,
    read_aligned_fasta,
    read_dna_fasta,
    read_query_sequences,
    write_fasta,
)
from .serialization import (
    dump_build_config,
    load_build_config,
    load_profile_hmm,
    model_to_dict,
    save_profile_hmm,
)
from .taxonomy import Rank, Taxonomy, consensus
from .training import filter_by_length, group_by_genus, select_training_records

__all__ = [
    "clean_query",
    "read_aligned_fasta",
    "read_dna_fasta",
    "read_query_sequences",
    "write_fasta",
    "dump_build_config",
    "load_build_config",
    "load_profile_hmm",
    "model_to_dict",
    "save_profile_hmm",
    "Rank",
    "Taxonomy",
    "consensus",
    "filter_by_length",
    "group_by_genus",
    "select_training_records",
]
