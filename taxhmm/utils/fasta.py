"""Functions for working with FASTA files."""

import logging
from collections import Counter
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import skbio.io
from skbio import DNA, Sequence

from taxhmm.errors import MalformedInputError
from taxhmm.types import Alignment, DNASequence, SequenceType
from taxhmm.types.parameters import DNA_BASES

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def dna_sequence_from_skbio(record: Sequence, aligned: bool) -> DNASequence:
    """Convert a scikit-bio record to a DNASequence ('.' gaps become '-')."""
    metadata = getattr(record, "metadata", {}) or {}
    identifier = metadata.get("id") or ""
    description = metadata.get("description") or None

    return DNASequence(
        identifier=identifier,
        residues=list(str(record)),
        description=description,
        aligned=aligned,
    )


def read_dna_fasta(
    file_path: PathLike, ids: Optional[List[str]] = None, aligned: bool = False
) -> List[DNASequence]:
    """Read a FASTA file of DNA records and return a list of DNASequence.

    Records are parsed as ``skbio.DNA``; IUPAC ambiguity codes pass that check
    but are still rejected, since models only emit A, C, G and T.

    Raises:
        MalformedInputError: if the file is not FASTA or a record holds symbols
            other than A, C, G, T (and gaps, when ``aligned``).
    """
    sequences: List[DNASequence] = []
    try:
        for record in skbio.io.read(str(file_path), format="fasta"):
            if ids and record.metadata["id"] not in ids:
                continue
            try:
                # lowercase=True upper-cases the residues
                dna = DNA(str(record), metadata=record.metadata, lowercase=True)
                sequences.append(dna_sequence_from_skbio(dna, aligned=aligned))
            except ValueError as exc:
                raise MalformedInputError(
                    f"Record {record.metadata.get('id')!r}: {exc}", str(file_path)
                ) from exc
    except skbio.io.FASTAFormatError as exc:
        raise MalformedInputError(f"Not a valid FASTA file: {exc}", str(file_path)) from exc
    return sequences


def read_aligned_fasta(file_path: PathLike, name: Optional[str] = None) -> Alignment:
    """Read an aligned FASTA file (one row per record) into an Alignment.

    The alignment is named after the file stem unless ``name`` is given.
    """
    path = Path(file_path)
    rows = read_dna_fasta(path, aligned=True)
    return Alignment(name=name or path.stem, aligned_sequences=rows)


def clean_query(text: str) -> Tuple[str, Counter]:
    """Upper-case a raw query and drop everything that is not A, C, G or T.

    Returns the cleaned query and a count of the dropped characters, so callers
    can report ambiguity codes (N, R, Y, ...) or stray punctuation.
    """
    kept: List[str] = []
    dropped: Counter = Counter()
    for char in text.upper():
        if char in DNA_BASES:
            kept.append(char)
        elif not char.isspace():
            dropped[char] += 1
    return "".join(kept), dropped


def read_query_sequences(file_path: PathLike) -> List[DNASequence]:
    """Read query records, cleaning each with ``clean_query``.

    Records are read as generic sequences so that any stray character can be
    reported and dropped rather than failing the whole file.
    """
    queries: List[DNASequence] = []
    try:
        records = list(skbio.io.read(str(file_path), format="fasta"))
    except skbio.io.FASTAFormatError as exc:
        raise MalformedInputError(f"Not a valid FASTA file: {exc}", str(file_path)) from exc

    for record in records:
        identifier = record.metadata.get("id") or ""
        cleaned, dropped = clean_query(str(record))
        if dropped:
            logger.warning(
                "%s: dropped %d non-ACGT characters %s",
                identifier,
                sum(dropped.values()),
                dict(dropped),
            )
        queries.append(
            DNASequence.from_string(
                cleaned,
                identifier=identifier,
                description=record.metadata.get("description") or None,
            )
        )
    return queries


def write_fasta(sequences: Iterable[SequenceType], file_path: PathLike) -> None:
    """Write sequences (aligned or not) as FASTA records."""
    records = (
        DNA(
            seq.text,
            metadata={"id": seq.identifier, "description": seq.description or ""},
        )
        for seq in sequences
    )
    skbio.io.write(records, format="fasta", into=str(file_path))


__all__ = [
    "clean_query",
    "read_aligned_fasta",
    "read_dna_fasta",
    "read_query_sequences",
    "write_fasta",
]
