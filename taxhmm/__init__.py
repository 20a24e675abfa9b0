"""Profile HMM classification of DNA barcode sequences."""

from taxhmm.algorithms import LogOdds, ProfileHMM, build_profile_hmm, decode, score
from taxhmm.classification import ClassificationDriver
from taxhmm.errors import (
    ConstructionError,
    IntegrityError,
    MalformedInputError,
    NoPathError,
    QueryTooShortError,
    TaxHMMError,
)
from taxhmm.types import Alignment, BuildConfig, State, ViterbiResult

__version__ = "0.1.0"

__all__ = [
    "Alignment",
    "BuildConfig",
    "ClassificationDriver",
    "ConstructionError",
    "IntegrityError",
    "LogOdds",
    "MalformedInputError",
    "NoPathError",
    "ProfileHMM",
    "QueryTooShortError",
    "State",
    "TaxHMMError",
    "ViterbiResult",
    "build_profile_hmm",
    "decode",
    "score",
]
