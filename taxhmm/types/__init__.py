"""Types for the project."""

from .sequence import SequenceType, DNASequence
from .alignment import Alignment
from .state import State, StateRole, START, STOP
from .parameters import BuildConfig
from .results import ViterbiResult, ModelScore, ClassificationResult


__all__ = [
    "SequenceType",
    "DNASequence",
    "Alignment",
    "State",
    "StateRole",
    "START",
    "STOP",
    "BuildConfig",
    "ViterbiResult",
    "ModelScore",
    "ClassificationResult",
    "parameters",
]
