"""Algorithms for the project."""

from .distribution import Distribution, JointTable
from .log_odds import LogOdds, LogOddsTable
from .hmm import ProfileHMM
from .builder import build_profile_hmm
from .base import SequenceDecoder
from .viterbi import ViterbiDecoder, decode, score


__all__ = [
    "Distribution",
    "JointTable",
    "LogOdds",
    "LogOddsTable",
    "ProfileHMM",
    "build_profile_hmm",
    "SequenceDecoder",
    "ViterbiDecoder",
    "decode",
    "score",
]
