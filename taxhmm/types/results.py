"""Decoding and classification result data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import pandas as pd

from .state import State

if TYPE_CHECKING:
    from taxhmm.algorithms.log_odds import LogOdds


@dataclass(frozen=True)
class ViterbiResult:
    """Best-path score of one query against one model.

    Attributes:
        score: log10 probability of the best path, as a LogOdds
        path: emitting states of the best path followed by STOP, or None when
            only the score was requested
    """

    score: "LogOdds"
    path: Optional[List[State]] = None

    def path_string(self) -> str:
        if self.path is None:
            return "No state path"
        return " => ".join(str(state) for state in self.path)

    def __str__(self) -> str:
        return f"Viterbi analysis: log odds = {self.score}\n  {self.path_string()}"


@dataclass(frozen=True)
class ModelScore:
    """Outcome of scoring the query against a single labelled model."""

    label: str
    score: Optional["LogOdds"] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.score is not None


@dataclass(frozen=True)
class ClassificationResult:
    """Best group for one query across a gallery of models."""

    best_label: Optional[str]
    best_score: Optional["LogOdds"]
    per_model: List[ModelScore] = field(default_factory=list)

    @property
    def n_evaluated(self) -> int:
        return len(self.per_model)

    @property
    def n_failed(self) -> int:
        return sum(1 for result in self.per_model if not result.succeeded)

    def to_frame(self) -> pd.DataFrame:
        """Per-model scores as a DataFrame, best score first, failures last."""
        records = [
            {
                "label": result.label,
                "score": result.score.value if result.score is not None else None,
                "error": result.error,
            }
            for result in self.per_model
        ]
        frame = pd.DataFrame.from_records(records, columns=["label", "score", "error"])
        return frame.sort_values(
            by=["score", "label"], ascending=[False, True], na_position="last"
        ).reset_index(drop=True)


__all__ = ["ViterbiResult", "ModelScore", "ClassificationResult"]
