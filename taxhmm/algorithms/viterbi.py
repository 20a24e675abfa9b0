"""Viterbi decoding of a query against a profile HMM, in the log-odds domain."""

from __future__ import annotations

from typing import Dict, List, Optional

from taxhmm.algorithms.base import Query, SequenceDecoder
from taxhmm.algorithms.hmm import ProfileHMM
from taxhmm.algorithms.log_odds import LogOdds
from taxhmm.errors import NoPathError, QueryTooShortError
from taxhmm.types import SequenceType, ViterbiResult
from taxhmm.types.parameters import GAP_CHARACTERS
from taxhmm.types.state import STOP, State

MIN_OBSERVATIONS = 2


class DPCell(Dict[Optional[State], float]):
    """Candidate log10 scores for one state at one stage, keyed by predecessor.

    A ``None`` predecessor means the path starts here (from START). Impossible
    candidates are never recorded, so every value is a finite log10.
    """

    __slots__ = ("best", "best_predecessor")

    def __init__(self) -> None:
        super().__init__()
        self.best: Optional[float] = None
        self.best_predecessor: Optional[State] = None

    @property
    def best_score(self) -> LogOdds:
        if self.best is None:
            return LogOdds.zero()
        return LogOdds.from_log10(self.best)

    def settle(self) -> LogOdds:
        """Cache the best candidate; on ties the first one recorded wins."""
        if self:
            # max() returns the first of equal maxima
            self.best_predecessor = max(self, key=self.__getitem__)
            self.best = self[self.best_predecessor]
        return self.best_score


DPStage = Dict[State, DPCell]


def _observations(query: Query) -> List[str]:
    """Query symbols with gap markers stripped."""
    residues = query.residues if isinstance(query, SequenceType) else list(query)
    return [symbol.upper() for symbol in residues if symbol not in GAP_CHARACTERS]


class ViterbiDecoder(SequenceDecoder):
    """Most probable state path of a query through a profile HMM.

    Decoding only reads the model and its own DP stages, so one decoder (or
    many) can run concurrently against shared models.
    """

    def _first_stage(self, hmm: ProfileHMM, observation: str) -> DPStage:
        """Seed stage 0 from the initial distribution."""
        stage: DPStage = {}
        for state, log_initial in hmm.log_initial.items():
            log_emission = hmm.log_emit(state, observation)
            if log_initial.is_zero or log_emission is None or log_emission.is_zero:
                continue
            cell = DPCell()
            cell[None] = log_initial.value + log_emission.value
            cell.settle()
            stage[state] = cell
        return stage

    def _next_stage(
        self, hmm: ProfileHMM, prev_stage: DPStage, observation: str
    ) -> DPStage:
        """Extend every surviving path by one observation."""
        stage: DPStage = {}
        for state, emissions, incoming in hmm.decoding_rows():
            log_emission = emissions.get(observation)
            if log_emission is None:
                continue
            cell = DPCell()
            for predecessor, log_transition in incoming:
                prev_cell = prev_stage.get(predecessor)
                if prev_cell is not None:
                    cell[predecessor] = prev_cell.best + log_transition + log_emission
            if not cell:
                continue
            cell.settle()
            stage[state] = cell
        return stage

    def _terminate(self, hmm: ProfileHMM, final_stage: DPStage):
        """Best (score, final emitting state) among transitions into STOP."""
        best_score: Optional[LogOdds] = None
        best_state: Optional[State] = None
        for state, cell in final_stage.items():
            log_to_stop = hmm.log_trans(state, STOP)
            if log_to_stop is None or log_to_stop.is_zero:
                continue
            score = LogOdds.plus(cell.best_score, log_to_stop)
            if best_score is None or score > best_score:
                best_score = score
                best_state = state
        if best_state is None:
            raise NoPathError(
                f"No Viterbi path reaches STOP in model {hmm.name!r}",
                suggestion="The query may be too short or too long for this model.",
            )
        return best_score, best_state

    def _traceback(self, stages: List[DPStage], best_state: State) -> List[State]:
        """Follow cached best predecessors from the final stage back to stage 0."""
        path = [best_state]
        cell = stages[-1][best_state]
        for stage in reversed(stages[:-1]):
            predecessor = cell.best_predecessor
            path.append(predecessor)
            cell = stage[predecessor]
        path.reverse()
        path.append(STOP)
        return path

    def decode(
        self,
        hmm: ProfileHMM,
        query: Query,
        retain_path: bool = True,
    ) -> ViterbiResult:
        """Compute the Viterbi score, and the path if ``retain_path``.

        Without the path only the current stage is kept in memory.

        Raises:
            QueryTooShortError: fewer than 2 symbols remain after removing gaps.
            NoPathError: no path through the model emits the query and reaches STOP.
        """
        observations = _observations(query)
        if len(observations) < MIN_OBSERVATIONS:
            raise QueryTooShortError(len(observations))

        stages: List[DPStage] = [self._first_stage(hmm, observations[0])]
        for observation in observations[1:]:
            if not stages[-1]:
                break
            next_stage = self._next_stage(hmm, stages[-1], observation)
            if retain_path:
                stages.append(next_stage)
            else:
                stages[-1] = next_stage

        if not stages[-1]:
            raise NoPathError(
                f"Query cannot be emitted by model {hmm.name!r}",
                suggestion="Check the query for symbols outside the model alphabet.",
            )

        score, best_state = self._terminate(hmm, stages[-1])
        path = self._traceback(stages, best_state) if retain_path else None
        return ViterbiResult(score=score, path=path)


def score(hmm: ProfileHMM, query: Query) -> LogOdds:
    """Viterbi score of a query, keeping only one DP stage in memory."""
    return ViterbiDecoder().decode(hmm, query, retain_path=False).score


def decode(hmm: ProfileHMM, query: Query) -> ViterbiResult:
    """Viterbi score and state path of a query."""
    return ViterbiDecoder().decode(hmm, query, retain_path=True)


__all__ = ["ViterbiDecoder", "DPCell", "score", "decode"]
