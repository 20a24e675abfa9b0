"""Finalized profile Hidden Markov Model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from taxhmm.errors import IntegrityError
from taxhmm.types.state import State, STOP

from .distribution import Distribution, JointTable
from .log_odds import LogOdds, LogOddsTable, log_odds_distribution

Incoming = Tuple[Tuple[State, LogOdds], ...]
# (state, symbol -> log10 emission, ((predecessor, log10 transition), ...))
DecodingRow = Tuple[State, Dict[str, float], Tuple[Tuple[State, float], ...]]


def _validate_finalized(
    initial: Distribution[State],
    transitions: JointTable[State, State],
    emissions: JointTable[State, str],
) -> None:
    """Check the post-conditions of construction: no START, no DELETE, rows sum to 1."""
    referenced = set(initial) | set(transitions) | transitions.all_minor_keys()
    referenced |= set(emissions)

    leftover_start = sorted(str(s) for s in referenced if s.is_start)
    if leftover_start:
        raise IntegrityError("finalized model", "START state is still referenced")

    leftover_delete = sorted(str(s) for s in referenced if s.is_delete)
    if leftover_delete:
        raise IntegrityError(
            "finalized model", f"DELETE states survive: {leftover_delete}"
        )

    if STOP in transitions or STOP in emissions:
        raise IntegrityError("finalized model", "STOP state must be terminal")

    non_emitting = sorted(str(s) for s in emissions if not s.emits)
    if non_emitting:
        raise IntegrityError(
            "finalized model", f"non-emitting states have emissions: {non_emitting}"
        )

    initial.require_integrity("initial distribution")
    transitions.require_integrity("transition table")
    emissions.require_integrity("emission table")


@dataclass(frozen=True, eq=False)
class ProfileHMM:
    """Profile HMM with linear probability tables and their log-odds mirrors.

    Instances are immutable: the linear tables are private and handed out as
    copies, and the log-odds mirrors are derived once here and never touched
    again.
    """

    name: Optional[str]
    n_columns: int
    n_training_seqs: int
    hard_delete_states: Tuple[State, ...]

    def __init__(
        self,
        initial: Distribution[State],
        transitions: JointTable[State, State],
        emissions: JointTable[State, str],
        name: Optional[str] = None,
        n_columns: int = 0,
        n_training_seqs: int = 0,
        hard_delete_states: Sequence[State] = (),
    ) -> None:
        _validate_finalized(initial, transitions, emissions)

        object.__setattr__(self, "name", name)
        object.__setattr__(self, "n_columns", n_columns)
        object.__setattr__(self, "n_training_seqs", n_training_seqs)
        object.__setattr__(self, "hard_delete_states", tuple(hard_delete_states))

        object.__setattr__(self, "_initial", initial.copy())
        object.__setattr__(self, "_transitions", transitions.copy())
        object.__setattr__(self, "_emissions", emissions.copy())

        object.__setattr__(self, "_log_initial", log_odds_distribution(initial))
        object.__setattr__(self, "_log_transitions", LogOddsTable(transitions))
        object.__setattr__(self, "_log_emissions", LogOddsTable(emissions))
        object.__setattr__(self, "_incoming", self._index_incoming())
        object.__setattr__(self, "_decoding_rows", self._index_decoding_rows())

    def __reduce__(self):
        # The log-odds views are read-only proxies; rebuild them on unpickling.
        return (
            self.__class__,
            (
                self._initial,
                self._transitions,
                self._emissions,
                self.name,
                self.n_columns,
                self.n_training_seqs,
                self.hard_delete_states,
            ),
        )

    def _index_incoming(self) -> Dict[State, Incoming]:
        incoming: Dict[State, List[Tuple[State, LogOdds]]] = {}
        for source, row in self._log_transitions.items():
            for dest, log_prob in row.items():
                incoming.setdefault(dest, []).append((source, log_prob))
        return {dest: tuple(preds) for dest, preds in incoming.items()}

    def _index_decoding_rows(self) -> Tuple[DecodingRow, ...]:
        rows = []
        for state in self._emissions:
            emissions = {
                symbol: log_prob.value
                for symbol, log_prob in self._log_emissions[state].items()
                if not log_prob.is_zero
            }
            incoming = tuple(
                (source, log_prob.value)
                for source, log_prob in self.incoming(state)
                if not log_prob.is_zero
            )
            rows.append((state, emissions, incoming))
        return tuple(rows)

    # Linear-domain tables, as copies.

    def initial_distribution(self) -> Distribution[State]:
        return self._initial.copy()

    def transition_table(self) -> JointTable[State, State]:
        return self._transitions.copy()

    def emission_table(self) -> JointTable[State, str]:
        return self._emissions.copy()

    # Log-odds views used by decoding.

    @property
    def log_initial(self) -> Mapping[State, LogOdds]:
        return self._log_initial

    @property
    def log_transitions(self) -> LogOddsTable:
        return self._log_transitions

    @property
    def log_emissions(self) -> LogOddsTable:
        return self._log_emissions

    def log_trans(self, state_from: State, state_to: State) -> Optional[LogOdds]:
        """LogOdds of a transition, or None if the transition is not defined."""
        return self._log_transitions.lookup(state_from, state_to)

    def log_emit(self, state: State, symbol: str) -> Optional[LogOdds]:
        """LogOdds of an emission, or None if the state cannot emit the symbol."""
        return self._log_emissions.lookup(state, symbol)

    def incoming(self, state: State) -> Incoming:
        """Defined transitions into ``state`` as (predecessor, LogOdds) pairs."""
        return self._incoming.get(state, ())

    def decoding_rows(self) -> Tuple[DecodingRow, ...]:
        """Per emitting state, its nonzero log10 emissions and incoming transitions.

        Zero-probability entries are left out, so every value is a finite log10.
        """
        return self._decoding_rows

    # Structure.

    def states(self) -> List[State]:
        found = set(self._initial) | set(self._transitions)
        found |= self._transitions.all_minor_keys() | set(self._emissions)
        return sorted(found, key=State.sort_key)

    def emitting_states(self) -> List[State]:
        return list(self._emissions)

    def match_states(self) -> List[State]:
        return [s for s in self.states() if s.is_match]

    def insert_states(self) -> List[State]:
        return [s for s in self.states() if s.is_insert]

    @property
    def n_match_states(self) -> int:
        return len(self.match_states())

    @property
    def n_insert_states(self) -> int:
        return len(self.insert_states())

    @property
    def n_hard_delete_states(self) -> int:
        return len(self.hard_delete_states)

    def is_hard_delete_state(self, state: State) -> bool:
        return state in self.hard_delete_states

    def emission_alphabet(self) -> List[str]:
        return sorted(self._emissions.all_minor_keys())

    def generate(
        self, rng: Optional[np.random.Generator] = None
    ) -> Tuple[str, List[State]]:
        """Sample one sequence and its state path (ending with STOP) from the model."""
        rng = rng if rng is not None else np.random.default_rng()
        symbols: List[str] = []
        path: List[State] = []
        state = self._initial.sample(rng.random())
        while not state.is_stop:
            symbols.append(self._emissions[state].sample(rng.random()))
            path.append(state)
            state = self._transitions[state].sample(rng.random())
        path.append(STOP)
        return "".join(symbols), path

    def describe_state(self, state: State) -> str:
        lines = [f"STATE = {state}", "  Transitions:"]
        for dest, prob in self._transitions.get(state, {}).items():
            lines.append(f"    --> {dest} = {prob:.6f}")
        lines.append("  Emissions:")
        for symbol, prob in self._emissions.get(state, {}).items():
            lines.append(f"    {symbol}: {prob:.6f}")
        return "\n".join(lines)

    def __str__(self) -> str:
        class_name = self.__class__.__name__
        return (
            f"{class_name} (\n"
            f"   name: {self.name}\n"
            f"   columns: {self.n_columns}, training sequences: {self.n_training_seqs}\n"
            f"   match states: {self.n_match_states}, insert states: "
            f"{self.n_insert_states}, hard deletes: {self.n_hard_delete_states}\n"
            f")"
        )


__all__ = ["ProfileHMM"]
