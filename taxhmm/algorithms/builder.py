"""
Construction of profile HMMs from a reference multiple-sequence alignment.

Training is a single frequency-counting pass over the alignment, not EM. The
process follows these broad steps:

- Match emissions: per column, count non-gap symbols, normalize, then smooth with
  pseudocounts over the full alphabet.
- Skeleton transitions: at every column boundary (including the virtual ones before
  the first and after the last column) wire MATCH/START -> INSERT -> next MATCH/STOP,
  with an INSERT self-loop and a uniform INSERT emission distribution.
- Hard deletes: where training rows open gap runs, add a DELETE state whose
  outgoing probabilities follow the observed run-length histogram.
- Soft deletes: every other boundary gets a low-probability DELETE shortcut to all
  downstream MATCH states and STOP, nearer targets favoured.
- Delete elimination: DELETE states do not emit, so each source -> DELETE -> target
  path is folded into a direct source -> target edge and the DELETE state dropped.
- START folding: START's outgoing row becomes the initial distribution.

The resulting tables are handed to ``ProfileHMM``, which derives the log-odds
mirrors once.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Optional, Sequence, Union

from taxhmm.errors import ConstructionError, IntegrityError, MalformedInputError
from taxhmm.types import Alignment
from taxhmm.types.parameters import BuildConfig
from taxhmm.types.state import START, STOP, State

from .distribution import Distribution, JointTable
from .hmm import ProfileHMM

logger = logging.getLogger(__name__)

TransitionTable = JointTable[State, State]
EmissionTable = JointTable[State, str]


def _match_or_start(col: int) -> State:
    """MATCH state of a column, or START for the virtual column -1."""
    return START if col < 0 else State.match(col)


def _match_or_stop(col: int, n_cols: int) -> State:
    """MATCH state of a column, or STOP for columns past the end."""
    return STOP if col >= n_cols else State.match(col)


def _build_match_emissions(
    alignment: Alignment, emissions: EmissionTable, config: BuildConfig
) -> None:
    """Frequency-count each column and apply pseudocount smoothing."""
    for col in range(alignment.columns):
        match_state = State.match(col)
        counts: Counter = alignment.column_counts(col)
        total = sum(counts.values())
        if total == 0:
            # Fully gapped column: nothing to learn from, so no preference
            emissions[match_state] = Distribution.uniform(config.alphabet)
            continue

        dist = emissions.ensure_major_key(match_state)
        for symbol in sorted(counts):
            dist[symbol] = counts[symbol] / total
        dist.set_pseudocounts(config.alphabet, config.pseudocount_mass)
        dist.require_integrity(f"emissions of {match_state} (column {col})")


def _build_skeleton(
    n_cols: int,
    transitions: TransitionTable,
    emissions: EmissionTable,
    config: BuildConfig,
) -> None:
    """Wire MATCH -> INSERT -> MATCH around every column boundary."""
    p_match_to_insert = config.p_match_to_insert
    p_insert_to_self = config.p_insert_to_self

    for from_col in range(-1, n_cols):
        to_col = from_col + 1
        from_state = _match_or_start(from_col)
        to_state = _match_or_stop(to_col, n_cols)
        insert_state = State.insert(to_col)

        transitions.put(from_state, insert_state, p_match_to_insert)
        transitions.put(insert_state, insert_state, p_insert_to_self)
        transitions.put(insert_state, to_state, 1.0 - p_insert_to_self)
        emissions.ensure_major_key(insert_state).assign_remaining_equally(
            config.alphabet
        )

        # Adjusted below if a DELETE state leaves from_state
        transitions.put(from_state, to_state, 1.0 - p_match_to_insert)


def _add_hard_deletes(
    alignment: Alignment, transitions: TransitionTable
) -> List[State]:
    """Add a DELETE state at every boundary where training rows open gap runs.

    The incoming probability is the number of distinct run lengths opening at the
    boundary over the number of rows, capped so MATCH -> MATCH stays non-negative.
    Outgoing probabilities follow the run-length histogram: a run of length k
    skips to the MATCH k columns ahead, or STOP past the end.
    """
    n_cols = alignment.columns
    n_rows = alignment.num_sequences
    run_lengths_by_col = alignment.gap_run_lengths_by_start_column()
    hard_deletes: List[State] = []

    for to_col in range(n_cols):
        run_lengths: Counter = run_lengths_by_col[to_col]
        if not run_lengths:
            continue

        from_state = _match_or_start(to_col - 1)
        to_state = State.match(to_col)
        delete_state = State.delete(to_col, hard=True)
        hard_deletes.append(delete_state)

        p_emit_emit = transitions.get_prob(from_state, to_state)
        p_to_delete = min(len(run_lengths) / n_rows, p_emit_emit)
        transitions.put(from_state, delete_state, p_to_delete)
        transitions.put(from_state, to_state, p_emit_emit - p_to_delete)
        transitions[from_state].require_integrity(f"transitions from {from_state}")

        n_run_opens = sum(run_lengths.values())
        for run_length in sorted(run_lengths):
            dest_state = _match_or_stop(to_col + run_length, n_cols)
            transitions.put(
                delete_state, dest_state, run_lengths[run_length] / n_run_opens
            )
        transitions[delete_state].require_integrity(f"transitions from {delete_state}")

    return hard_deletes


def _add_soft_deletes(
    n_cols: int, transitions: TransitionTable, config: BuildConfig
) -> int:
    """Give every boundary without a hard DELETE a low-probability skip-ahead state."""
    n_added = 0
    for col in range(n_cols):
        soft_delete = State.delete(col)
        if soft_delete in transitions:
            continue

        from_state = _match_or_start(col - 1)
        from_row = transitions[from_state]
        from_row.tax(config.soft_delete_tax)
        from_row[soft_delete] = config.soft_delete_tax
        from_row.require_integrity(f"transitions from {from_state}")

        downstream = [State.match(c) for c in range(col + 1, n_cols)]
        downstream.append(STOP)
        shortcut: Distribution[State] = Distribution()
        shortcut.assign_remaining_linear_descent(downstream)
        shortcut.require_integrity(f"transitions from {soft_delete}")
        transitions[soft_delete] = shortcut
        n_added += 1
    return n_added


def _eliminate_deletes(transitions: TransitionTable) -> None:
    """Replace every source -> DELETE -> target path with a direct edge."""
    for source, row in transitions.items():
        if source.is_delete:
            continue
        delete_dests = [dest for dest in row if dest.is_delete]
        if not delete_dests:
            continue
        if len(delete_dests) > 1 or not (source.is_match or source.is_start):
            raise IntegrityError(
                f"transitions from {source}",
                f"enters DELETE states {[str(d) for d in delete_dests]}; "
                "only one, from a MATCH or START state, is allowed",
            )

        middle = delete_dests[0]
        p_to_middle = row[middle]
        for dest, p_from_middle in transitions[middle].items():
            row[dest] = row.get(dest, 0.0) + p_to_middle * p_from_middle
        transitions.unmap(source, middle)
        row.require_integrity(f"transitions from {source} after delete elimination")

    for state in [s for s in transitions if s.is_delete]:
        del transitions[state]


def _fold_start(transitions: TransitionTable) -> Distribution[State]:
    """Turn START's outgoing row into the initial distribution."""
    initial = transitions.pop(START)
    for row in transitions.values():
        row.pop(START, None)
    return initial


def build_profile_hmm(
    alignment: Union[Alignment, Sequence[str]],
    config: Optional[BuildConfig] = None,
    name: Optional[str] = None,
) -> ProfileHMM:
    """Build a finalized profile HMM from a multiple-sequence alignment.

    Raises:
        ConstructionError: if the alignment has no rows or no columns.
        MalformedInputError: if rows differ in length or contain foreign symbols.
        IntegrityError: if a probability row stops summing to 1 (a defect).
    """
    alignment = Alignment.coerce(alignment)
    config = config if config is not None else BuildConfig()
    name = name if name is not None else alignment.name

    if alignment.num_sequences == 0:
        raise ConstructionError(
            f"Alignment {name!r} has no rows",
            suggestion="Skip empty training sets before building models.",
        )
    if alignment.columns == 0:
        raise ConstructionError(f"Alignment {name!r} has no columns")

    foreign = {
        symbol
        for col in range(alignment.columns)
        for symbol in alignment.column_counts(col)
        if symbol not in config.alphabet
    }
    if foreign:
        raise MalformedInputError(
            f"Alignment uses symbols outside the alphabet: {sorted(foreign)}", name
        )

    n_cols = alignment.columns
    transitions: TransitionTable = JointTable()
    emissions: EmissionTable = JointTable()

    logger.debug("%s: emission distributions for MATCH states", name)
    _build_match_emissions(alignment, emissions, config)

    logger.debug("%s: skeleton transitions", name)
    _build_skeleton(n_cols, transitions, emissions, config)

    logger.debug("%s: hard delete states", name)
    hard_deletes = _add_hard_deletes(alignment, transitions)

    logger.debug("%s: soft delete states", name)
    n_soft = _add_soft_deletes(n_cols, transitions, config)

    logger.debug("%s: delete elimination", name)
    _eliminate_deletes(transitions)

    logger.debug("%s: START folding", name)
    initial = _fold_start(transitions)

    logger.debug("%s: log-odds derivation", name)
    model = ProfileHMM(
        initial=initial,
        transitions=transitions,
        emissions=emissions,
        name=name,
        n_columns=n_cols,
        n_training_seqs=alignment.num_sequences,
        hard_delete_states=hard_deletes,
    )
    logger.info(
        "Built profile HMM %s: %d columns, %d training sequences, "
        "%d hard / %d soft delete states",
        name,
        n_cols,
        alignment.num_sequences,
        len(hard_deletes),
        n_soft,
    )
    return model


__all__ = ["build_profile_hmm"]
