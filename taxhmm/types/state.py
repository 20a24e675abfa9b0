"""Profile HMM state identifiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class StateRole(Enum):
    """Role of a state within the profile."""

    START = "START"
    MATCH = "M"
    INSERT = "I"
    DELETE = "D"
    STOP = "STOP"


_ROLE_ORDER = {
    StateRole.START: 0,
    StateRole.MATCH: 1,
    StateRole.INSERT: 1,
    StateRole.DELETE: 1,
    StateRole.STOP: 2,
}
_PREFIXES = {
    StateRole.MATCH.value: StateRole.MATCH,
    StateRole.INSERT.value: StateRole.INSERT,
    StateRole.DELETE.value: StateRole.DELETE,
}


@dataclass(frozen=True)
class State:
    """A profile state: a role plus the alignment column it belongs to.

    INSERT_i sits between MATCH_(i-1) and MATCH_i, so insert indices run from
    0 to the number of columns. DELETE states only exist during construction;
    ``hard`` records whether one was forced by a training gap and does not take
    part in equality or hashing.
    """

    role: StateRole
    index: Optional[int] = None
    hard: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if self.role in (StateRole.START, StateRole.STOP):
            if self.index is not None:
                raise ValueError(f"{self.role.value} state takes no column index")
        elif self.index is None or self.index < 0:
            raise ValueError(
                f"{self.role.name} state needs a non-negative column index, "
                f"got {self.index}"
            )

    @classmethod
    def match(cls, index: int) -> "State":
        return cls(StateRole.MATCH, index)

    @classmethod
    def insert(cls, index: int) -> "State":
        return cls(StateRole.INSERT, index)

    @classmethod
    def delete(cls, index: int, hard: bool = False) -> "State":
        return cls(StateRole.DELETE, index, hard=hard)

    @classmethod
    def parse(cls, name: str) -> "State":
        """Inverse of ``str(state)``, e.g. ``"M_12"`` or ``"STOP"``."""
        if name == StateRole.START.value:
            return START
        if name == StateRole.STOP.value:
            return STOP
        prefix, sep, digits = name.partition("_")
        if not sep or prefix not in _PREFIXES or not digits.isdigit():
            raise ValueError(f"Not a state name: '{name}'")
        return cls(_PREFIXES[prefix], int(digits))

    @property
    def is_start(self) -> bool:
        return self.role is StateRole.START

    @property
    def is_stop(self) -> bool:
        return self.role is StateRole.STOP

    @property
    def is_match(self) -> bool:
        return self.role is StateRole.MATCH

    @property
    def is_insert(self) -> bool:
        return self.role is StateRole.INSERT

    @property
    def is_delete(self) -> bool:
        return self.role is StateRole.DELETE

    @property
    def emits(self) -> bool:
        return self.role in (StateRole.MATCH, StateRole.INSERT)

    def sort_key(self) -> Tuple[int, int, str]:
        """Order states by column, then role, with START first and STOP last."""
        index = -1 if self.index is None else self.index
        return (_ROLE_ORDER[self.role], index, self.role.value)

    def __str__(self) -> str:
        if self.index is None:
            return self.role.value
        return f"{self.role.value}_{self.index}"


START = State(StateRole.START)
STOP = State(StateRole.STOP)


__all__ = ["State", "StateRole", "START", "STOP"]
