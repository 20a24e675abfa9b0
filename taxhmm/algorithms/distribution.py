"""
Discrete probability distributions used to assemble profile HMMs.

``Distribution`` maps keys (states or symbols) to linear probabilities and offers the
redistribution operations model construction relies on: taxing existing mass,
spreading leftover mass uniformly or in linear descent, and pseudocount smoothing.
``JointTable`` nests one ``Distribution`` per major key; transition tables
(state -> state) and emission tables (state -> symbol) are both JointTables.

Both are insertion-ordered dicts, so iteration order (and hence sampling and
tie-breaking) is deterministic.
"""

from __future__ import annotations

from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Set, TypeVar

from taxhmm.errors import IntegrityError
from taxhmm.types.parameters import INTEGRITY_TOLERANCE

K = TypeVar("K", bound=Hashable)
V = TypeVar("V", bound=Hashable)


class Distribution(Dict[K, float]):
    """Mapping key -> probability whose values sum to 1 once finalized."""

    @classmethod
    def uniform(cls, keys: Iterable[K]) -> "Distribution[K]":
        """All keys equiprobable."""
        keys = list(dict.fromkeys(keys))
        if not keys:
            raise ValueError("Cannot build a uniform distribution over no keys.")
        prob = 1.0 / len(keys)
        return cls((key, prob) for key in keys)

    def copy(self) -> "Distribution[K]":
        return type(self)(self)

    def total(self) -> float:
        return sum(self.values())

    def remaining(self) -> float:
        """Probability mass not yet assigned to any key."""
        return 1.0 - self.total()

    def check_integrity(self) -> Optional[str]:
        """Return None if the values sum to 1 (within tolerance), otherwise a diagnostic."""
        total = self.total()
        if abs(1.0 - total) < INTEGRITY_TOLERANCE:
            return None
        return f"Excessive delta: {total} should be closer to 1\n{self}"

    def require_integrity(self, context: str) -> None:
        err = self.check_integrity()
        if err is not None:
            raise IntegrityError(context, err)

    def tax(self, rate: float) -> None:
        """Scale every value by (1 - rate), freeing ``rate`` of the mass.

        E.g. with rate 0.1 a probability of 0.5 becomes 0.45.
        """
        for key in self:
            self[key] *= 1.0 - rate

    def _missing(self, keys: Iterable[K]) -> List[K]:
        return [key for key in dict.fromkeys(keys) if key not in self]

    def assign_remaining_equally(self, missing_keys: Iterable[K]) -> None:
        """Spread the leftover mass uniformly over keys not yet present."""
        missing = self._missing(missing_keys)
        if not missing:
            return
        remaining = self._checked_remaining()
        prob = remaining / len(missing)
        for key in missing:
            self[key] = prob

    def assign_remaining_linear_descent(self, ordered_missing_keys: Sequence[K]) -> None:
        """Spread the leftover mass in linearly decreasing shares.

        With n keys the shares are n : n-1 : ... : 1 over the series sum
        n(n+1)/2, so the first key receives the largest share.
        """
        missing = self._missing(ordered_missing_keys)
        if not missing:
            return
        remaining = self._checked_remaining()
        n = len(missing)
        denom = n * (n + 1) / 2
        for weight, key in zip(range(n, 0, -1), missing):
            self[key] = remaining * weight / denom

    def set_pseudocounts(self, all_possible_keys: Iterable[K], total_mass: float) -> None:
        """Tax present keys by ``total_mass`` and share it among absent keys.

        No-op when every possible key is already present.
        """
        missing = self._missing(all_possible_keys)
        if not missing:
            return
        self.tax(total_mass)
        prob = total_mass / len(missing)
        for key in missing:
            self[key] = prob

    def sample(self, draw: float) -> K:
        """Pick a key given a uniform draw in [0, 1), walking keys in order."""
        if not 0.0 <= draw < 1.0:
            raise ValueError(f"draw must be in [0, 1), got {draw}")
        last_viable = None
        for key, prob in self.items():
            if prob > draw:
                return key
            draw -= prob
            if prob > 0.0:
                last_viable = key
        # Rounding can leave a sliver of mass past the last key
        if last_viable is None:
            raise ValueError("Cannot sample from a distribution with no mass.")
        return last_viable

    def _checked_remaining(self) -> float:
        remaining = self.remaining()
        if remaining < -INTEGRITY_TOLERANCE or remaining > 1.0 + INTEGRITY_TOLERANCE:
            raise IntegrityError(
                "distribution", f"remaining mass {remaining} outside [0, 1]"
            )
        return max(0.0, remaining)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict.__repr__(self)})"

    def __str__(self) -> str:
        lines = [f"{type(self).__name__}:"]
        lines.extend(f"  {key} = {prob}" for key, prob in self.items())
        return "\n".join(lines)


class JointTable(Dict[K, Distribution[V]]):
    """Mapping major key -> Distribution over minor keys."""

    def copy(self) -> "JointTable[K, V]":
        """Deep copy: nested distributions are copied too."""
        return type(self)((major, dist.copy()) for major, dist in self.items())

    def get_prob(self, major: K, minor: V) -> Optional[float]:
        dist = self.get(major)
        if dist is None:
            return None
        return dist.get(minor)

    def put(self, major: K, minor: V, prob: float) -> None:
        self.ensure_major_key(major)[minor] = prob

    def contains(self, major: K, minor: V) -> bool:
        return major in self and minor in self[major]

    def ensure_major_key(self, major: K) -> Distribution[V]:
        dist = self.get(major)
        if dist is None:
            dist = Distribution()
            self[major] = dist
        return dist

    def unmap(self, major: K, minor: V) -> None:
        """Remove one entry, keeping the major key even if its row becomes empty."""
        dist = self.get(major)
        if dist is not None:
            dist.pop(minor, None)

    def all_minor_keys(self) -> Set[V]:
        keys: Set[V] = set()
        for dist in self.values():
            keys.update(dist)
        return keys

    def check_integrity(self) -> Optional[str]:
        """Return None if every row sums to 1, otherwise the diagnostics of failing rows."""
        errors = []
        for major, dist in self.items():
            err = dist.check_integrity()
            if err is not None:
                errors.append(f"for major key {major}: {err}")
        return "\n".join(errors) if errors else None

    def require_integrity(self, context: str) -> None:
        err = self.check_integrity()
        if err is not None:
            raise IntegrityError(context, err)

    def __str__(self) -> str:
        lines = [f"{type(self).__name__}:"]
        lines.extend(f"  for major key {major}: {dist}" for major, dist in self.items())
        return "\n".join(lines)


__all__ = ["Distribution", "JointTable"]
