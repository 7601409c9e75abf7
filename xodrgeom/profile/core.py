"""Piecewise cubic attribute tracks keyed by arc length.

Superelevation, crossfall, elevation and lane borders are all stored as a
step function of polynomials: a query at ``s`` picks the entry with the
greatest key not exceeding ``s`` and evaluates it at ``ds = s - key``.
"""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass
from enum import Enum
from typing import (
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

T = TypeVar("T")

Entries = Union[Mapping[float, T], Iterable[Tuple[float, T]]]


class StepFunction(Generic[T]):
    """Ordered ``key -> value`` container with nearest-preceding-key lookup.

    A mapping is sorted on construction; an iterable of pairs must already
    be strictly increasing by key.
    """

    def __init__(self, entries: Optional[Entries] = None):
        if entries is None:
            pairs: List[Tuple[float, T]] = []
        elif isinstance(entries, Mapping):
            pairs = sorted((float(k), v) for k, v in entries.items())
        else:
            pairs = [(float(k), v) for k, v in entries]

        keys: List[float] = []
        for key, _ in pairs:
            if not math.isfinite(key):
                raise ValueError(f"step function key must be finite, got {key!r}")
            if keys and key <= keys[-1]:
                raise ValueError(
                    f"step function keys must be strictly increasing: {key} after {keys[-1]}"
                )
            keys.append(key)

        self._keys = keys
        self._values = [value for _, value in pairs]

    def __len__(self) -> int:
        return len(self._keys)

    def __bool__(self) -> bool:
        return bool(self._keys)

    def __iter__(self) -> Iterator[float]:
        return iter(self._keys)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.items())!r})"

    def keys(self) -> List[float]:
        return list(self._keys)

    def values(self) -> List[T]:
        return list(self._values)

    def items(self) -> List[Tuple[float, T]]:
        return list(zip(self._keys, self._values))

    def index_of(self, s: float) -> Optional[int]:
        """Index of the greatest key ``<= s``; the first entry for ``s`` before it."""

        if not self._keys:
            return None
        idx = bisect.bisect_right(self._keys, s) - 1
        return max(idx, 0)

    def find(self, s: float) -> Optional[Tuple[float, T]]:
        idx = self.index_of(s)
        if idx is None:
            return None
        return self._keys[idx], self._values[idx]

    def find_with_next(
        self, s: float
    ) -> Optional[Tuple[Tuple[float, T], Optional[Tuple[float, T]]]]:
        """Return the matched entry together with its successor (or ``None``)."""

        idx = self.index_of(s)
        if idx is None:
            return None
        current = (self._keys[idx], self._values[idx])
        if idx + 1 < len(self._keys):
            return current, (self._keys[idx + 1], self._values[idx + 1])
        return current, None

    def key_after(self, key: float) -> Optional[float]:
        idx = bisect.bisect_right(self._keys, key)
        if idx < len(self._keys):
            return self._keys[idx]
        return None


@dataclass(frozen=True)
class CubicPoly:
    """``a + b*ds + c*ds**2 + d*ds**3``"""

    a: float = 0.0
    b: float = 0.0
    c: float = 0.0
    d: float = 0.0

    def get(self, ds: float) -> float:
        return self.a + ds * (self.b + ds * (self.c + ds * self.d))

    def get_grad(self, ds: float) -> float:
        return self.b + ds * (2.0 * self.c + ds * 3.0 * self.d)


class CubicProfile(StepFunction[CubicPoly]):
    """Attribute track; an empty profile evaluates to ``0`` everywhere."""

    def get(self, s: float) -> float:
        entry = self.find(s)
        if entry is None:
            return 0.0
        key, poly = entry
        return poly.get(s - key)

    def get_grad(self, s: float) -> float:
        entry = self.find(s)
        if entry is None:
            return 0.0
        key, poly = entry
        return poly.get_grad(s - key)

    @classmethod
    def constant(cls, value: float, s0: float = 0.0) -> "CubicProfile":
        return cls([(s0, CubicPoly(a=value))])


class Side(Enum):
    LEFT = "left"
    RIGHT = "right"
    BOTH = "both"


class Crossfall(CubicProfile):
    """Crossfall track with an optional side restriction per interval."""

    def __init__(
        self,
        entries: Optional[Entries] = None,
        sides: Optional[Mapping[float, Side]] = None,
    ):
        super().__init__(entries)
        self.sides: Dict[float, Side] = {}
        for key, side in (sides or {}).items():
            key = float(key)
            if key not in self._keys:
                raise ValueError(f"crossfall side given for unknown key s={key}")
            self.sides[key] = Side(side)

    def get_side(self, s: float) -> Side:
        entry = self.find(s)
        if entry is None:
            return Side.BOTH
        return self.sides.get(entry[0], Side.BOTH)

    def get_crossfall(self, s: float, on_left_side: bool) -> float:
        entry = self.find(s)
        if entry is None:
            return 0.0

        key, poly = entry
        side = self.sides.get(key, Side.BOTH)
        if on_left_side and side is Side.RIGHT:
            return 0.0
        if not on_left_side and side is Side.LEFT:
            return 0.0
        return poly.get(s - key)


@dataclass(frozen=True)
class HeightOffset:
    """Lane surface height at the inner and outer border."""

    inner: float = 0.0
    outer: float = 0.0
