"""Interval algebra over real numbers with tolerant containment.

A :class:`Range` has a lower and an upper side, each of which is closed,
open or absent (unbounded).  Ranges are immutable values.  Comparisons
between ranges are done on *cuts*: every side is mapped to a point just
below or just above its endpoint, which makes open/closed handling a
plain tuple comparison.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

_Cut = Tuple[float, int]


class BoundType(Enum):
    CLOSED = "closed"
    OPEN = "open"
    NONE = "none"


def fuzzy_equals(a: float, b: float, tol: float) -> bool:
    """Return ``True`` if ``|a - b| <= tol`` (infinities compare exactly)."""

    if a == b:
        return True
    if math.isnan(a) and math.isnan(b):
        return True
    return abs(a - b) <= abs(tol)


def fuzzy_less_than_or_equals(a: float, b: float, tol: float) -> bool:
    """Return ``True`` if ``a <= b`` allowing ``a`` to exceed ``b`` by ``tol``."""

    return a <= b + abs(tol) or a == b or (math.isnan(a) and math.isnan(b))


@dataclass(frozen=True)
class Range:
    """Immutable interval with optional, open or closed endpoints."""

    lower: Optional[float]
    upper: Optional[float]
    lower_bound_type: BoundType
    upper_bound_type: BoundType

    def __post_init__(self) -> None:
        for side, value, bound in (("lower", self.lower, self.lower_bound_type),
                                   ("upper", self.upper, self.upper_bound_type)):
            if (value is None) != (bound is BoundType.NONE):
                raise ValueError(f"{side} endpoint and bound type disagree: {value!r}, {bound}")
            if value is not None:
                if not math.isfinite(value):
                    raise ValueError(f"{side} endpoint must be finite, got {value!r}")
                object.__setattr__(self, side, float(value))
        if self._lower_cut() > self._upper_cut():
            raise ValueError(f"invalid range: lower endpoint {self.lower!r} exceeds upper endpoint {self.upper!r}")

    # factories

    @classmethod
    def closed(cls, lower: float, upper: float) -> "Range":
        return cls(lower, upper, BoundType.CLOSED, BoundType.CLOSED)

    @classmethod
    def open(cls, lower: float, upper: float) -> "Range":
        return cls(lower, upper, BoundType.OPEN, BoundType.OPEN)

    @classmethod
    def closed_open(cls, lower: float, upper: float) -> "Range":
        return cls(lower, upper, BoundType.CLOSED, BoundType.OPEN)

    @classmethod
    def open_closed(cls, lower: float, upper: float) -> "Range":
        return cls(lower, upper, BoundType.OPEN, BoundType.CLOSED)

    @classmethod
    def at_least(cls, lower: float) -> "Range":
        return cls(lower, None, BoundType.CLOSED, BoundType.NONE)

    @classmethod
    def greater_than(cls, lower: float) -> "Range":
        return cls(lower, None, BoundType.OPEN, BoundType.NONE)

    @classmethod
    def at_most(cls, upper: float) -> "Range":
        return cls(None, upper, BoundType.NONE, BoundType.CLOSED)

    @classmethod
    def less_than(cls, upper: float) -> "Range":
        return cls(None, upper, BoundType.NONE, BoundType.OPEN)

    @classmethod
    def all(cls) -> "Range":
        return cls(None, None, BoundType.NONE, BoundType.NONE)

    @classmethod
    def closed_x(cls, lower: float, upper: float, upper_bound_type: BoundType) -> "Range":
        """Closed lower endpoint with a selectable upper side.

        An infinite ``upper`` yields an unbounded upper side.
        """

        if math.isinf(upper) and upper > 0:
            return cls.at_least(lower)
        return cls(lower, upper, BoundType.CLOSED, upper_bound_type)

    @classmethod
    def of(cls, lower: Optional[float], upper: Optional[float]) -> "Range":
        """Closed range where ``None`` marks an unbounded side."""

        return cls(lower, upper,
                   BoundType.NONE if lower is None else BoundType.CLOSED,
                   BoundType.NONE if upper is None else BoundType.CLOSED)

    # cuts

    def _lower_cut(self) -> _Cut:
        if self.lower_bound_type is BoundType.NONE:
            return (-math.inf, 0)
        return (self.lower, 0 if self.lower_bound_type is BoundType.CLOSED else 1)

    def _upper_cut(self) -> _Cut:
        if self.upper_bound_type is BoundType.NONE:
            return (math.inf, 1)
        return (self.upper, 1 if self.upper_bound_type is BoundType.CLOSED else 0)

    @staticmethod
    def _from_cuts(lower: _Cut, upper: _Cut) -> "Range":
        if math.isinf(lower[0]):
            lower_value, lower_type = None, BoundType.NONE
        else:
            lower_value, lower_type = lower[0], BoundType.CLOSED if lower[1] == 0 else BoundType.OPEN
        if math.isinf(upper[0]):
            upper_value, upper_type = None, BoundType.NONE
        else:
            upper_value, upper_type = upper[0], BoundType.CLOSED if upper[1] == 1 else BoundType.OPEN
        return Range(lower_value, upper_value, lower_type, upper_type)

    # queries

    def has_lower_bound(self) -> bool:
        return self.lower_bound_type is not BoundType.NONE

    def has_upper_bound(self) -> bool:
        return self.upper_bound_type is not BoundType.NONE

    def lower_endpoint_or_none(self) -> Optional[float]:
        return self.lower

    def upper_endpoint_or_none(self) -> Optional[float]:
        return self.upper

    def lower_endpoint(self) -> float:
        if self.lower is None:
            raise ValueError("range has no lower bound")
        return self.lower

    def upper_endpoint(self) -> float:
        if self.upper is None:
            raise ValueError("range has no upper bound")
        return self.upper

    def contains(self, value: float) -> bool:
        cut = (value, 0.5)
        return self._lower_cut() < cut < self._upper_cut()

    def __contains__(self, value: float) -> bool:
        return self.contains(value)

    def is_empty(self) -> bool:
        return self._lower_cut() == self._upper_cut()

    def length(self) -> float:
        """Distance between the endpoints, infinite if a side is unbounded."""

        if not (self.has_lower_bound() and self.has_upper_bound()):
            return math.inf
        return self.upper - self.lower

    difference = length

    def encloses(self, other: "Range") -> bool:
        return self._lower_cut() <= other._lower_cut() and other._upper_cut() <= self._upper_cut()

    def is_connected(self, other: "Range") -> bool:
        return self._lower_cut() <= other._upper_cut() and other._lower_cut() <= self._upper_cut()

    def intersection(self, other: "Range") -> "Range":
        if not self.is_connected(other):
            raise ValueError(f"ranges {self} and {other} are not connected")
        return Range._from_cuts(max(self._lower_cut(), other._lower_cut()),
                                min(self._upper_cut(), other._upper_cut()))

    def span(self, other: "Range") -> "Range":
        return Range._from_cuts(min(self._lower_cut(), other._lower_cut()),
                                max(self._upper_cut(), other._upper_cut()))

    def join(self, other: "Range") -> "Range":
        if not self.is_connected(other):
            raise ValueError(f"ranges {self} and {other} are not connected")
        return self.span(other)

    # transformations

    def shift(self, delta: float) -> "Range":
        return Range(None if self.lower is None else self.lower + delta,
                     None if self.upper is None else self.upper + delta,
                     self.lower_bound_type, self.upper_bound_type)

    def shift_lower_endpoint_to(self, value: float) -> "Range":
        return self.shift(value - self.lower_endpoint())

    def widened(self, tol: float) -> "Range":
        tol = abs(tol)
        return Range(None if self.lower is None else self.lower - tol,
                     None if self.upper is None else self.upper + tol,
                     self.lower_bound_type, self.upper_bound_type)

    # tolerant comparisons

    def fuzzy_contains(self, value: float, tol: float) -> bool:
        """Containment with both endpoints relaxed by ``tol``; bound types are ignored."""

        if math.isnan(value):
            return False
        if not self.has_lower_bound() and not self.has_upper_bound():
            return value in self
        if self.has_lower_bound() and not fuzzy_less_than_or_equals(self.lower, value, tol):
            return False
        if self.has_upper_bound() and not fuzzy_less_than_or_equals(value, self.upper, tol):
            return False
        return True

    def fuzzy_encloses(self, other: "Range", tol: float) -> bool:
        return self.widened(tol).encloses(other)

    def arrange(self, step: float, include_closed_endpoint: bool = False,
                tolerance: float = 0.0) -> List[float]:
        """Sample the range from its lower endpoint with ``step`` spacing.

        If ``include_closed_endpoint`` is set, the (closed) upper endpoint is
        appended unless the last sample already lies within ``tolerance``.
        """

        if not (self.has_lower_bound() and self.has_upper_bound()):
            raise ValueError("arranging values requires a bounded range")
        if not (step > 0 and math.isfinite(step)):
            raise ValueError(f"step must be positive and finite, got {step!r}")
        if include_closed_endpoint and self.upper_bound_type is not BoundType.CLOSED:
            raise ValueError("including the endpoint requires a closed upper bound")

        count = int(math.floor(self.length() / step))
        values = [self.lower + i * step for i in range(count + 1)]
        if self.lower_bound_type is BoundType.OPEN:
            values = values[1:]
        if self.upper_bound_type is BoundType.OPEN and values and values[-1] >= self.upper:
            values = values[:-1]
        if include_closed_endpoint and (not values or not fuzzy_equals(values[-1], self.upper, tolerance)):
            values.append(self.upper)
        return values

    def __str__(self) -> str:
        left = "(-inf" if self.lower is None else ("[" if self.lower_bound_type is BoundType.CLOSED else "(") + repr(self.lower)
        right = "+inf)" if self.upper is None else repr(self.upper) + ("]" if self.upper_bound_type is BoundType.CLOSED else ")")
        return f"{left}..{right}"


def span_of(ranges: Iterable[Range]) -> Range:
    """Return the smallest range enclosing all ``ranges``."""

    items = list(ranges)
    if not items:
        raise ValueError("span of an empty set of ranges is undefined")
    result = items[0]
    for item in items[1:]:
        result = result.span(item)
    return result


def intersection_of(ranges: Iterable[Range]) -> Range:
    """Return the range common to all ``ranges``."""

    items = list(ranges)
    if not items:
        raise ValueError("intersection of an empty set of ranges is undefined")
    result = items[0]
    for item in items[1:]:
        result = result.intersection(item)
    return result


def union_of(ranges: Iterable[Range]) -> List[Range]:
    """Merge ``ranges`` into a sorted list of pairwise disconnected ranges."""

    items = sorted((r for r in ranges if not r.is_empty()), key=lambda r: r._lower_cut())
    merged: List[Range] = []
    for item in items:
        if merged and merged[-1].is_connected(item):
            merged[-1] = merged[-1].span(item)
        else:
            merged.append(item)
    return merged


def _contiguity_problem(first: Range, second: Range) -> Optional[str]:
    if not first.is_connected(second):
        return f"ranges {first} and {second} leave a gap"
    overlap = first.intersection(second)
    if not overlap.is_empty() and overlap.length() > 0:
        return f"ranges {first} and {second} overlap by more than a point"
    if second._lower_cut() < first._lower_cut():
        return f"ranges {first} and {second} are not sorted"
    return None


def is_contiguous(ranges: Sequence[Range]) -> bool:
    """Return ``True`` if consecutive ranges touch without gaps or real overlap."""

    return all(_contiguity_problem(a, b) is None for a, b in zip(ranges, ranges[1:]))


def check_contiguous(ranges: Sequence[Range]) -> None:
    """Raise ``ValueError`` describing the first pair that breaks contiguity."""

    for a, b in zip(ranges, ranges[1:]):
        problem = _contiguity_problem(a, b)
        if problem is not None:
            raise ValueError(problem)


__all__ = [
    "BoundType",
    "Range",
    "fuzzy_equals",
    "fuzzy_less_than_or_equals",
    "span_of",
    "intersection_of",
    "union_of",
    "is_contiguous",
    "check_contiguous",
]
