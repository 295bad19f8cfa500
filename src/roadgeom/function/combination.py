"""Piecewise, pointwise-combined and sectioned univariate functions."""

from __future__ import annotations

import logging
import math
from typing import Callable, List, Optional, Sequence

from roadgeom.config import DEFAULT_CONFIG
from roadgeom.container import ConcatenationContainer
from roadgeom.function.univariate import (
    ConstantFunction,
    LinearFunction,
    PolynomialFunction,
    UnivariateFunction,
)
from roadgeom.range import BoundType, Range, intersection_of, span_of
from roadgeom.result import Err, Ok, Result

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = DEFAULT_CONFIG.number_tolerance


def _require_sorted(starts: Sequence[float]) -> None:
    if any(not math.isfinite(s) for s in starts):
        raise ValueError("start values must be finite")
    if any(b < a for a, b in zip(starts, starts[1:])):
        raise ValueError(f"start values must be sorted ascending, got {list(starts)!r}")


class ConcatenatedFunction(UnivariateFunction):
    """Piecewise function whose members are placed along one absolute axis.

    ``value`` resolves members strictly; ``value_in_fuzzy`` resolves with the
    given tolerance so that slightly misplaced segment boundaries still find
    a member.
    """

    def __init__(self, member_functions: Sequence[UnivariateFunction],
                 absolute_domains: Sequence[Range], absolute_starts: Sequence[float],
                 tolerance: float = DEFAULT_TOLERANCE):
        self.container: ConcatenationContainer[UnivariateFunction] = ConcatenationContainer(
            member_functions, absolute_domains, absolute_starts, tolerance)
        self.domain = self.container.domain

    @property
    def members(self) -> List[UnivariateFunction]:
        return self.container.members

    def value_unbounded(self, x: float) -> Result[float]:
        return self.container.strict_select_member(x).and_then(
            lambda request: request.member.value_unbounded(request.local_parameter))

    def slope_unbounded(self, x: float) -> Result[float]:
        return self.container.strict_select_member(x).and_then(
            lambda request: request.member.slope_unbounded(request.local_parameter))

    def value_in_fuzzy(self, x: float, tolerance: float) -> Result[float]:
        if not self.domain.fuzzy_contains(x, tolerance):
            return self._outside(x)
        return self.container.fuzzy_select_member(x, tolerance).and_then(
            lambda request: request.member.value_unbounded(request.local_parameter))

    def slope_in_fuzzy(self, x: float, tolerance: float) -> Result[float]:
        if not self.domain.fuzzy_contains(x, tolerance):
            return self._outside(x)
        return self.container.fuzzy_select_member(x, tolerance).and_then(
            lambda request: request.member.slope_unbounded(request.local_parameter))

    @classmethod
    def of_linear_functions(cls, starts: Sequence[float], intercepts: Sequence[float],
                            tolerance: float = DEFAULT_TOLERANCE,
                            prepend_constant: bool = False,
                            append_constant: bool = True) -> "ConcatenatedFunction":
        """Continuous piecewise linear function through ``(starts[i], intercepts[i])``.

        With ``append_constant`` the last intercept is held on
        ``[starts[-1], inf)``; otherwise the function ends at ``starts[-1]``.
        With ``prepend_constant`` the first intercept is held on
        ``(-inf, starts[0])``.
        """

        if not starts:
            raise ValueError("at least one start value is required")
        if len(starts) != len(intercepts):
            raise ValueError("starts and intercepts must have the same size")
        _require_sorted(starts)
        if len(set(starts)) != len(starts):
            raise ValueError("start values must be strictly increasing")
        if not append_constant and len(starts) < 2:
            raise ValueError("at least two points are required without an appended constant")

        functions: List[UnivariateFunction] = []
        domains: List[Range] = []
        absolute_starts: List[float] = []

        if prepend_constant:
            functions.append(ConstantFunction(intercepts[0], Range.less_than(0.0)))
            domains.append(Range.less_than(starts[0]))
            absolute_starts.append(starts[0])

        segment_count = len(starts) - 1
        for i in range(segment_count):
            length = starts[i + 1] - starts[i]
            slope = (intercepts[i + 1] - intercepts[i]) / length
            is_last = i == segment_count - 1 and not append_constant
            if is_last:
                local, absolute = Range.closed(0.0, length), Range.closed(starts[i], starts[i + 1])
            else:
                local, absolute = Range.closed_open(0.0, length), Range.closed_open(starts[i], starts[i + 1])
            functions.append(LinearFunction(slope, intercepts[i], local))
            domains.append(absolute)
            absolute_starts.append(starts[i])

        if append_constant:
            functions.append(ConstantFunction(intercepts[-1], Range.at_least(0.0)))
            domains.append(Range.at_least(starts[-1]))
            absolute_starts.append(starts[-1])

        return cls(functions, domains, absolute_starts, tolerance)

    @classmethod
    def of_polynomial_functions(cls, starts: Sequence[float], coefficients: Sequence[Sequence[float]],
                                tolerance: float = DEFAULT_TOLERANCE,
                                prepend_constant: bool = False,
                                prepend_constant_value: Optional[float] = None,
                                end: Optional[float] = None,
                                append_constant: bool = False,
                                append_constant_value: Optional[float] = None) -> "ConcatenatedFunction":
        """Piecewise polynomial, each member evaluated relative to its own start.

        The last polynomial runs until ``end`` (closed) or to infinity.
        Members of zero length are dropped.
        """

        if not starts:
            raise ValueError("at least one start value is required")
        if len(starts) != len(coefficients):
            raise ValueError("starts and coefficients must have the same size")
        _require_sorted(starts)
        if end is not None and not end >= starts[-1]:
            raise ValueError(f"end {end!r} must not precede the last start {starts[-1]!r}")
        if append_constant and end is None:
            raise ValueError("appending a constant requires an end value")

        boundaries = list(starts) + [math.inf if end is None else end]
        pieces = [(start, boundaries[i + 1] - start, coefficients[i])
                  for i, start in enumerate(starts)]
        kept = [piece for piece in pieces if piece[1] > 0]
        if len(kept) < len(pieces):
            logger.warning("removed %d element(s) with length zero when building a concatenated polynomial",
                           len(pieces) - len(kept))
        if not kept:
            raise ValueError("no polynomial member with a positive length remains")

        functions: List[UnivariateFunction] = []
        domains: List[Range] = []
        absolute_starts: List[float] = []

        if prepend_constant:
            value = prepend_constant_value
            if value is None:
                value = kept[0][2][0] if len(kept[0][2]) else 0.0
            functions.append(ConstantFunction(value, Range.less_than(0.0)))
            domains.append(Range.less_than(kept[0][0]))
            absolute_starts.append(kept[0][0])

        for index, (start, length, coeffs) in enumerate(kept):
            last = index == len(kept) - 1
            upper_bound = BoundType.CLOSED if last and not append_constant else BoundType.OPEN
            functions.append(PolynomialFunction.of(coeffs, length, upper_bound))
            domains.append(Range.closed_x(start, start + length, upper_bound))
            absolute_starts.append(start)

        if append_constant:
            value = append_constant_value
            if value is None:
                last_polynomial = functions[-1]
                value = last_polynomial.value_unbounded(kept[-1][1]).unwrap()
            functions.append(ConstantFunction(value, Range.at_least(0.0)))
            domains.append(Range.at_least(end))
            absolute_starts.append(end)

        return cls(functions, domains, absolute_starts, tolerance)


class StackedFunction(UnivariateFunction):
    """Pointwise combination of several functions.

    With a finite ``default_value`` the domain is the span of all member
    domains and undefined members contribute the default; otherwise the
    domain is the intersection and all members must be defined.
    """

    def __init__(self, member_functions: Sequence[UnivariateFunction],
                 operation: Callable[[List[float]], float],
                 default_value: Optional[float] = None):
        if not member_functions:
            raise ValueError("stacked function requires at least one member")
        if default_value is not None and not math.isfinite(default_value):
            default_value = None
        self.member_functions = list(member_functions)
        self.operation = operation
        self.default_value = default_value
        domains = [f.domain for f in self.member_functions]
        if default_value is not None:
            self.domain = span_of(domains)
        else:
            self.domain = intersection_of(domains)

    @classmethod
    def of_sum(cls, member_functions: Sequence[UnivariateFunction],
               default_value: Optional[float] = None) -> "StackedFunction":
        return cls(member_functions, lambda values: math.fsum(values), default_value)

    def _combine(self, results: List[Result[float]], default: Optional[float]) -> Result[float]:
        values = []
        for result in results:
            if isinstance(result, Err):
                if default is None:
                    return result
                values.append(default)
            else:
                values.append(result.value)
        return Ok(self.operation(values))

    def value_unbounded(self, x: float) -> Result[float]:
        return self._combine([f.value(x) for f in self.member_functions], self.default_value)

    def value_in_fuzzy(self, x: float, tolerance: float) -> Result[float]:
        if not self.domain.fuzzy_contains(x, tolerance):
            return self._outside(x)
        return self._combine([f.value_in_fuzzy(x, tolerance) for f in self.member_functions],
                             self.default_value)

    def slope_unbounded(self, x: float) -> Result[float]:
        default = None if self.default_value is None else 0.0
        return self._combine([f.slope(x) for f in self.member_functions], default)

    def slope_in_fuzzy(self, x: float, tolerance: float) -> Result[float]:
        if not self.domain.fuzzy_contains(x, tolerance):
            return self._outside(x)
        default = None if self.default_value is None else 0.0
        return self._combine([f.slope_in_fuzzy(x, tolerance) for f in self.member_functions], default)


class SectionedUnivariateFunction(UnivariateFunction):
    """Part of ``complete`` cut to ``section`` and re-based to start at 0."""

    def __init__(self, complete: UnivariateFunction, section: Range, tolerance: float = 0.0):
        if not section.has_lower_bound():
            raise ValueError("section must have a lower bound")
        if not complete.domain.fuzzy_encloses(section, tolerance):
            raise ValueError(f"section {section} exceeds the domain {complete.domain} of the complete function")
        self.complete = complete
        self.section = section
        self.section_start = section.lower_endpoint()
        self.domain = section.shift_lower_endpoint_to(0.0)

    def value_unbounded(self, x: float) -> Result[float]:
        return self.complete.value_unbounded(self.section_start + x)

    def slope_unbounded(self, x: float) -> Result[float]:
        return self.complete.slope_unbounded(self.section_start + x)

    def value_in_fuzzy(self, x: float, tolerance: float) -> Result[float]:
        if not self.domain.fuzzy_contains(x, tolerance):
            return self._outside(x)
        return self.complete.value_in_fuzzy(self.section_start + x, tolerance)

    def slope_in_fuzzy(self, x: float, tolerance: float) -> Result[float]:
        if not self.domain.fuzzy_contains(x, tolerance):
            return self._outside(x)
        return self.complete.slope_in_fuzzy(self.section_start + x, tolerance)


__all__ = [
    "ConcatenatedFunction",
    "StackedFunction",
    "SectionedUnivariateFunction",
]
