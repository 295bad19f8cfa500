"""Functions of two real parameters, including cross-sectional shapes."""

from __future__ import annotations

import abc
import bisect
import math
from typing import Dict, List, Mapping

from roadgeom.errors import DomainError, Location
from roadgeom.function.univariate import UnivariateFunction
from roadgeom.range import Range
from roadgeom.result import Err, Ok, Result


class BivariateFunction(abc.ABC):
    """Function ``f(x, y)`` defined on ``domain_x`` times ``domain_y``."""

    domain_x: Range
    domain_y: Range

    @abc.abstractmethod
    def value_unbounded(self, x: float, y: float) -> Result[float]:
        """Evaluate without checking the domains."""

    def _outside(self, x: float, y: float) -> Err:
        return Err(DomainError(
            f"parameters x={x!r}, y={y!r} must be within the domain {self.domain_x} x {self.domain_y}",
            Location(context=type(self).__name__)))

    def value(self, x: float, y: float) -> Result[float]:
        if x not in self.domain_x or y not in self.domain_y:
            return self._outside(x, y)
        return self.value_unbounded(x, y)

    def value_in_fuzzy(self, x: float, y: float, tolerance: float) -> Result[float]:
        if not (self.domain_x.fuzzy_contains(x, tolerance) and self.domain_y.fuzzy_contains(y, tolerance)):
            return self._outside(x, y)
        return self.value_unbounded(x, y)


class PlaneFunction(BivariateFunction):
    """``f(x, y) = slope_x * x + slope_y * y + intercept``."""

    ZERO: "PlaneFunction"

    def __init__(self, slope_x: float, slope_y: float, intercept: float,
                 domain_x: Range = Range.all(), domain_y: Range = Range.all()):
        if not all(math.isfinite(v) for v in (slope_x, slope_y, intercept)):
            raise ValueError("plane coefficients must be finite")
        self.slope_x = float(slope_x)
        self.slope_y = float(slope_y)
        self.intercept = float(intercept)
        self.domain_x = domain_x
        self.domain_y = domain_y

    def value_unbounded(self, x: float, y: float) -> Result[float]:
        return Ok(self.slope_x * x + self.slope_y * y + self.intercept)


PlaneFunction.ZERO = PlaneFunction(0.0, 0.0, 0.0)


class ShapeFunction(BivariateFunction):
    """Cross sections ``x -> f_x(y)`` interpolated linearly along ``x``.

    ``extrapolate_x`` clamps ``x`` to the outermost cross sections;
    ``extrapolate_y`` clamps ``y`` into each cross section's own domain.
    """

    def __init__(self, functions: Mapping[float, UnivariateFunction],
                 extrapolate_x: bool = False, extrapolate_y: bool = False):
        if not functions:
            raise ValueError("shape function requires at least one cross section")
        if any(not math.isfinite(k) for k in functions):
            raise ValueError("cross section positions must be finite")
        self.functions: Dict[float, UnivariateFunction] = {float(k): functions[k] for k in sorted(functions)}
        self.keys: List[float] = list(self.functions)
        self.extrapolate_x = extrapolate_x
        self.extrapolate_y = extrapolate_y
        self.minimum_x = self.keys[0]
        self.maximum_x = self.keys[-1]
        self.domain_x = Range.all() if extrapolate_x else Range.closed(self.minimum_x, self.maximum_x)
        self.domain_y = Range.all()

    def _evaluate_section(self, key: float, y: float) -> Result[float]:
        function = self.functions[key]
        if not self.extrapolate_y:
            return function.value(y)
        domain = function.domain
        if domain.has_lower_bound():
            y = max(y, domain.lower_endpoint())
        if domain.has_upper_bound():
            y = min(y, domain.upper_endpoint())
        return function.value_unbounded(y)

    def value_unbounded(self, x: float, y: float) -> Result[float]:
        if self.extrapolate_x:
            x = min(max(x, self.minimum_x), self.maximum_x)
        if x in self.functions:
            return self._evaluate_section(x, y)

        index = bisect.bisect_left(self.keys, x)
        if index == 0 or index == len(self.keys):
            return self._outside(x, y)
        key_before, key_after = self.keys[index - 1], self.keys[index]
        before = self._evaluate_section(key_before, y)
        if before.is_err():
            return before
        after = self._evaluate_section(key_after, y)
        if after.is_err():
            return after
        ratio = (x - key_before) / (key_after - key_before)
        return Ok(before.value + ratio * (after.value - before.value))


class SectionedBivariateFunction(BivariateFunction):
    """Part of ``complete`` cut to ``section_x`` and ``section_y``, re-based to 0."""

    def __init__(self, complete: BivariateFunction, section_x: Range, section_y: Range = Range.all()):
        if not complete.domain_x.encloses(section_x):
            raise ValueError(f"section {section_x} exceeds the x domain {complete.domain_x}")
        if not complete.domain_y.encloses(section_y):
            raise ValueError(f"section {section_y} exceeds the y domain {complete.domain_y}")
        self.complete = complete
        self.section_x = section_x
        self.section_y = section_y
        self.offset_x = section_x.lower_endpoint() if section_x.has_lower_bound() else 0.0
        self.offset_y = section_y.lower_endpoint() if section_y.has_lower_bound() else 0.0
        self.domain_x = section_x.shift(-self.offset_x)
        self.domain_y = section_y.shift(-self.offset_y)

    def value_unbounded(self, x: float, y: float) -> Result[float]:
        return self.complete.value_unbounded(x + self.offset_x, y + self.offset_y)


__all__ = [
    "BivariateFunction",
    "PlaneFunction",
    "ShapeFunction",
    "SectionedBivariateFunction",
]
