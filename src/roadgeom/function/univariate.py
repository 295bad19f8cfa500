"""Functions of one real parameter restricted to a domain."""

from __future__ import annotations

import abc
import math
from typing import List, Sequence

from roadgeom.config import DEFAULT_CONFIG
from roadgeom.errors import DomainError, Location, NumericalDegeneracyError
from roadgeom.range import BoundType, Range
from roadgeom.result import Err, Ok, Result

# tolerance used when evaluating exactly at the endpoints of a domain
ENDPOINT_TOLERANCE = DEFAULT_CONFIG.number_tolerance


def _require_finite(values: Sequence[float], what: str) -> None:
    if any(not math.isfinite(v) for v in values):
        raise ValueError(f"{what} must be finite, got {list(values)!r}")


class UnivariateFunction(abc.ABC):
    """Function ``f(x)`` defined on :attr:`domain`.

    Subclasses implement :meth:`value_unbounded` and :meth:`slope_unbounded`,
    which skip the domain check; the public entry points check membership
    first and report a :class:`DomainError` result when it fails.
    """

    domain: Range

    @abc.abstractmethod
    def value_unbounded(self, x: float) -> Result[float]:
        """Evaluate without checking the domain."""

    @abc.abstractmethod
    def slope_unbounded(self, x: float) -> Result[float]:
        """Evaluate the first derivative without checking the domain."""

    def _outside(self, x: float) -> Err:
        return Err(DomainError(f"parameter x={x!r} must be within the domain {self.domain}",
                               Location(parameter=x, context=type(self).__name__)))

    def value(self, x: float) -> Result[float]:
        if x not in self.domain:
            return self._outside(x)
        return self.value_unbounded(x)

    def value_in_fuzzy(self, x: float, tolerance: float) -> Result[float]:
        if not self.domain.fuzzy_contains(x, tolerance):
            return self._outside(x)
        return self.value_unbounded(x)

    def slope(self, x: float) -> Result[float]:
        if x not in self.domain:
            return self._outside(x)
        return self.slope_unbounded(x)

    def slope_in_fuzzy(self, x: float, tolerance: float) -> Result[float]:
        if not self.domain.fuzzy_contains(x, tolerance):
            return self._outside(x)
        return self.slope_unbounded(x)

    def start_value(self) -> Result[float]:
        if not self.domain.has_lower_bound():
            return Err(DomainError("function has no lower domain bound", Location(context=type(self).__name__)))
        return self.value_in_fuzzy(self.domain.lower_endpoint(), ENDPOINT_TOLERANCE)

    def end_value(self) -> Result[float]:
        if not self.domain.has_upper_bound():
            return Err(DomainError("function has no upper domain bound", Location(context=type(self).__name__)))
        return self.value_in_fuzzy(self.domain.upper_endpoint(), ENDPOINT_TOLERANCE)

    def __add__(self, other: "UnivariateFunction") -> "UnivariateFunction":
        from roadgeom.function.combination import StackedFunction

        if not isinstance(other, UnivariateFunction):
            return NotImplemented
        return StackedFunction.of_sum([self, other])

    def __neg__(self) -> "UnivariateFunction":
        return ScaledFunction(self, -1.0)

    def __sub__(self, other: "UnivariateFunction") -> "UnivariateFunction":
        if not isinstance(other, UnivariateFunction):
            return NotImplemented
        return self + (-other)

    def __mul__(self, factor: float) -> "UnivariateFunction":
        if not isinstance(factor, (int, float)):
            return NotImplemented
        return ScaledFunction(self, float(factor))

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> "UnivariateFunction":
        if not isinstance(divisor, (int, float)):
            return NotImplemented
        if divisor == 0:
            raise ValueError("cannot divide a function by zero")
        return ScaledFunction(self, 1.0 / divisor)


class ScaledFunction(UnivariateFunction):
    """``factor * f(x)`` on the domain of ``f``."""

    def __init__(self, function: UnivariateFunction, factor: float):
        _require_finite([factor], "scale factor")
        self.function = function
        self.factor = factor
        self.domain = function.domain

    def value_unbounded(self, x: float) -> Result[float]:
        return self.function.value_unbounded(x).map(lambda v: self.factor * v)

    def slope_unbounded(self, x: float) -> Result[float]:
        return self.function.slope_unbounded(x).map(lambda v: self.factor * v)

    def value_in_fuzzy(self, x: float, tolerance: float) -> Result[float]:
        return self.function.value_in_fuzzy(x, tolerance).map(lambda v: self.factor * v)

    def slope_in_fuzzy(self, x: float, tolerance: float) -> Result[float]:
        return self.function.slope_in_fuzzy(x, tolerance).map(lambda v: self.factor * v)


class ConstantFunction(UnivariateFunction):
    """``f(x) = value``."""

    def __init__(self, value: float, domain: Range = Range.all()):
        _require_finite([value], "constant value")
        self.constant = float(value)
        self.domain = domain

    def value_unbounded(self, x: float) -> Result[float]:
        return Ok(self.constant)

    def slope_unbounded(self, x: float) -> Result[float]:
        return Ok(0.0)

    def __repr__(self) -> str:
        return f"ConstantFunction({self.constant!r}, domain={self.domain})"


class LinearFunction(UnivariateFunction):
    """``f(x) = slope * x + intercept``."""

    X_AXIS: "LinearFunction"

    def __init__(self, slope: float, intercept: float = 0.0, domain: Range = Range.all()):
        _require_finite([slope, intercept], "linear function coefficients")
        self.slope_value = float(slope)
        self.intercept = float(intercept)
        self.domain = domain

    def value_unbounded(self, x: float) -> Result[float]:
        return Ok(self.slope_value * x + self.intercept)

    def slope_unbounded(self, x: float) -> Result[float]:
        return Ok(self.slope_value)

    @classmethod
    def of_inclusive_y_values_and_unit_slope(cls, intercept: float, y: float) -> "LinearFunction":
        """Line with slope ±1 from ``(0, intercept)`` until it reaches ``y``."""

        slope = math.copysign(1.0, y - intercept)
        end = abs(y - intercept)
        return cls(slope, intercept, Range.closed(0.0, end))

    @classmethod
    def of_inclusive_intercept_and_point(cls, intercept: float, point_x: float, point_y: float) -> "LinearFunction":
        """Line through ``(0, intercept)`` and ``(point_x, point_y)``, closed between both."""

        if point_x == 0:
            raise ValueError("point_x must differ from zero")
        slope = (point_y - intercept) / point_x
        return cls(slope, intercept, Range.closed(min(0.0, point_x), max(0.0, point_x)))

    @classmethod
    def of_inclusive_points(cls, x0: float, y0: float, x1: float, y1: float) -> "LinearFunction":
        """Line through two points, closed between them."""

        if x0 == x1:
            raise ValueError("the points must have distinct x values")
        slope = (y1 - y0) / (x1 - x0)
        intercept = y0 - slope * x0
        return cls(slope, intercept, Range.closed(min(x0, x1), max(x0, x1)))

    @classmethod
    def of_spiral_curvature(cls, start_curvature: float, end_curvature: float, length: float) -> "LinearFunction":
        """Curvature of a clothoid changing linearly over ``length``."""

        return cls.of_inclusive_intercept_and_point(start_curvature, length, end_curvature)

    def __repr__(self) -> str:
        return f"LinearFunction(slope={self.slope_value!r}, intercept={self.intercept!r}, domain={self.domain})"


LinearFunction.X_AXIS = LinearFunction(0.0, 0.0)


class PolynomialFunction(UnivariateFunction):
    """Polynomial with ``coefficients`` in ascending order of degree."""

    def __init__(self, coefficients: Sequence[float], domain: Range = Range.all()):
        if len(coefficients) == 0:
            raise ValueError("polynomial requires at least one coefficient")
        _require_finite(coefficients, "polynomial coefficients")
        self.coefficients: List[float] = [float(c) for c in coefficients]
        self.derivative_coefficients: List[float] = (
            [i * c for i, c in enumerate(self.coefficients)][1:] or [0.0])
        self.domain = domain

    @classmethod
    def of(cls, coefficients: Sequence[float], length: float,
           upper_bound_type: BoundType = BoundType.OPEN) -> "PolynomialFunction":
        """Polynomial defined from 0 over ``length`` (unbounded for an infinite length)."""

        if not length > 0:
            raise ValueError(f"length must be positive, got {length!r}")
        return cls(coefficients, Range.closed_x(0.0, length, upper_bound_type))

    @property
    def degree(self) -> int:
        return len(self.coefficients) - 1

    @staticmethod
    def _horner(coefficients: Sequence[float], x: float) -> float:
        result = 0.0
        for c in reversed(coefficients):
            result = result * x + c
        return result

    def _finite(self, value: float, x: float) -> Result[float]:
        if not math.isfinite(value):
            return Err(NumericalDegeneracyError(f"polynomial evaluates to a non-finite value {value!r}",
                                                Location(parameter=x, context="PolynomialFunction")))
        return Ok(value)

    def value_unbounded(self, x: float) -> Result[float]:
        return self._finite(self._horner(self.coefficients, x), x)

    def slope_unbounded(self, x: float) -> Result[float]:
        return self._finite(self._horner(self.derivative_coefficients, x), x)

    def __repr__(self) -> str:
        return f"PolynomialFunction({self.coefficients!r}, domain={self.domain})"


__all__ = [
    "ENDPOINT_TOLERANCE",
    "UnivariateFunction",
    "ScaledFunction",
    "ConstantFunction",
    "LinearFunction",
    "PolynomialFunction",
]
