"""Surfaces parametrized relative to a spatial reference curve.

A point on such a surface is addressed by the curve position ``s`` and
a lateral offset ``t``.  A bivariate height function ``h(s, t)`` lifts
the point above the cross section of the reference curve, so road
crowns and lateral shapes follow the curve's elevation and torsion.
"""

from __future__ import annotations

import abc
import math
from typing import List, Optional

from roadgeom.brep import AbstractSurface3D, LinearRing3D, Polygon3D
from roadgeom.config import DEFAULT_CONFIG, GeometryConfig
from roadgeom.curve3d import Curve3D
from roadgeom.errors import DomainError, Location
from roadgeom.function.bivariate import BivariateFunction, PlaneFunction
from roadgeom.function.univariate import UnivariateFunction
from roadgeom.geometry_utils import Vec3
from roadgeom.range import Range
from roadgeom.result import Err, Ok, Result


class AbstractCurveRelativeSurface3D(abc.ABC):
    """Surface evaluated at curve-relative positions ``(s, t)``."""

    domain: Range
    tolerance: float

    @property
    def length(self) -> float:
        return self.domain.length()

    @abc.abstractmethod
    def point_at_unbounded(self, s: float, t: float, height_offset: float = 0.0) -> Result[Vec3]:
        """Global point at ``(s, t)`` raised by ``height_offset``, without a domain check."""

    def point_at(self, s: float, t: float, height_offset: float = 0.0) -> Result[Vec3]:
        if not self.domain.fuzzy_contains(s, self.tolerance):
            return Err(DomainError(f"curve position s={s!r} must be within the surface domain {self.domain}",
                                   Location(parameter=s, context=type(self).__name__)))
        return self.point_at_unbounded(s, t, height_offset)


class CurveRelativeParametricSurface3D(AbstractCurveRelativeSurface3D):
    """Surface ``base_curve.point_at(s, t, h(s, t))``; flat when no height function is given."""

    def __init__(self, base_curve: Curve3D, height_function: BivariateFunction = PlaneFunction.ZERO):
        self.base_curve = base_curve
        self.height_function = height_function
        self.tolerance = base_curve.tolerance
        self.domain = base_curve.domain
        if not height_function.domain_x.fuzzy_encloses(self.domain, self.tolerance):
            raise ValueError(f"height function domain {height_function.domain_x} must enclose "
                             f"the curve domain {self.domain}")
        if not self.length > self.tolerance:
            raise ValueError(f"surface length {self.length!r} must exceed the tolerance {self.tolerance!r}")

    def point_at_unbounded(self, s: float, t: float, height_offset: float = 0.0) -> Result[Vec3]:
        height = self.height_function.value_in_fuzzy(s, t, self.tolerance)
        if height.is_err():
            return height
        return self.base_curve.point_at(s, t, height.value + height_offset)


class SectionedCurveRelativeParametricSurface3D(AbstractCurveRelativeSurface3D):
    """Part of ``complete`` cut to ``section`` along ``s`` and re-based to start at 0."""

    def __init__(self, complete: AbstractCurveRelativeSurface3D, section: Range):
        if not section.has_lower_bound():
            raise ValueError("section must have a lower bound")
        if not complete.domain.fuzzy_encloses(section, complete.tolerance):
            raise ValueError(f"section {section} exceeds the surface domain {complete.domain}")
        self.complete = complete
        self.tolerance = complete.tolerance
        self.section_start = section.lower_endpoint()
        self.domain = section.shift_lower_endpoint_to(0.0)

    def point_at_unbounded(self, s: float, t: float, height_offset: float = 0.0) -> Result[Vec3]:
        return self.complete.point_at(self.section_start + s, t, height_offset)


class LateralStripSurface3D(AbstractSurface3D):
    """Polygons of ``surface`` between the lateral offsets ``left(s)`` and ``right(s)``.

    Both offsets are sampled every ``step`` along the surface domain; the
    step defaults to ``config.discretization_step_size``.
    """

    def __init__(self, surface: AbstractCurveRelativeSurface3D, left: UnivariateFunction,
                 right: UnivariateFunction, step: Optional[float] = None,
                 height_offset: float = 0.0, config: GeometryConfig = DEFAULT_CONFIG):
        super().__init__(surface.tolerance)
        for name, function in (("left", left), ("right", right)):
            if not function.domain.fuzzy_encloses(surface.domain, self.tolerance):
                raise ValueError(f"{name} offset domain {function.domain} must enclose "
                                 f"the surface domain {surface.domain}")
        if step is None:
            step = config.discretization_step_size
        if not (math.isfinite(step) and step > 0):
            raise ValueError(f"step must be positive and finite, got {step!r}")
        self.surface = surface
        self.left = left
        self.right = right
        self.step = float(step)
        self.height_offset = float(height_offset)

    def _boundary(self, offset: UnivariateFunction, positions: List[float]) -> Result[List[Vec3]]:
        points: List[Vec3] = []
        for s in positions:
            t = offset.value_in_fuzzy(s, self.tolerance)
            if t.is_err():
                return t
            point = self.surface.point_at(s, t.value, self.height_offset)
            if point.is_err():
                return point
            points.append(point.value)
        return Ok(points)

    def calculate_polygons_local_cs(self) -> Result[List[Polygon3D]]:
        domain = self.surface.domain
        positions = Range.closed(domain.lower_endpoint(), domain.upper_endpoint()).arrange(
            self.step, True, self.tolerance)
        left = self._boundary(self.left, positions)
        if left.is_err():
            return left
        right = self._boundary(self.right, positions)
        if right.is_err():
            return right

        polygons: List[Polygon3D] = []
        for ring in LinearRing3D.of_left_right(left.value, right.value, self.tolerance):
            result = ring.calculate_polygons_local_cs()
            if result.is_err():
                return result
            polygons.extend(result.value)
        return Ok(polygons)


__all__ = [
    "AbstractCurveRelativeSurface3D",
    "CurveRelativeParametricSurface3D",
    "SectionedCurveRelativeParametricSurface3D",
    "LateralStripSurface3D",
]
