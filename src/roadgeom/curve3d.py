"""Spatial curves built from a planar curve, a height profile and a torsion."""

from __future__ import annotations

import math
from typing import List, Optional

from roadgeom.curve2d import AbstractCurve2D
from roadgeom.errors import Location, NumericalDegeneracyError
from roadgeom.function.univariate import LinearFunction, UnivariateFunction
from roadgeom.geometry_utils import Vec3
from roadgeom.range import Range
from roadgeom.result import Err, Ok, Result
from roadgeom.xform import Affine3D, Pose3D, Rotation3D


class Curve3D:
    """Curve in space evaluated by arc length ``s`` of its planar projection.

    ``height_function`` gives the elevation at ``s`` (flat 0 when absent);
    ``torsion_function`` gives the roll of the cross section at ``s``, which
    tilts lateral and vertical offsets around the tangent.
    """

    def __init__(self, curve_xy: AbstractCurve2D,
                 height_function: Optional[UnivariateFunction] = None,
                 torsion_function: Optional[UnivariateFunction] = None):
        self.curve_xy = curve_xy
        self.tolerance = curve_xy.tolerance
        self.height_function = height_function if height_function is not None else LinearFunction.X_AXIS
        self.torsion_function = torsion_function if torsion_function is not None else LinearFunction.X_AXIS
        self.domain = curve_xy.domain

        if not (self.domain.has_lower_bound() and self.domain.has_upper_bound()):
            raise ValueError("curve domain must be bounded")
        if not self.domain.length() > self.tolerance:
            raise ValueError(f"curve length {self.domain.length()!r} must exceed the tolerance {self.tolerance!r}")
        if not self.height_function.domain.fuzzy_encloses(self.domain, self.tolerance):
            raise ValueError(f"height function domain {self.height_function.domain} must enclose "
                             f"the curve domain {self.domain}")
        if not self.torsion_function.domain.fuzzy_encloses(self.domain, self.tolerance):
            raise ValueError(f"torsion function domain {self.torsion_function.domain} must enclose "
                             f"the curve domain {self.domain}")

    @property
    def length(self) -> float:
        return self.domain.length()

    def height_at(self, s: float) -> Result[float]:
        return self.height_function.value_in_fuzzy(s, self.tolerance)

    def pose_at(self, s: float) -> Result[Pose3D]:
        """Global pose: planar point lifted to the height, heading and roll."""

        pose = self.curve_xy.pose_global(s)
        if pose.is_err():
            return pose
        height = self.height_at(s)
        if height.is_err():
            return height
        torsion = self.torsion_function.value_in_fuzzy(s, self.tolerance)
        if torsion.is_err():
            return torsion
        x, y = pose.value.point
        return Ok(Pose3D((x, y, height.value), Rotation3D(pose.value.heading, 0.0, torsion.value)))

    def affine_at(self, s: float) -> Result[Affine3D]:
        return self.pose_at(s).map(Affine3D.of_pose)

    def point_at(self, s: float, lateral_offset: float = 0.0, height_offset: float = 0.0) -> Result[Vec3]:
        """Global point at curve-relative position ``(s, lateral_offset, height_offset)``."""

        if not (math.isfinite(lateral_offset) and math.isfinite(height_offset)):
            return Err(NumericalDegeneracyError(
                f"offsets must be finite, got ({lateral_offset!r}, {height_offset!r})",
                Location(parameter=s, context="Curve3D")))
        return self.affine_at(s).map(lambda affine: affine.transform((0.0, lateral_offset, height_offset)))

    def sample_points(self, step: float, include_endpoint: bool = True) -> Result[List[Vec3]]:
        """Global points sampled every ``step`` along the curve."""

        bounded = Range.closed(self.domain.lower_endpoint(), self.domain.upper_endpoint())
        points: List[Vec3] = []
        for s in bounded.arrange(step, include_endpoint, self.tolerance):
            point = self.point_at(s)
            if point.is_err():
                return point
            points.append(point.value)
        return Ok(points)


__all__ = ["Curve3D"]
