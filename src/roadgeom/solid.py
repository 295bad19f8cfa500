"""Closed solids expressed through their bounding polygons."""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from roadgeom.brep import AbstractSurface3D, Circle3D, LinearRing3D, Polygon3D
from roadgeom.config import DEFAULT_CONFIG, GeometryConfig
from roadgeom.curve2d import AbstractCurve2D, LateralTranslatedCurve2D
from roadgeom.curve3d import Curve3D
from roadgeom.errors import BoundaryRepresentationGenerationError, Location
from roadgeom.function.combination import StackedFunction
from roadgeom.function.univariate import LinearFunction, UnivariateFunction
from roadgeom.geometry_utils import Vec3
from roadgeom.result import Err, Ok, Result, collect
from roadgeom.xform import AffineSequence3D

logger = logging.getLogger(__name__)


def _require_dimension(name: str, value: float, tolerance: float) -> float:
    if not (math.isfinite(value) and value > tolerance):
        raise ValueError(f"{name} must be finite and exceed the tolerance, got {value!r}")
    return float(value)


class AbstractSolid3D(AbstractSurface3D):
    """Solid whose polygons form a closed shell with outward normals."""


class Cuboid3D(AbstractSolid3D):
    """Box whose local origin lies at the centre of its ground face."""

    def __init__(self, length: float, width: float, height: float, tolerance: float,
                 affine_sequence: AffineSequence3D = AffineSequence3D.EMPTY):
        super().__init__(tolerance, affine_sequence)
        self.length = _require_dimension("length", length, self.tolerance)
        self.width = _require_dimension("width", width, self.tolerance)
        self.height = _require_dimension("height", height, self.tolerance)

    def calculate_polygons_local_cs(self) -> Result[List[Polygon3D]]:
        hl, hw, h = self.length / 2.0, self.width / 2.0, self.height
        b0, b1, b2, b3 = (-hl, -hw, 0.0), (hl, -hw, 0.0), (hl, hw, 0.0), (-hl, hw, 0.0)
        t0, t1, t2, t3 = (-hl, -hw, h), (hl, -hw, h), (hl, hw, h), (-hl, hw, h)
        faces = [
            (b0, b3, b2, b1),  # bottom
            (t0, t1, t2, t3),  # top
            (b0, b1, t1, t0),  # front
            (b1, b2, t2, t1),  # right
            (b2, b3, t3, t2),  # back
            (b3, b0, t0, t3),  # left
        ]
        return Ok([Polygon3D(face, self.tolerance) for face in faces])


class Cylinder3D(AbstractSolid3D):
    """Upright cylinder standing on the local xy plane."""

    def __init__(self, radius: float, height: float, tolerance: float,
                 affine_sequence: AffineSequence3D = AffineSequence3D.EMPTY,
                 slices: Optional[int] = None, config: GeometryConfig = DEFAULT_CONFIG):
        super().__init__(tolerance, affine_sequence)
        self.radius = _require_dimension("radius", radius, self.tolerance)
        self.height = _require_dimension("height", height, self.tolerance)
        self.base = Circle3D(self.radius, self.tolerance, slices=slices, config=config)

    def calculate_polygons_local_cs(self) -> Result[List[Polygon3D]]:
        bottom = self.base.vertices(0.0)
        top = self.base.vertices(self.height)
        count = len(bottom)
        polygons = [Polygon3D(bottom[::-1], self.tolerance), Polygon3D(top, self.tolerance)]
        for i in range(count):
            j = (i + 1) % count
            polygons.append(Polygon3D((bottom[i], bottom[j], top[j], top[i]), self.tolerance))
        return Ok(polygons)


class ParametricSweep3D(AbstractSolid3D):
    """Rectangular cross section swept along a reference line.

    The cross section is centred on ``reference_curve_xy``, stands on
    ``absolute_height(s)`` and measures ``object_width(s)`` by
    ``object_height(s)``.  Its edges are sampled every ``step``, which
    defaults to ``config.discretization_step_size``.  The resulting shell
    consists of the base, top, left and right side strips plus the start
    and end caps, all facing outwards.
    """

    def __init__(self, reference_curve_xy: AbstractCurve2D, absolute_height: UnivariateFunction,
                 object_height: UnivariateFunction, object_width: UnivariateFunction,
                 tolerance: float, step: Optional[float] = None, config: GeometryConfig = DEFAULT_CONFIG):
        super().__init__(tolerance)
        if not isinstance(reference_curve_xy, LateralTranslatedCurve2D):
            reference_curve_xy = LateralTranslatedCurve2D(
                reference_curve_xy, LinearFunction.X_AXIS, reference_curve_xy.tolerance)
        domain = reference_curve_xy.domain
        for name, function in (("absolute height", absolute_height), ("object height", object_height),
                               ("object width", object_width)):
            if not function.domain.fuzzy_encloses(domain, self.tolerance):
                raise ValueError(f"{name} function domain {function.domain} must enclose "
                                 f"the reference curve domain {domain}")
        if not domain.length() >= self.tolerance:
            raise ValueError(f"sweep length {domain.length()!r} must not fall below the tolerance")
        if step is None:
            step = config.discretization_step_size
        if not (math.isfinite(step) and step > 0):
            raise ValueError(f"step must be positive and finite, got {step!r}")

        self.reference_curve_xy = reference_curve_xy
        self.absolute_height = absolute_height
        self.object_height = object_height
        self.object_width = object_width
        self.step = float(step)
        self.domain = domain

    @property
    def length(self) -> float:
        return self.domain.length()

    def _edge(self, side: float, upper: bool) -> Curve3D:
        curve_xy = self.reference_curve_xy.add_lateral_translation(self.object_width, side * 0.5)
        height = self.absolute_height
        if upper:
            height = StackedFunction.of_sum([self.absolute_height, self.object_height], default_value=0.0)
        return Curve3D(curve_xy, height)

    def _side_polygons(self, left: Sequence[Vec3], right: Sequence[Vec3]) -> Result[List[Polygon3D]]:
        polygons: List[Polygon3D] = []
        for ring in LinearRing3D.of_left_right(left, right, self.tolerance):
            result = ring.calculate_polygons_local_cs()
            if result.is_err():
                return result
            polygons.extend(result.value)
        return Ok(polygons)

    def _cap_polygons(self, vertices: Sequence[Vec3]) -> Result[List[Polygon3D]]:
        try:
            ring = LinearRing3D.of_with_duplicates_removal(vertices, self.tolerance)
        except ValueError as exc:
            logger.debug("skipping degenerate sweep cap: %s", exc)
            return Ok([])
        return ring.calculate_polygons_local_cs()

    def calculate_polygons_local_cs(self) -> Result[List[Polygon3D]]:
        # edges as seen in the direction of the reference curve
        edges = {}
        for name, side, upper in (("lower left", +1.0, False), ("lower right", -1.0, False),
                                  ("upper left", +1.0, True), ("upper right", -1.0, True)):
            points = self._edge(side, upper).sample_points(self.step)
            if points.is_err():
                return Err(BoundaryRepresentationGenerationError(
                    f"sampling the {name} edge failed: {points.error.message}",
                    Location(context=type(self).__name__)))
            edges[name] = points.value
        lower_left, lower_right = edges["lower left"], edges["lower right"]
        upper_left, upper_right = edges["upper left"], edges["upper right"]

        parts = [
            self._side_polygons(lower_right, lower_left),
            self._side_polygons(upper_left, upper_right),
            self._side_polygons(lower_left, upper_left),
            self._side_polygons(upper_right, lower_right),
            self._cap_polygons((upper_left[0], lower_left[0], lower_right[0], upper_right[0])),
            self._cap_polygons((upper_left[-1], upper_right[-1], lower_right[-1], lower_left[-1])),
        ]
        return collect(parts).map(lambda lists: [polygon for part in lists for polygon in part])


__all__ = ["AbstractSolid3D", "Cuboid3D", "Cylinder3D", "ParametricSweep3D"]
