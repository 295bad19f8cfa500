## roadgeom planar BREP representation
## =====================================

## Copyright (c) 2025 Richard W. DeVaul
## Copyright (c) 2025 yapCAD contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Boundary representation of road surfaces by planar polygons.

Every surface reports its polygons in its local frame and resolves them
into the global frame through its :class:`AffineSequence3D`.  Polygons
are validated when constructed, so a :class:`Polygon3D` that exists is
always non-degenerate and planar within its tolerance.
"""

from __future__ import annotations

import abc
import logging
import math
from typing import List, Optional, Sequence

from roadgeom.config import DEFAULT_CONFIG, GeometryConfig
from roadgeom.curve3d import Curve3D
from roadgeom.errors import BoundaryRepresentationGenerationError, GeometryError, Location
from roadgeom.geometry_checks import check_polygon, consecutive_duplicate_indices, is_planar
from roadgeom.geometry_utils import (
    Vec3,
    centroid,
    fuzzy_equals_vec,
    newell_normal,
    span_dimension,
    to_vec3,
    triangle_area,
)
from roadgeom.result import Err, Ok, Result
from roadgeom.triangulator import ring_normal, triangulate_ring
from roadgeom.xform import AffineSequence3D

logger = logging.getLogger(__name__)


def _brep_error(message: str, context: str, cause: GeometryError = None) -> Err:
    if cause is not None:
        message = f"{message}: {cause.message}"
    return Err(BoundaryRepresentationGenerationError(message, Location(context=context)))


def remove_consecutive_duplicates(vertices: Sequence[Vec3], tolerance: float) -> List[Vec3]:
    """Drop vertices equal to their predecessor, treating the list as a closed loop."""

    result: List[Vec3] = []
    for vertex in vertices:
        if not result or not fuzzy_equals_vec(result[-1], vertex, tolerance):
            result.append(vertex)
    while len(result) > 1 and fuzzy_equals_vec(result[-1], result[0], tolerance):
        result.pop()
    return result


class AbstractSurface3D(abc.ABC):
    """Geometry that can be expressed as a list of planar polygons."""

    def __init__(self, tolerance: float, affine_sequence: AffineSequence3D = AffineSequence3D.EMPTY):
        if not (math.isfinite(tolerance) and tolerance >= 0):
            raise ValueError(f"tolerance must be finite and non-negative, got {tolerance!r}")
        self.tolerance = float(tolerance)
        self.affine_sequence = affine_sequence

    @abc.abstractmethod
    def calculate_polygons_local_cs(self) -> Result[List["Polygon3D"]]:
        """Polygons in the local frame of the surface."""

    def calculate_polygons_global_cs(self) -> Result[List["Polygon3D"]]:
        """Non-empty list of polygons in the global frame."""

        context = type(self).__name__
        local = self.calculate_polygons_local_cs()
        if local.is_err():
            if isinstance(local.error, BoundaryRepresentationGenerationError):
                return local
            return _brep_error("polygon generation failed", context, local.error)
        if not local.value:
            return _brep_error("no polygons generated", context)

        affine = self.affine_sequence.solve()
        try:
            return Ok([affine.transform_polygon(polygon) for polygon in local.value])
        except ValueError as exc:
            return _brep_error(f"transformed polygon is degenerate: {exc}", context)


class Polygon3D(AbstractSurface3D):
    """Planar polygon with at least three vertices."""

    def __init__(self, vertices: Sequence[Sequence[float]], tolerance: float,
                 affine_sequence: AffineSequence3D = AffineSequence3D.EMPTY):
        super().__init__(tolerance, affine_sequence)
        points = [to_vec3(v) for v in vertices]
        check = check_polygon(points, self.tolerance)
        if not check:
            raise ValueError("invalid polygon: " + "; ".join(check.warnings))

        normal = newell_normal(points)
        if normal is None:
            raise ValueError("polygon normal has zero length")
        self.vertices: tuple = tuple(points)
        self.normal: Vec3 = normal

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def centroid(self) -> Vec3:
        return centroid(self.vertices)

    def is_planar(self) -> bool:
        return is_planar(self.vertices, self.tolerance)

    def reversed(self) -> "Polygon3D":
        """Same polygon with opposite winding and normal."""

        return Polygon3D(self.vertices[::-1], self.tolerance, self.affine_sequence)

    def calculate_polygons_local_cs(self) -> Result[List["Polygon3D"]]:
        return Ok([Polygon3D(self.vertices, self.tolerance)])

    def __eq__(self, other) -> bool:
        return (isinstance(other, Polygon3D)
                and self.vertices == other.vertices
                and self.tolerance == other.tolerance
                and self.affine_sequence == other.affine_sequence)

    def __hash__(self) -> int:
        return hash((self.vertices, self.tolerance))

    def __repr__(self) -> str:
        return f"Polygon3D({list(self.vertices)!r}, tolerance={self.tolerance!r})"


class LinearRing3D(AbstractSurface3D):
    """Closed vertex loop which is not necessarily planar."""

    def __init__(self, vertices: Sequence[Sequence[float]], tolerance: float,
                 affine_sequence: AffineSequence3D = AffineSequence3D.EMPTY):
        super().__init__(tolerance, affine_sequence)
        points = [to_vec3(v) for v in vertices]
        if len(points) < 3:
            raise ValueError(f"linear ring requires at least three vertices, got {len(points)}")
        duplicates = consecutive_duplicate_indices(points, self.tolerance)
        if duplicates:
            raise ValueError(f"linear ring has consecutive duplicate vertices at indices {duplicates}")
        if span_dimension(points, self.tolerance) < 2:
            raise ValueError("linear ring vertices must not be colinear")
        self.vertices: tuple = tuple(points)

    @classmethod
    def of_with_duplicates_removal(cls, vertices: Sequence[Sequence[float]], tolerance: float,
                                   affine_sequence: AffineSequence3D = AffineSequence3D.EMPTY) -> "LinearRing3D":
        points = remove_consecutive_duplicates([to_vec3(v) for v in vertices], tolerance)
        return cls(points, tolerance, affine_sequence)

    @classmethod
    def of_left_right(cls, left: Sequence[Vec3], right: Sequence[Vec3], tolerance: float) -> List["LinearRing3D"]:
        """Rings between two polylines sampled at the same parameters.

        Quads collapsing to fewer than three distinct or to colinear
        vertices are skipped.
        """

        if len(left) != len(right):
            raise ValueError("left and right vertex lists must have the same size")
        if len(left) < 2:
            raise ValueError("at least two vertices per side are required")
        rings = []
        for i in range(len(left) - 1):
            loop = remove_consecutive_duplicates(
                [to_vec3(left[i]), to_vec3(right[i]), to_vec3(right[i + 1]), to_vec3(left[i + 1])], tolerance)
            if len(loop) < 3 or span_dimension(loop, tolerance) < 2:
                logger.debug("skipping degenerate ring %d between left and right vertices", i)
                continue
            rings.append(cls(loop, tolerance))
        return rings

    def is_planar(self) -> bool:
        return is_planar(self.vertices, self.tolerance)

    @property
    def normal(self) -> Vec3:
        """Unit normal of the best fitting plane, oriented like the vertex loop."""

        return ring_normal(self.vertices)[1]

    def calculate_polygons_local_cs(self) -> Result[List[Polygon3D]]:
        if self.is_planar():
            return Ok([Polygon3D(self.vertices, self.tolerance)])

        triangles = triangulate_ring(self.vertices, self.tolerance)
        if not triangles:
            logger.debug("ear clipping of a %d vertex ring failed, falling back to a fan",
                         len(self.vertices))
            triangles = self._fan()
        if not triangles:
            return _brep_error("triangulation of the linear ring yields no triangle", type(self).__name__)
        try:
            return Ok([Polygon3D(triangle, self.tolerance) for triangle in triangles])
        except ValueError as exc:
            return _brep_error(f"degenerate triangle: {exc}", type(self).__name__)

    def _fan(self) -> List[tuple]:
        first = self.vertices[0]
        return [(first, a, b) for a, b in zip(self.vertices[1:], self.vertices[2:])
                if triangle_area(first, a, b) > self.tolerance]


class CompositeSurface3D(AbstractSurface3D):
    """Aggregate of surfaces sharing one tolerance."""

    def __init__(self, members: Sequence[AbstractSurface3D],
                 affine_sequence: AffineSequence3D = AffineSequence3D.EMPTY):
        if not members:
            raise ValueError("composite surface requires at least one member")
        tolerances = {m.tolerance for m in members}
        if len(tolerances) != 1:
            raise ValueError(f"composite surface members must share one tolerance, got {sorted(tolerances)}")
        super().__init__(members[0].tolerance, affine_sequence)
        self.members = list(members)

    def calculate_polygons_local_cs(self) -> Result[List[Polygon3D]]:
        polygons: List[Polygon3D] = []
        for index, member in enumerate(self.members):
            result = member.calculate_polygons_global_cs()
            if result.is_err():
                return _brep_error(f"member {index} failed", type(self).__name__, result.error)
            polygons.extend(result.value)
        return Ok(polygons)


class Circle3D(AbstractSurface3D):
    """Disk in the local xy plane, centred at the origin.

    ``slices`` defaults to ``config.circle_slices``.
    """

    def __init__(self, radius: float, tolerance: float,
                 affine_sequence: AffineSequence3D = AffineSequence3D.EMPTY,
                 slices: Optional[int] = None, config: GeometryConfig = DEFAULT_CONFIG):
        super().__init__(tolerance, affine_sequence)
        if slices is None:
            slices = config.circle_slices
        if not (math.isfinite(radius) and radius > self.tolerance):
            raise ValueError(f"radius must be finite and exceed the tolerance, got {radius!r}")
        if slices < 3:
            raise ValueError(f"at least three slices are required, got {slices!r}")
        self.radius = float(radius)
        self.slices = int(slices)

    def vertices(self, z: float = 0.0) -> List[Vec3]:
        step = 2.0 * math.pi / self.slices
        return [(self.radius * math.cos(i * step), self.radius * math.sin(i * step), z)
                for i in range(self.slices)]

    def calculate_polygons_local_cs(self) -> Result[List[Polygon3D]]:
        return Ok([Polygon3D(self.vertices(), self.tolerance)])


class Rectangle3D(AbstractSurface3D):
    """Rectangle in the local xy plane, centred at the origin."""

    def __init__(self, length: float, width: float, tolerance: float,
                 affine_sequence: AffineSequence3D = AffineSequence3D.EMPTY):
        super().__init__(tolerance, affine_sequence)
        for name, value in (("length", length), ("width", width)):
            if not (math.isfinite(value) and value > self.tolerance):
                raise ValueError(f"{name} must be finite and exceed the tolerance, got {value!r}")
        self.length = float(length)
        self.width = float(width)

    def vertices(self) -> List[Vec3]:
        hl, hw = self.length / 2.0, self.width / 2.0
        return [(-hl, -hw, 0.0), (hl, -hw, 0.0), (hl, hw, 0.0), (-hl, hw, 0.0)]

    def calculate_polygons_local_cs(self) -> Result[List[Polygon3D]]:
        return Ok([Polygon3D(self.vertices(), self.tolerance)])


class ParametricBoundedSurface3D(AbstractSurface3D):
    """Surface between a left and a right boundary curve sharing one domain.

    Both boundaries are sampled every ``step``, which defaults to
    ``config.discretization_step_size``.
    """

    def __init__(self, left: Curve3D, right: Curve3D, tolerance: float,
                 step: Optional[float] = None, config: GeometryConfig = DEFAULT_CONFIG):
        super().__init__(tolerance)
        if step is None:
            step = config.discretization_step_size
        if not (left.domain.fuzzy_encloses(right.domain, tolerance)
                and right.domain.fuzzy_encloses(left.domain, tolerance)):
            raise ValueError(f"boundary curves must share one domain, got {left.domain} and {right.domain}")
        if not (math.isfinite(step) and step > 0):
            raise ValueError(f"step must be positive and finite, got {step!r}")
        self.left = left
        self.right = right
        self.step = float(step)

    def calculate_polygons_local_cs(self) -> Result[List[Polygon3D]]:
        context = type(self).__name__
        left = self.left.sample_points(self.step)
        if left.is_err():
            return _brep_error("sampling the left boundary failed", context, left.error)
        right = self.right.sample_points(self.step)
        if right.is_err():
            return _brep_error("sampling the right boundary failed", context, right.error)
        if len(left.value) != len(right.value):
            return _brep_error("boundaries yield different numbers of points", context)

        polygons: List[Polygon3D] = []
        for ring in LinearRing3D.of_left_right(left.value, right.value, self.tolerance):
            result = ring.calculate_polygons_local_cs()
            if result.is_err():
                return result
            polygons.extend(result.value)
        return Ok(polygons)


__all__ = [
    "remove_consecutive_duplicates",
    "AbstractSurface3D",
    "Polygon3D",
    "LinearRing3D",
    "CompositeSurface3D",
    "Circle3D",
    "Rectangle3D",
    "ParametricBoundedSurface3D",
]
