"""Triangulation of non-planar vertex rings.

A ring is projected onto its best fitting plane and the projection is
handed to ``mapbox-earcut``.  The resulting index triples are lifted back
onto the original 3D vertices and wound to agree with the ring normal.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

try:
    import mapbox_earcut as _earcut
except ImportError as exc:  # pragma: no cover - import guard
    raise ImportError(
        "mapbox-earcut must be installed to triangulate non-planar rings"
    ) from exc

from roadgeom.geometry_utils import (
    Vec2,
    Vec3,
    best_fitting_plane,
    cross,
    dot,
    newell_normal,
    normalized,
    sub,
    triangle_area,
    triangle_normal,
)

logger = logging.getLogger(__name__)

Triangle = Tuple[Vec3, Vec3, Vec3]


def plane_basis(normal: Vec3) -> Tuple[Vec3, Vec3]:
    """Orthonormal ``(u, v)`` such that ``(u, v, normal)`` is right handed."""

    # pick the coordinate axis least aligned with the normal
    axis = min(range(3), key=lambda i: abs(normal[i]))
    helper = tuple(1.0 if i == axis else 0.0 for i in range(3))
    u = normalized(cross(helper, normal))
    v = cross(normal, u)
    return u, v


def project_to_plane(points: Sequence[Vec3], center: Vec3, normal: Vec3) -> List[Vec2]:
    u, v = plane_basis(normal)
    projected = []
    for p in points:
        offset = sub(p, center)
        projected.append((dot(offset, u), dot(offset, v)))
    return projected


def ring_normal(points: Sequence[Vec3]) -> Tuple[Vec3, Vec3]:
    """Centre and unit normal of the best fitting plane, oriented like the loop."""

    center, normal = best_fitting_plane(points)
    loop_normal = newell_normal(points)
    if loop_normal is not None and dot(loop_normal, normal) < 0:
        normal = (-normal[0], -normal[1], -normal[2])
    return center, normal


def triangulate_loop(loop: Sequence[Vec2]) -> List[Tuple[int, int, int]]:
    """Index triples covering a simple planar loop, counter-clockwise wound."""

    if len(loop) < 3:
        return []
    order = list(range(len(loop)))
    if _signed_area(loop) < 0:
        order.reverse()
    vertices = np.asarray([loop[i] for i in order], dtype=np.float64)
    ring_array = np.asarray([len(order)], dtype=np.uint32)
    indices = _earcut.triangulate_float64(vertices, ring_array)
    triangles: List[Tuple[int, int, int]] = []
    for i in range(0, len(indices), 3):
        triangles.append((order[indices[i]], order[indices[i + 1]], order[indices[i + 2]]))
    return triangles


def triangulate_ring(points: Sequence[Vec3], tolerance: float,
                     normal: Optional[Vec3] = None) -> List[Triangle]:
    """Triangles covering a closed 3D loop, each wound like ``normal``.

    ``normal`` defaults to the oriented normal of the best fitting plane.
    Triangles with an area at or below ``tolerance`` are dropped.
    """

    center, plane_normal = ring_normal(points)
    if normal is None:
        normal = plane_normal
    loop = project_to_plane(points, center, plane_normal)

    triangles: List[Triangle] = []
    for i, j, k in triangulate_loop(loop):
        a, b, c = points[i], points[j], points[k]
        if triangle_area(a, b, c) <= tolerance:
            logger.debug("dropping sliver triangle (%d, %d, %d)", i, j, k)
            continue
        facing = triangle_normal(a, b, c)
        if facing is not None and dot(facing, normal) < 0:
            a, c = c, a
        triangles.append((a, b, c))
    return triangles


def _signed_area(loop: Sequence[Vec2]) -> float:
    total = 0.0
    for i, (x0, y0) in enumerate(loop):
        x1, y1 = loop[(i + 1) % len(loop)]
        total += x0 * y1 - x1 * y0
    return total / 2.0


__all__ = [
    "plane_basis",
    "project_to_plane",
    "ring_normal",
    "triangulate_loop",
    "triangulate_ring",
]
