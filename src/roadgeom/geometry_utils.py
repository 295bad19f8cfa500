"""Common vector helpers shared across curves, transforms and polygons."""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]

DBL_EPSILON = math.ulp(1.0)


def to_vec2(point_like: Sequence[float]) -> Vec2:
    """Return the XY components of a point as a tuple."""

    if len(point_like) < 2:
        raise ValueError("value must have at least two components")
    return float(point_like[0]), float(point_like[1])


def to_vec3(point_like: Sequence[float]) -> Vec3:
    """Return the XYZ components of a point as a tuple."""

    if len(point_like) < 3:
        raise ValueError("value must have at least three components")
    return float(point_like[0]), float(point_like[1]), float(point_like[2])


def is_finite_vec(vec: Sequence[float]) -> bool:
    return all(math.isfinite(c) for c in vec)


def add(a: Sequence[float], b: Sequence[float]) -> tuple:
    return tuple(x + y for x, y in zip(a, b))


def sub(a: Sequence[float], b: Sequence[float]) -> tuple:
    return tuple(x - y for x, y in zip(a, b))


def scale(a: Sequence[float], factor: float) -> tuple:
    return tuple(x * factor for x in a)


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    return math.fsum(x * y for x, y in zip(a, b))


def cross(a: Vec3, b: Vec3) -> Vec3:
    return (a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0])


def norm(a: Sequence[float]) -> float:
    return math.sqrt(dot(a, a))


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return norm(sub(a, b))


def normalized(a: Sequence[float]) -> Optional[tuple]:
    """Return ``a`` scaled to unit length or ``None`` if it has no length."""

    length = norm(a)
    if length == 0.0 or not math.isfinite(length):
        return None
    return scale(a, 1.0 / length)


def fuzzy_equals_vec(a: Sequence[float], b: Sequence[float], tol: float) -> bool:
    """Component-wise comparison within ``tol``."""

    return all(abs(x - y) <= tol or x == y for x, y in zip(a, b))


def centroid(points: Sequence[Sequence[float]]) -> tuple:
    """Return the arithmetic mean of ``points``."""

    if not points:
        raise ValueError("centroid of an empty point list is undefined")
    dims = len(points[0])
    count = float(len(points))
    return tuple(math.fsum(p[i] for p in points) / count for i in range(dims))


def newell_normal(points: Sequence[Vec3]) -> Optional[Vec3]:
    """Unit normal of a closed vertex loop by Newell's method, ``None`` if degenerate."""

    nx = ny = nz = 0.0
    count = len(points)
    for i in range(count):
        current = points[i]
        following = points[(i + 1) % count]
        d = sub(current, following)
        s = add(current, following)
        cx, cy, cz = cross(d, s)
        nx += cx
        ny += cy
        nz += cz
    return normalized((nx, ny, nz))


def triangle_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Optional[Vec3]:
    """Return the unit normal of a triangle or ``None`` if degenerate."""

    return normalized(cross(sub(v1, v0), sub(v2, v0)))


def triangle_area(v0: Vec3, v1: Vec3, v2: Vec3) -> float:
    """Return the area of a triangle."""

    return 0.5 * norm(cross(sub(v1, v0), sub(v2, v0)))


def span_dimension(points: Sequence[Sequence[float]], tol: Optional[float] = None) -> int:
    """Dimension of the space spanned by ``points[i] - points[0]``."""

    if len(points) < 2:
        return 0
    origin = np.asarray(points[0], dtype=float)
    differences = np.asarray(points[1:], dtype=float) - origin
    return int(np.linalg.matrix_rank(differences, tol=tol))


def best_fitting_plane(points: Sequence[Vec3]) -> Tuple[Vec3, Vec3]:
    """Return ``(centroid, unit normal)`` of the least-squares plane through ``points``."""

    if len(points) < 3:
        raise ValueError("fitting a plane requires at least three points")
    center = np.asarray(centroid(points), dtype=float)
    offsets = np.asarray(points, dtype=float) - center
    _, _, vt = np.linalg.svd(offsets)
    normal = vt[-1]
    return to_vec3(center), to_vec3(normal)


def max_plane_offset(points: Sequence[Vec3]) -> float:
    """Largest distance of ``points`` from their best fitting plane."""

    center, normal = best_fitting_plane(points)
    return max(abs(dot(sub(p, center), normal)) for p in points)


def pairwise(points: Sequence, closed: bool = False) -> Iterable[Tuple]:
    """Consecutive pairs, including the last/first pair if ``closed``."""

    items: List = list(points)
    for i in range(len(items) - 1):
        yield items[i], items[i + 1]
    if closed and len(items) > 1:
        yield items[-1], items[0]


__all__ = [
    "Vec2",
    "Vec3",
    "DBL_EPSILON",
    "to_vec2",
    "to_vec3",
    "is_finite_vec",
    "add",
    "sub",
    "scale",
    "dot",
    "cross",
    "norm",
    "distance",
    "normalized",
    "fuzzy_equals_vec",
    "centroid",
    "newell_normal",
    "triangle_normal",
    "triangle_area",
    "span_dimension",
    "best_fitting_plane",
    "max_plane_offset",
    "pairwise",
]
