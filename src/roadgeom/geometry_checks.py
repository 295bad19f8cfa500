"""Validation helpers for polygon vertex loops."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

from roadgeom.geometry_utils import (
    DBL_EPSILON,
    Vec3,
    distance,
    fuzzy_equals_vec,
    is_finite_vec,
    max_plane_offset,
    pairwise,
    span_dimension,
)


def is_closed_polygon(points: Sequence[Sequence[float]], tol: float) -> bool:
    """Return ``True`` if a polyline is closed within ``tol``."""

    if not points:
        return False
    return distance(points[0], points[-1]) <= tol


def consecutive_duplicate_indices(points: Sequence[Vec3], tol: float) -> List[int]:
    """Indices ``i`` where vertex ``i`` equals the next one (wrapping around)."""

    count = len(points)
    return [i for i, (a, b) in enumerate(pairwise(points, closed=True))
            if count > 1 and fuzzy_equals_vec(a, b, tol)]


def has_consecutive_duplicates(points: Sequence[Vec3], tol: float) -> bool:
    return bool(consecutive_duplicate_indices(points, tol))


def planarity_tolerance(points: Sequence[Vec3], tol: float) -> float:
    """Scale ``tol`` with the magnitude of the coordinates involved."""

    largest = max(abs(c) for p in points for c in p)
    return tol * math.ulp(largest) / DBL_EPSILON


def is_planar(points: Sequence[Vec3], tol: float, dynamic_tolerance: bool = True) -> bool:
    """Return ``True`` if all ``points`` lie within ``tol`` of their best fitting plane."""

    if len(points) < 3:
        raise ValueError("planarity check requires at least three points")
    limit = planarity_tolerance(points, tol) if dynamic_tolerance else tol
    return max_plane_offset(points) <= limit


def check_polygon(points: Sequence[Vec3], tol: float) -> "CheckResult":
    """Collect every problem that prevents ``points`` from forming a planar polygon."""

    warnings: List[str] = []
    if len(points) < 3:
        return CheckResult(False, [f'polygon requires at least three vertices, got {len(points)}'])
    if not all(is_finite_vec(p) for p in points):
        return CheckResult(False, ['polygon vertices must be finite'])

    duplicates = consecutive_duplicate_indices(points, tol)
    if duplicates:
        warnings.append(f'consecutive duplicate vertices at indices {duplicates}')
    dimension = span_dimension(points, tol)
    if dimension < 2:
        warnings.append(f'vertices span a space of dimension {dimension}, at least 2 required')
    elif not is_planar(points, tol):
        warnings.append('vertices are not located in a plane')

    return CheckResult(not warnings, warnings)


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str]

    def __bool__(self) -> bool:
        return self.ok


__all__ = [
    'CheckResult',
    'is_closed_polygon',
    'consecutive_duplicate_indices',
    'has_consecutive_duplicates',
    'planarity_tolerance',
    'is_planar',
    'check_polygon',
]
