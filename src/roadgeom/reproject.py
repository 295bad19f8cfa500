"""Rigid transform estimation for reprojecting models between reference systems.

A non-linear map projection is approximated by the rotation and translation
that best align source points with their reprojected counterparts in the
least-squares sense (Kabsch algorithm).  The residual is reported so that
callers can judge whether the approximation is acceptable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from roadgeom.config import DEFAULT_CONFIG, GeometryConfig
from roadgeom.errors import Location, NumericalDegeneracyError
from roadgeom.result import Err, Ok, Result
from roadgeom.xform import Affine2D, Affine3D

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class RigidTransformEstimate:
    """Best-fit rigid map together with its largest residual distance."""

    affine: Union[Affine2D, Affine3D]
    rotation: np.ndarray
    translation: tuple
    max_deviation: float

    @property
    def dimension(self) -> int:
        return self.rotation.shape[0]


def _degenerate(message: str) -> Err:
    return Err(NumericalDegeneracyError(message, Location(context="rigid transform estimation")))


def estimate_rigid_transform(source: Sequence[Sequence[float]], target: Sequence[Sequence[float]],
                             deviation_warning_tolerance: Optional[float] = None,
                             config: GeometryConfig = DEFAULT_CONFIG) -> Result[RigidTransformEstimate]:
    """Estimate rotation ``R`` and translation ``t`` with ``R @ s + t ~ target``.

    Works for 2D and 3D point pairs.  A deviation above
    ``deviation_warning_tolerance`` (default taken from ``config``) is
    logged as a warning; it does not fail the estimation.
    """

    src = np.asarray(source, dtype=float)
    tgt = np.asarray(target, dtype=float)
    if src.ndim != 2 or src.shape != tgt.shape:
        return _degenerate(f"source and target must be matching point lists, got {src.shape} and {tgt.shape}")
    count, dim = src.shape
    if dim not in (2, 3):
        return _degenerate(f"points must be two or three dimensional, got {dim}")
    if count < 2:
        return _degenerate(f"at least two point pairs are required, got {count}")
    if not (np.all(np.isfinite(src)) and np.all(np.isfinite(tgt))):
        return _degenerate("point coordinates must be finite")

    centroid_source = src.mean(axis=0)
    centroid_target = tgt.mean(axis=0)
    covariance = (src - centroid_source).T @ (tgt - centroid_target)

    rank = int(np.linalg.matrix_rank(covariance))
    if rank < dim - 1:
        return _degenerate(f"covariance matrix has rank {rank}, at least {dim - 1} required")

    u, _, vt = np.linalg.svd(covariance)
    rotation = vt.T @ u.T
    if np.linalg.det(rotation) < 0:
        # reflection, flip the axis of the smallest singular value
        vt[-1, :] *= -1.0
        rotation = vt.T @ u.T
    translation = centroid_target - rotation @ centroid_source

    matrix = np.eye(dim + 1)
    matrix[:dim, :dim] = rotation
    matrix[:dim, dim] = translation
    affine = Affine2D(matrix) if dim == 2 else Affine3D(matrix)

    mapped = src @ rotation.T + translation
    max_deviation = float(np.max(np.linalg.norm(mapped - tgt, axis=1)))

    threshold = config.deviation_warning_tolerance if deviation_warning_tolerance is None \
        else deviation_warning_tolerance
    if max_deviation > threshold:
        logger.warning("rigid transform approximation deviates by up to %.6g from the reprojected "
                       "points, above the tolerance of %.6g", max_deviation, threshold)
    else:
        logger.debug("rigid transform approximation deviates by up to %.6g", max_deviation)

    rotation.setflags(write=False)
    return Ok(RigidTransformEstimate(affine, rotation, tuple(float(c) for c in translation), max_deviation))


def reproject_points(points: Sequence[Sequence[float]], estimate: RigidTransformEstimate) -> List[tuple]:
    """Apply an estimated rigid transform to ``points``."""

    return estimate.affine.transform_points(points)


__all__ = ["RigidTransformEstimate", "estimate_rigid_transform", "reproject_points"]
