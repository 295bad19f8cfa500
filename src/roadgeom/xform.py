## affine coordinate frames for planar and spatial road geometry

## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
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

## Matrices are numpy arrays acting on column vectors, so that
## ``A.append(B)`` is the matrix product ``A @ B`` and maps a point by
## first applying B, then A.  An AffineSequence lists frames from the
## outermost (model) to the innermost (most local) one; solving it
## folds the list left to right, which applies the frames right to left.

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from roadgeom.geometry_utils import Vec2, Vec3, to_vec2, to_vec3

TWO_PI = 2.0 * math.pi


def normalize_angle(angle: float, center: float = math.pi) -> float:
    """Map ``angle`` into ``[center - pi, center + pi)``, by default ``[0, 2 pi)``."""

    result = angle - TWO_PI * math.floor((angle + math.pi - center) / TWO_PI)
    if result >= center + math.pi:
        result -= TWO_PI
    return result


@dataclass(frozen=True)
class Pose2D:
    """Point plus heading (radians, anticlockwise from the x axis)."""

    point: Vec2
    heading: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", to_vec2(self.point))
        if not (math.isfinite(self.heading) and all(math.isfinite(c) for c in self.point)):
            raise ValueError(f"pose must be finite, got {self.point!r}, {self.heading!r}")
        object.__setattr__(self, "heading", normalize_angle(self.heading))


@dataclass(frozen=True)
class Rotation3D:
    """Tait-Bryan angles: heading about z, pitch about y', roll about x''."""

    heading: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0

    def __post_init__(self) -> None:
        for name in ("heading", "pitch", "roll"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} angle must be finite, got {value!r}")
            object.__setattr__(self, name, normalize_angle(value))

    def matrix(self) -> np.ndarray:
        """3x3 rotation ``Rz(heading) @ Ry(pitch) @ Rx(roll)``."""

        ch, sh = math.cos(self.heading), math.sin(self.heading)
        cp, sp = math.cos(self.pitch), math.sin(self.pitch)
        cr, sr = math.cos(self.roll), math.sin(self.roll)
        rz = np.array([[ch, -sh, 0.0], [sh, ch, 0.0], [0.0, 0.0, 1.0]])
        ry = np.array([[cp, 0.0, sp], [0.0, 1.0, 0.0], [-sp, 0.0, cp]])
        rx = np.array([[1.0, 0.0, 0.0], [0.0, cr, -sr], [0.0, sr, cr]])
        return rz @ ry @ rx

    @classmethod
    def of_matrix(cls, rotation: np.ndarray) -> "Rotation3D":
        r = np.asarray(rotation, dtype=float)
        pitch = math.asin(max(-1.0, min(1.0, -r[2, 0])))
        if abs(math.cos(pitch)) < 1e-12:
            # gimbal lock, fold the roll into the heading
            heading = math.atan2(-r[0, 1], r[1, 1])
            roll = 0.0
        else:
            heading = math.atan2(r[1, 0], r[0, 0])
            roll = math.atan2(r[2, 1], r[2, 2])
        return cls(heading, pitch, roll)


@dataclass(frozen=True)
class Pose3D:
    point: Vec3
    rotation: Rotation3D = field(default_factory=Rotation3D)

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", to_vec3(self.point))
        if not all(math.isfinite(c) for c in self.point):
            raise ValueError(f"pose point must be finite, got {self.point!r}")


def rotation_about_axis(axis: Sequence[float], angle: float) -> np.ndarray:
    """3x3 rotation by ``angle`` radians about ``axis`` (right-hand rule)."""

    u = np.asarray(axis, dtype=float)
    m = float(np.linalg.norm(u))
    if m < 1e-12:
        raise ValueError('zero-length rotation axis not allowed')
    ux, uy, uz = u / m

    cang = math.cos(angle)
    cmin = 1.0 - cang
    sang = math.sin(angle)

    # see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    return np.array([[cang + ux * ux * cmin, ux * uy * cmin - uz * sang, ux * uz * cmin + uy * sang],
                     [uy * ux * cmin + uz * sang, cang + uy * uy * cmin, uy * uz * cmin - ux * sang],
                     [uz * ux * cmin - uy * sang, uz * uy * cmin + ux * sang, cang + uz * uz * cmin]])


class _Affine:
    """Shared implementation of homogeneous affine maps of dimension ``DIM``."""

    DIM = 0

    def __init__(self, matrix) -> None:
        size = self.DIM + 1
        m = np.array(matrix, dtype=float)
        if m.shape != (size, size):
            raise ValueError(f'affine matrix must have shape {(size, size)}, got {m.shape}')
        if not np.all(np.isfinite(m)):
            raise ValueError('affine matrix must be finite')
        bottom = np.zeros(size)
        bottom[-1] = 1.0
        if not np.allclose(m[-1], bottom, rtol=0.0, atol=1e-12):
            raise ValueError(f'bad last row in affine matrix: {m[-1]}')
        m[-1] = bottom
        m.setflags(write=False)
        self.matrix = m

    @classmethod
    def identity(cls):
        return cls(np.eye(cls.DIM + 1))

    @classmethod
    def of_translation(cls, delta: Sequence[float]):
        m = np.eye(cls.DIM + 1)
        m[:cls.DIM, cls.DIM] = np.asarray(delta, dtype=float)[:cls.DIM]
        return cls(m)

    @classmethod
    def of_scaling(cls, *factors: float):
        if len(factors) == 1:
            factors = factors * cls.DIM
        if len(factors) != cls.DIM:
            raise ValueError(f'expected 1 or {cls.DIM} scaling factors, got {len(factors)}')
        m = np.eye(cls.DIM + 1)
        for i, f in enumerate(factors):
            m[i, i] = f
        return cls(m)

    @classmethod
    def of_list(cls, affines: Iterable):
        result = cls.identity()
        for affine in affines:
            result = result.append(affine)
        return result

    def append(self, other):
        """Return ``self @ other``: ``other`` is applied first."""

        return type(self)(self.matrix @ other.matrix)

    def inverse(self):
        return type(self)(np.linalg.inv(self.matrix))

    def _apply(self, matrix: np.ndarray, point: Sequence[float]) -> tuple:
        homogeneous = np.append(np.asarray(point, dtype=float)[:self.DIM], 1.0)
        mapped = matrix @ homogeneous
        return tuple(float(c) for c in mapped[:self.DIM])

    def transform_points(self, points: Iterable[Sequence[float]]) -> List[tuple]:
        return [self.transform(p) for p in points]

    def inverse_transform_points(self, points: Iterable[Sequence[float]]) -> List[tuple]:
        inverse = self.inverse()
        return [inverse.transform(p) for p in points]

    def extract_translation(self) -> tuple:
        return tuple(float(c) for c in self.matrix[:self.DIM, self.DIM])

    def extract_scaling(self) -> tuple:
        linear = self.matrix[:self.DIM, :self.DIM]
        return tuple(float(np.linalg.norm(linear[:, i])) for i in range(self.DIM))

    def to_matrix(self) -> np.ndarray:
        return self.matrix.copy()

    def is_close(self, other, tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.matrix, other.matrix, rtol=0.0, atol=tol))

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and bool(np.array_equal(self.matrix, other.matrix))

    def __hash__(self) -> int:
        return hash(self.matrix.tobytes())

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.matrix.tolist()})'


class Affine2D(_Affine):
    """Affine map of the plane as a 3x3 homogeneous matrix."""

    DIM = 2

    @classmethod
    def of_rotation(cls, angle: float) -> "Affine2D":
        c, s = math.cos(angle), math.sin(angle)
        return cls([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])

    @classmethod
    def of_pose(cls, pose: Pose2D) -> "Affine2D":
        """Frame located at ``pose.point`` and rotated by ``pose.heading``."""

        return cls.of_translation(pose.point).append(cls.of_rotation(pose.heading))

    def transform(self, point: Sequence[float]) -> Vec2:
        return self._apply(self.matrix, point)

    def inverse_transform(self, point: Sequence[float]) -> Vec2:
        return self._apply(np.linalg.inv(self.matrix), point)

    def extract_rotation(self) -> float:
        return normalize_angle(math.atan2(self.matrix[1, 0], self.matrix[0, 0]))

    def transform_heading(self, heading: float) -> float:
        return normalize_angle(heading + self.extract_rotation())

    def inverse_transform_heading(self, heading: float) -> float:
        return normalize_angle(heading - self.extract_rotation())

    def transform_pose(self, pose: Pose2D) -> Pose2D:
        return Pose2D(self.transform(pose.point), self.transform_heading(pose.heading))

    def inverse_transform_pose(self, pose: Pose2D) -> Pose2D:
        return Pose2D(self.inverse_transform(pose.point), self.inverse_transform_heading(pose.heading))


class Affine3D(_Affine):
    """Affine map of space as a 4x4 homogeneous matrix."""

    DIM = 3

    @classmethod
    def of_rotation(cls, rotation: Rotation3D) -> "Affine3D":
        m = np.eye(4)
        m[:3, :3] = rotation.matrix()
        return cls(m)

    @classmethod
    def of_rotation_about_axis(cls, axis: Sequence[float], angle: float) -> "Affine3D":
        m = np.eye(4)
        m[:3, :3] = rotation_about_axis(axis, angle)
        return cls(m)

    @classmethod
    def of_rotation_matrix(cls, rotation: np.ndarray, translation: Sequence[float] = (0.0, 0.0, 0.0)) -> "Affine3D":
        m = np.eye(4)
        m[:3, :3] = np.asarray(rotation, dtype=float)
        m[:3, 3] = np.asarray(translation, dtype=float)
        return cls(m)

    @classmethod
    def of_pose(cls, pose: Pose3D) -> "Affine3D":
        """Frame located at ``pose.point`` and oriented by ``pose.rotation``."""

        return cls.of_translation(pose.point).append(cls.of_rotation(pose.rotation))

    @classmethod
    def of_affine2d(cls, affine: Affine2D) -> "Affine3D":
        """Lift a planar map into space, leaving z untouched."""

        m = np.eye(4)
        m[:2, :2] = affine.matrix[:2, :2]
        m[:2, 3] = affine.matrix[:2, 2]
        return cls(m)

    def transform(self, point: Sequence[float]) -> Vec3:
        return self._apply(self.matrix, point)

    def inverse_transform(self, point: Sequence[float]) -> Vec3:
        return self._apply(np.linalg.inv(self.matrix), point)

    def extract_rotation(self) -> Rotation3D:
        linear = self.matrix[:3, :3] / np.array(self.extract_scaling())
        return Rotation3D.of_matrix(linear)

    def transform_rotation(self, rotation: Rotation3D) -> Rotation3D:
        return Rotation3D.of_matrix(self.extract_rotation().matrix() @ rotation.matrix())

    def transform_pose(self, pose: Pose3D) -> Pose3D:
        return Pose3D(self.transform(pose.point), self.transform_rotation(pose.rotation))

    def transform_polygon(self, polygon):
        """Map every vertex of a :class:`~roadgeom.brep.Polygon3D`."""

        from roadgeom.brep import Polygon3D

        return Polygon3D(self.transform_points(polygon.vertices), polygon.tolerance)


@dataclass(frozen=True)
class AffineSequence2D:
    """Nested planar frames from outermost to innermost."""

    affines: Tuple[Affine2D, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "affines", tuple(self.affines))

    def solve(self) -> Affine2D:
        return Affine2D.of_list(self.affines)

    def append(self, affine: Affine2D) -> "AffineSequence2D":
        return AffineSequence2D(self.affines + (affine,))

    def __len__(self) -> int:
        return len(self.affines)


@dataclass(frozen=True)
class AffineSequence3D:
    """Nested spatial frames from outermost to innermost."""

    affines: Tuple[Affine3D, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "affines", tuple(self.affines))

    def solve(self) -> Affine3D:
        return Affine3D.of_list(self.affines)

    def append(self, affine: Affine3D) -> "AffineSequence3D":
        return AffineSequence3D(self.affines + (affine,))

    def __len__(self) -> int:
        return len(self.affines)


AffineSequence2D.EMPTY = AffineSequence2D()
AffineSequence3D.EMPTY = AffineSequence3D()


__all__ = [
    "TWO_PI",
    "normalize_angle",
    "Pose2D",
    "Rotation3D",
    "Pose3D",
    "rotation_about_axis",
    "Affine2D",
    "Affine3D",
    "AffineSequence2D",
    "AffineSequence3D",
]
