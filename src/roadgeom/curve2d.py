"""Planar curves parametrized by arc length.

Every curve is defined in its own local frame starting at the origin with
heading 0 and carries an :class:`AffineSequence2D` that places it in the
global frame.  Evaluation accepts parameters within the curve tolerance
of the domain and reports a :class:`DomainError` result otherwise.
"""

from __future__ import annotations

import abc
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from roadgeom.config import DEFAULT_CONFIG, GeometryConfig
from roadgeom.container import ConcatenationContainer
from roadgeom.errors import DomainError, Location, NumericalDegeneracyError
from roadgeom.fresnel import fresnel
from roadgeom.function.univariate import LinearFunction, PolynomialFunction, UnivariateFunction
from roadgeom.geometry_checks import CheckResult
from roadgeom.geometry_utils import Vec2, distance, is_finite_vec, pairwise, sub
from roadgeom.range import BoundType, Range
from roadgeom.result import Err, Ok, Result
from roadgeom.xform import Affine2D, AffineSequence2D, Pose2D, normalize_angle

logger = logging.getLogger(__name__)


def _require_tolerance(tolerance: float) -> float:
    if not (math.isfinite(tolerance) and tolerance >= 0):
        raise ValueError(f"tolerance must be finite and non-negative, got {tolerance!r}")
    return float(tolerance)


def _require_length(length: float, tolerance: float) -> float:
    if not math.isfinite(length):
        raise ValueError(f"length must be finite, got {length!r}")
    if not length > tolerance:
        raise ValueError(f"length {length!r} must exceed the tolerance {tolerance!r}")
    return float(length)


class AbstractCurve2D(abc.ABC):
    """Base class of planar curves."""

    domain: Range

    def __init__(self, tolerance: float, affine_sequence: AffineSequence2D = AffineSequence2D.EMPTY):
        self.tolerance = _require_tolerance(tolerance)
        self.affine_sequence = affine_sequence

    @property
    def length(self) -> float:
        return self.domain.length()

    @abc.abstractmethod
    def point_local_unbounded(self, s: float) -> Result[Vec2]:
        """Point in the local frame, without a domain check."""

    @abc.abstractmethod
    def heading_local_unbounded(self, s: float) -> Result[float]:
        """Tangent direction in the local frame, without a domain check."""

    def _check_domain(self, s: float) -> Optional[Err]:
        if not self.domain.fuzzy_contains(s, self.tolerance):
            return Err(DomainError(f"parameter s={s!r} must be within the curve domain {self.domain}",
                                   Location(parameter=s, context=type(self).__name__)))
        return None

    def point_local(self, s: float) -> Result[Vec2]:
        return self._check_domain(s) or self.point_local_unbounded(s)

    def heading_local(self, s: float) -> Result[float]:
        return self._check_domain(s) or self.heading_local_unbounded(s)

    def point_global(self, s: float) -> Result[Vec2]:
        affine = self.affine_sequence.solve()
        return self.point_local(s).map(affine.transform)

    def heading_global(self, s: float) -> Result[float]:
        affine = self.affine_sequence.solve()
        return self.heading_local(s).map(affine.transform_heading)

    def pose_global(self, s: float) -> Result[Pose2D]:
        point = self.point_global(s)
        if point.is_err():
            return point
        return self.heading_global(s).map(lambda heading: Pose2D(point.value, heading))

    def point_list_global(self, step: float, tolerance: Optional[float] = None) -> Result[List[Vec2]]:
        """Points at ``domain.arrange(step)`` including the closed end point."""

        tol = self.tolerance if tolerance is None else tolerance
        domain = Range.closed(self.domain.lower_endpoint(), self.domain.upper_endpoint())
        points = []
        for s in domain.arrange(step, True, tol):
            point = self.point_global(s)
            if point.is_err():
                return point
            points.append(point.value)
        return Ok(points)


class LineSegment2D(AbstractCurve2D):
    """Straight segment along the local x axis."""

    def __init__(self, length: float, tolerance: float,
                 affine_sequence: AffineSequence2D = AffineSequence2D.EMPTY,
                 end_bound_type: BoundType = BoundType.OPEN):
        super().__init__(tolerance, affine_sequence)
        self.domain = Range.closed_x(0.0, _require_length(length, self.tolerance), end_bound_type)

    @classmethod
    def of(cls, start: Vec2, end: Vec2, tolerance: float,
           end_bound_type: BoundType = BoundType.OPEN) -> "LineSegment2D":
        dx, dy = sub(end, start)
        pose = Pose2D(start, math.atan2(dy, dx))
        return cls(math.hypot(dx, dy), tolerance,
                   AffineSequence2D.EMPTY.append(Affine2D.of_pose(pose)), end_bound_type)

    def point_local_unbounded(self, s: float) -> Result[Vec2]:
        return Ok((s, 0.0))

    def heading_local_unbounded(self, s: float) -> Result[float]:
        return Ok(0.0)


class Arc2D(AbstractCurve2D):
    """Circular arc of constant ``curvature``, positive turning left."""

    def __init__(self, curvature: float, length: float, tolerance: float,
                 affine_sequence: AffineSequence2D = AffineSequence2D.EMPTY,
                 end_bound_type: BoundType = BoundType.OPEN):
        super().__init__(tolerance, affine_sequence)
        if not math.isfinite(curvature) or curvature == 0.0:
            raise ValueError(f"arc curvature must be finite and non-zero, got {curvature!r}")
        self.curvature = float(curvature)
        self.domain = Range.closed_x(0.0, _require_length(length, self.tolerance), end_bound_type)

    @property
    def radius(self) -> float:
        return 1.0 / abs(self.curvature)

    @property
    def center(self) -> Vec2:
        return (0.0, 1.0 / self.curvature)

    def point_local_unbounded(self, s: float) -> Result[Vec2]:
        angle = self.curvature * s
        return Ok((math.sin(angle) / self.curvature, (1.0 - math.cos(angle)) / self.curvature))

    def heading_local_unbounded(self, s: float) -> Result[float]:
        return Ok(normalize_angle(self.curvature * s))


@dataclass(frozen=True)
class Spiral2D:
    """Unbounded clothoid through the origin whose curvature is ``cdot * l``."""

    cdot: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.cdot) or self.cdot == 0.0:
            raise ValueError(f"curvature rate must be finite and non-zero, got {self.cdot!r}")

    @property
    def scale(self) -> float:
        """Arc length corresponding to a unit step of the normalized Fresnel parameter."""

        return math.sqrt(math.pi / abs(self.cdot))

    def point(self, l: float) -> Vec2:
        aux = self.scale
        x, y = fresnel(l / aux)
        if self.cdot < 0:
            y = -y
        return x * aux, y * aux

    def heading(self, l: float) -> float:
        return l * l * self.cdot / 2.0

    def curvature(self, l: float) -> float:
        return self.cdot * l

    def pose(self, l: float) -> Pose2D:
        return Pose2D(self.point(l), self.heading(l))


class SpiralSegment2D(AbstractCurve2D):
    """Section of a clothoid whose curvature runs along ``curvature_function``."""

    def __init__(self, curvature_function: LinearFunction, tolerance: float,
                 affine_sequence: AffineSequence2D = AffineSequence2D.EMPTY,
                 end_bound_type: BoundType = BoundType.OPEN):
        super().__init__(tolerance, affine_sequence)
        domain = curvature_function.domain
        if not (domain.has_lower_bound() and domain.lower_endpoint() == 0.0):
            raise ValueError("curvature function domain must start at 0")
        if not domain.has_upper_bound():
            raise ValueError("curvature function domain must be bounded")
        length = _require_length(domain.upper_endpoint(), self.tolerance)
        self.curvature_function = curvature_function
        self.spiral = Spiral2D(curvature_function.slope_value)
        self.length_start = curvature_function.intercept / curvature_function.slope_value
        self._start_frame = Affine2D.of_pose(self.spiral.pose(self.length_start))
        self._start_heading = self.spiral.heading(self.length_start)
        self.domain = Range.closed_x(0.0, length, end_bound_type)

    def point_local_unbounded(self, s: float) -> Result[Vec2]:
        point = self._start_frame.inverse_transform(self.spiral.point(self.length_start + s))
        return Ok(point)

    def heading_local_unbounded(self, s: float) -> Result[float]:
        return Ok(normalize_angle(self.spiral.heading(self.length_start + s) - self._start_heading))


class CubicCurve2D(AbstractCurve2D):
    """Explicit cubic ``y = a + b x + c x^2 + d x^3`` over ``x`` in ``[0, length]``."""

    def __init__(self, coefficients: Sequence[float], length: float, tolerance: float,
                 affine_sequence: AffineSequence2D = AffineSequence2D.EMPTY,
                 end_bound_type: BoundType = BoundType.OPEN):
        super().__init__(tolerance, affine_sequence)
        if len(coefficients) != 4:
            raise ValueError(f"cubic curve requires four coefficients, got {len(coefficients)}")
        self.polynomial = PolynomialFunction(coefficients)
        self.domain = Range.closed_x(0.0, _require_length(length, self.tolerance), end_bound_type)

    def point_local_unbounded(self, s: float) -> Result[Vec2]:
        return self.polynomial.value_unbounded(s).map(lambda y: (s, y))

    def heading_local_unbounded(self, s: float) -> Result[float]:
        return self.polynomial.slope_unbounded(s).map(lambda slope: normalize_angle(math.atan(slope)))


class ParametricCubicCurve2D(AbstractCurve2D):
    """Parametric cubic ``(u(p), v(p))`` over ``p`` in ``[0, length]``."""

    def __init__(self, coefficients_x: Sequence[float], coefficients_y: Sequence[float],
                 length: float, tolerance: float,
                 affine_sequence: AffineSequence2D = AffineSequence2D.EMPTY,
                 end_bound_type: BoundType = BoundType.OPEN):
        super().__init__(tolerance, affine_sequence)
        if len(coefficients_x) != 4 or len(coefficients_y) != 4:
            raise ValueError("parametric cubic curve requires four coefficients per axis")
        self.polynomial_x = PolynomialFunction(coefficients_x)
        self.polynomial_y = PolynomialFunction(coefficients_y)
        self.domain = Range.closed_x(0.0, _require_length(length, self.tolerance), end_bound_type)

    def point_local_unbounded(self, s: float) -> Result[Vec2]:
        return self.polynomial_x.value_unbounded(s).and_then(
            lambda x: self.polynomial_y.value_unbounded(s).map(lambda y: (x, y)))

    def heading_local_unbounded(self, s: float) -> Result[float]:
        dx = self.polynomial_x.slope_unbounded(s).unwrap_or(math.nan)
        dy = self.polynomial_y.slope_unbounded(s).unwrap_or(math.nan)
        if not is_finite_vec((dx, dy)) or (dx == 0.0 and dy == 0.0):
            return Err(NumericalDegeneracyError("tangent of the parametric cubic vanishes",
                                                Location(parameter=s, context=type(self).__name__)))
        return Ok(normalize_angle(math.atan2(dy, dx)))


class CompositeCurve2D(AbstractCurve2D):
    """Curve members placed end to end; members are evaluated in their global frames."""

    def __init__(self, members: Sequence[AbstractCurve2D], absolute_domains: Sequence[Range],
                 absolute_starts: Sequence[float],
                 affine_sequence: AffineSequence2D = AffineSequence2D.EMPTY):
        if not members:
            raise ValueError("composite curve requires at least one member")
        tolerances = {m.tolerance for m in members}
        if len(tolerances) != 1:
            raise ValueError(f"composite curve members must share one tolerance, got {sorted(tolerances)}")
        super().__init__(members[0].tolerance, affine_sequence)
        self.container: ConcatenationContainer[AbstractCurve2D] = ConcatenationContainer(
            members, absolute_domains, absolute_starts, self.tolerance)
        self.domain = self.container.domain

    @classmethod
    def of_members(cls, members: Sequence[AbstractCurve2D], start: float = 0.0,
                   affine_sequence: AffineSequence2D = AffineSequence2D.EMPTY) -> "CompositeCurve2D":
        container = ConcatenationContainer.of_lengths(members, start, members[0].tolerance if members else 0.0)
        return cls(container.members, container.absolute_domains, container.absolute_starts, affine_sequence)

    @property
    def members(self) -> List[AbstractCurve2D]:
        return self.container.members

    def check_continuity(self, config: GeometryConfig = DEFAULT_CONFIG) -> CheckResult:
        """Report gaps and kinks between consecutive members.

        A gap is a distance above ``config.distance_tolerance`` between the
        end of one member and the start of the next one; a kink is a heading
        change there above ``config.angle_tolerance``.
        """

        warnings: List[str] = []
        for index, (before, after) in enumerate(pairwise(self.members)):
            end = before.pose_global(before.domain.upper_endpoint())
            start = after.pose_global(after.domain.lower_endpoint())
            if end.is_err() or start.is_err():
                warnings.append(f"members {index} and {index + 1} cannot be evaluated at their junction")
                continue
            gap = distance(end.value.point, start.value.point)
            if gap > config.distance_tolerance:
                warnings.append(f"gap of {gap:.6g} between members {index} and {index + 1}")
            kink = abs(normalize_angle(start.value.heading - end.value.heading, center=0.0))
            if kink > config.angle_tolerance:
                warnings.append(f"kink of {kink:.6g} rad between members {index} and {index + 1}")
        for warning in warnings:
            logger.warning("composite curve: %s", warning)
        return CheckResult(not warnings, warnings)

    def point_local_unbounded(self, s: float) -> Result[Vec2]:
        return self.container.fuzzy_select_member(s, self.tolerance).and_then(
            lambda request: request.member.point_global(request.local_parameter))

    def heading_local_unbounded(self, s: float) -> Result[float]:
        return self.container.fuzzy_select_member(s, self.tolerance).and_then(
            lambda request: request.member.heading_global(request.local_parameter))


class LateralTranslatedCurve2D(AbstractCurve2D):
    """``base`` shifted sideways by ``lateral_offset(s)`` along its normal."""

    def __init__(self, base: AbstractCurve2D, lateral_offset: UnivariateFunction, tolerance: float):
        super().__init__(tolerance)
        if not lateral_offset.domain.fuzzy_encloses(base.domain, self.tolerance):
            raise ValueError(f"lateral offset domain {lateral_offset.domain} must enclose "
                             f"the curve domain {base.domain}")
        self.base = base
        self.lateral_offset = lateral_offset
        self.domain = base.domain

    def add_lateral_translation(self, offset: UnivariateFunction,
                                factor: float = 1.0) -> "LateralTranslatedCurve2D":
        """Same base curve, shifted by ``lateral_offset(s) + factor * offset(s)``."""

        return LateralTranslatedCurve2D(self.base, self.lateral_offset + offset * factor, self.tolerance)

    def point_local_unbounded(self, s: float) -> Result[Vec2]:
        pose = self.base.pose_global(s)
        if pose.is_err():
            return pose
        return self.lateral_offset.value_in_fuzzy(s, self.tolerance).map(
            lambda t: Affine2D.of_pose(pose.value).transform((0.0, t)))

    def heading_local_unbounded(self, s: float) -> Result[float]:
        heading = self.base.heading_global(s)
        if heading.is_err():
            return heading
        return self.lateral_offset.slope_in_fuzzy(s, self.tolerance).map(
            lambda slope: normalize_angle(heading.value + math.atan(slope)))


class SectionedCurve2D(AbstractCurve2D):
    """Part of ``complete`` cut to ``section`` and re-based to start at 0."""

    def __init__(self, complete: AbstractCurve2D, section: Range):
        super().__init__(complete.tolerance)
        if not section.has_lower_bound():
            raise ValueError("section must have a lower bound")
        if not complete.domain.fuzzy_encloses(section, complete.tolerance):
            raise ValueError(f"section {section} exceeds the curve domain {complete.domain}")
        self.complete = complete
        self.section_start = section.lower_endpoint()
        self.domain = section.shift_lower_endpoint_to(0.0)

    def point_local_unbounded(self, s: float) -> Result[Vec2]:
        return self.complete.point_global(self.section_start + s)

    def heading_local_unbounded(self, s: float) -> Result[float]:
        return self.complete.heading_global(self.section_start + s)


__all__ = [
    "AbstractCurve2D",
    "LineSegment2D",
    "Arc2D",
    "Spiral2D",
    "SpiralSegment2D",
    "CubicCurve2D",
    "ParametricCubicCurve2D",
    "CompositeCurve2D",
    "LateralTranslatedCurve2D",
    "SectionedCurve2D",
]
