import logging
import math

import pytest

from roadgeom.config import DEFAULT_CONFIG
from roadgeom.curve2d import (
    Arc2D,
    CompositeCurve2D,
    CubicCurve2D,
    LateralTranslatedCurve2D,
    LineSegment2D,
    ParametricCubicCurve2D,
    SectionedCurve2D,
    Spiral2D,
    SpiralSegment2D,
)
from roadgeom.errors import DomainError, NumericalDegeneracyError
from roadgeom.function import ConstantFunction, LinearFunction
from roadgeom.range import BoundType, Range
from roadgeom.xform import Affine2D, AffineSequence2D, Pose2D

TOLERANCE = 1e-7


def _placed(x, y, heading=0.0):
    return AffineSequence2D.EMPTY.append(Affine2D.of_pose(Pose2D((x, y), heading)))


class TestLineSegment2D:

    def test_of_start_and_end(self):
        line = LineSegment2D.of((0.0, 0.0), (3.0, 4.0), TOLERANCE)
        assert line.length == pytest.approx(5.0)
        assert line.point_global(5.0).unwrap() == pytest.approx((3.0, 4.0))
        assert line.heading_global(1.0).unwrap() == pytest.approx(math.atan2(4.0, 3.0))

    def test_domain_check(self):
        line = LineSegment2D(10.0, TOLERANCE)
        assert line.domain == Range.closed_open(0.0, 10.0)
        assert line.point_local(10.0 + TOLERANCE / 2).is_ok()
        result = line.point_local(11.0)
        assert isinstance(result.error, DomainError)

    def test_closed_end(self):
        line = LineSegment2D(10.0, TOLERANCE, end_bound_type=BoundType.CLOSED)
        assert line.domain == Range.closed(0.0, 10.0)

    def test_length_must_exceed_tolerance(self):
        with pytest.raises(ValueError):
            LineSegment2D(TOLERANCE / 2, TOLERANCE)
        with pytest.raises(ValueError):
            LineSegment2D(math.inf, TOLERANCE)

    def test_point_list(self):
        points = LineSegment2D(5.0, TOLERANCE).point_list_global(1.0).unwrap()
        assert points == [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 0.0), (4.0, 0.0), (5.0, 0.0)]


class TestArc2D:

    def test_quarter_circle(self):
        arc = Arc2D(0.1, 5 * math.pi, TOLERANCE)
        assert arc.radius == pytest.approx(10.0)
        assert arc.center == (0.0, 10.0)
        assert arc.point_local(5 * math.pi).unwrap() == pytest.approx((10.0, 10.0))
        assert arc.heading_local(5 * math.pi).unwrap() == pytest.approx(math.pi / 2)

    def test_right_turn(self):
        arc = Arc2D(-0.1, 5 * math.pi, TOLERANCE)
        assert arc.point_local(5 * math.pi).unwrap() == pytest.approx((10.0, -10.0))
        assert arc.heading_local(5 * math.pi).unwrap() == pytest.approx(1.5 * math.pi)

    def test_zero_curvature_fails(self):
        with pytest.raises(ValueError):
            Arc2D(0.0, 1.0, TOLERANCE)


class TestSpiral:

    def test_unbounded_spiral(self):
        spiral = Spiral2D(0.01)
        assert spiral.point(0.0) == (0.0, 0.0)
        assert spiral.heading(10.0) == pytest.approx(0.5)
        assert spiral.curvature(10.0) == pytest.approx(0.1)
        # the spiral turns left for positive curvature rates
        assert spiral.point(10.0)[1] > 0.0
        assert Spiral2D(-0.01).point(10.0)[1] == pytest.approx(-spiral.point(10.0)[1])

    def test_spiral_requires_curvature_change(self):
        with pytest.raises(ValueError):
            Spiral2D(0.0)

    def test_placed_spiral_segment(self):
        curvature = LinearFunction.of_spiral_curvature(0.0, 0.013333327910466574, 29.999999999999996)
        placement = _placed(38.003686923043311, -1.8133261823256248, 0.33186980419884304)
        segment = SpiralSegment2D(curvature, TOLERANCE, placement)

        point = segment.point_global(29.999999999999996).unwrap()
        assert point[0] == pytest.approx(65.603727689096445, abs=1e-7)
        assert point[1] == pytest.approx(9.8074617455403796, abs=1e-7)
        heading = segment.heading_global(29.999999999999996).unwrap()
        assert heading == pytest.approx(0.53186972285460032, abs=1e-7)

    def test_segment_starts_at_local_origin(self):
        curvature = LinearFunction.of_spiral_curvature(0.01, 0.02, 20.0)
        segment = SpiralSegment2D(curvature, TOLERANCE)
        assert segment.point_local(0.0).unwrap() == pytest.approx((0.0, 0.0), abs=1e-12)
        assert segment.heading_local(0.0).unwrap() == pytest.approx(0.0, abs=1e-12)
        # heading is the integral of the curvature: 0.01 * 20 + 0.0005 * 20^2 / 2
        assert segment.heading_local(20.0).unwrap() == pytest.approx(0.3)

    def test_segment_requires_domain_from_zero(self):
        with pytest.raises(ValueError):
            SpiralSegment2D(LinearFunction(0.001, 0.0, Range.closed(1.0, 5.0)), TOLERANCE)
        with pytest.raises(ValueError):
            SpiralSegment2D(LinearFunction(0.001, 0.0, Range.at_least(0.0)), TOLERANCE)


class TestCubicCurves:

    def test_cubic(self):
        curve = CubicCurve2D([0.0, 0.0, 0.01, 0.0], 10.0, TOLERANCE)
        assert curve.point_local(5.0).unwrap() == pytest.approx((5.0, 0.25))
        assert curve.heading_local(5.0).unwrap() == pytest.approx(math.atan(0.1))

    def test_cubic_requires_four_coefficients(self):
        with pytest.raises(ValueError):
            CubicCurve2D([0.0, 1.0], 10.0, TOLERANCE)

    def test_parametric_cubic(self):
        curve = ParametricCubicCurve2D([0.0, 1.0, 0.0, 0.0], [0.0, 0.0, 1.0, 0.0], 2.0, TOLERANCE)
        assert curve.point_local(2.0).unwrap() == pytest.approx((2.0, 4.0))
        assert curve.heading_local(0.0).unwrap() == pytest.approx(0.0)
        assert curve.heading_local(0.5).unwrap() == pytest.approx(math.pi / 4)

    def test_parametric_cubic_with_vanishing_tangent(self):
        curve = ParametricCubicCurve2D([1.0, 0.0, 0.0, 0.0], [2.0, 0.0, 0.0, 0.0], 1.0, TOLERANCE)
        assert curve.point_local(0.5).unwrap() == (1.0, 2.0)
        assert isinstance(curve.heading_local(0.5).error, NumericalDegeneracyError)


class TestCompositeCurve2D:

    def _composite(self):
        line = LineSegment2D(10.0, TOLERANCE)
        arc = Arc2D(0.1, 5 * math.pi, TOLERANCE, _placed(10.0, 0.0))
        return CompositeCurve2D.of_members([line, arc])

    def test_domain(self):
        composite = self._composite()
        assert composite.domain.lower_endpoint() == 0.0
        assert composite.length == pytest.approx(10.0 + 5 * math.pi)

    def test_members_are_evaluated_in_their_frames(self):
        composite = self._composite()
        assert composite.point_global(5.0).unwrap() == pytest.approx((5.0, 0.0))
        assert composite.heading_global(5.0).unwrap() == 0.0
        assert composite.point_global(10.0 + 5 * math.pi).unwrap() == pytest.approx((20.0, 10.0))
        assert composite.heading_global(10.0 + 2.5 * math.pi).unwrap() == pytest.approx(math.pi / 4)

    def test_composite_placement(self):
        line = LineSegment2D(10.0, TOLERANCE)
        composite = CompositeCurve2D.of_members([line], affine_sequence=_placed(0.0, 0.0, math.pi / 2))
        assert composite.point_global(4.0).unwrap() == pytest.approx((0.0, 4.0), abs=1e-12)

    def test_outside(self):
        assert self._composite().point_global(-1.0).is_err()

    def test_members_must_share_tolerance(self):
        with pytest.raises(ValueError):
            CompositeCurve2D.of_members([LineSegment2D(1.0, 1e-7), LineSegment2D(1.0, 1e-6)])

    def test_continuous_members(self):
        check = self._composite().check_continuity()
        assert check.ok
        assert check.warnings == []

    def test_gap_and_kink_are_reported(self, caplog):
        line = LineSegment2D(10.0, TOLERANCE)
        shifted = LineSegment2D(5.0, TOLERANCE, _placed(10.5, 0.0, 0.1))
        composite = CompositeCurve2D.of_members([line, shifted])
        with caplog.at_level(logging.WARNING, logger="roadgeom.curve2d"):
            check = composite.check_continuity()
        assert not check
        assert check.warnings[0] == "gap of 0.5 between members 0 and 1"
        assert check.warnings[1].startswith("kink of 0.1 rad")
        assert "gap of 0.5" in caplog.text

    def test_continuity_tolerances_come_from_config(self):
        line = LineSegment2D(10.0, TOLERANCE)
        nudged = LineSegment2D(5.0, TOLERANCE, _placed(10.0 + 1e-4, 0.0, 1e-5))
        composite = CompositeCurve2D.of_members([line, nudged])
        assert len(composite.check_continuity().warnings) == 2
        relaxed = DEFAULT_CONFIG.with_overrides(distance_tolerance=1e-3, angle_tolerance=1e-4)
        assert composite.check_continuity(relaxed).ok


class TestDerivedCurves:

    def test_lateral_translation(self):
        base = LineSegment2D(10.0, TOLERANCE)
        curve = LateralTranslatedCurve2D(base, ConstantFunction(2.0), TOLERANCE)
        assert curve.point_global(3.0).unwrap() == pytest.approx((3.0, 2.0))
        assert curve.heading_global(3.0).unwrap() == 0.0

    def test_lateral_translation_with_slope(self):
        base = LineSegment2D(10.0, TOLERANCE)
        curve = LateralTranslatedCurve2D(base, LinearFunction(0.1, 0.0), TOLERANCE)
        assert curve.point_global(5.0).unwrap() == pytest.approx((5.0, 0.5))
        assert curve.heading_global(5.0).unwrap() == pytest.approx(math.atan(0.1))

    def test_lateral_offset_must_cover_curve(self):
        base = LineSegment2D(10.0, TOLERANCE)
        with pytest.raises(ValueError):
            LateralTranslatedCurve2D(base, ConstantFunction(2.0, Range.closed(0.0, 5.0)), TOLERANCE)

    def test_additional_lateral_translation(self):
        base = LineSegment2D(10.0, TOLERANCE)
        curve = LateralTranslatedCurve2D(base, ConstantFunction(2.0), TOLERANCE)
        shifted = curve.add_lateral_translation(LinearFunction(0.2, 1.0), -0.5)
        assert shifted.base is base
        assert shifted.point_global(5.0).unwrap() == pytest.approx((5.0, 1.0))
        assert shifted.heading_global(5.0).unwrap() == pytest.approx(2 * math.pi + math.atan(-0.1))
        assert shifted.heading_global(10.0 + TOLERANCE / 2).is_ok()

    def test_section(self):
        line = LineSegment2D.of((0.0, 0.0), (0.0, 10.0), TOLERANCE)
        section = SectionedCurve2D(line, Range.closed(2.0, 6.0))
        assert section.domain == Range.closed(0.0, 4.0)
        assert section.point_global(1.0).unwrap() == pytest.approx((0.0, 3.0), abs=1e-12)
        assert section.point_global(5.0).is_err()

    def test_section_must_lie_within_curve(self):
        with pytest.raises(ValueError):
            SectionedCurve2D(LineSegment2D(10.0, TOLERANCE), Range.closed(8.0, 12.0))
