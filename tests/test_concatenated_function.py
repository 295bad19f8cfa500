import logging
import math

import pytest

from roadgeom.errors import DomainError
from roadgeom.function import (
    ConcatenatedFunction,
    ConstantFunction,
    LinearFunction,
    SectionedUnivariateFunction,
    StackedFunction,
)
from roadgeom.range import Range


class TestLinearConcatenation:
    """piecewise linear functions forced through their intercepts"""

    def test_continuity_and_appended_constant(self):
        f = ConcatenatedFunction.of_linear_functions([0.0, 5.0], [0.0, -5.0])
        assert f.value(0.0).unwrap() == 0.0
        assert f.value(5.0).unwrap() == -5.0
        assert f.value(7.0).unwrap() == -5.0
        assert f.value(2.5).unwrap() == pytest.approx(-2.5)

    def test_before_first_start_is_domain_error(self):
        f = ConcatenatedFunction.of_linear_functions([0.0, 5.0], [0.0, -5.0])
        result = f.value(-1.0)
        assert isinstance(result.error, DomainError)

    def test_prepended_constant(self):
        f = ConcatenatedFunction.of_linear_functions([0.0, 5.0], [1.0, -4.0], prepend_constant=True)
        assert f.domain == Range.all()
        assert f.value(-10.0).unwrap() == 1.0

    def test_without_appended_constant_ends_at_last_start(self):
        f = ConcatenatedFunction.of_linear_functions([0.0, 2.0, 4.0], [0.0, 2.0, 0.0], append_constant=False)
        assert f.domain == Range.closed(0.0, 4.0)
        assert f.value(3.0).unwrap() == pytest.approx(1.0)
        assert f.value(4.0).unwrap() == pytest.approx(0.0)
        assert f.value(4.5).is_err()

    def test_slopes(self):
        f = ConcatenatedFunction.of_linear_functions([0.0, 2.0, 4.0], [0.0, 2.0, 0.0])
        assert f.slope(1.0).unwrap() == pytest.approx(1.0)
        assert f.slope(3.0).unwrap() == pytest.approx(-1.0)
        assert f.slope(10.0).unwrap() == 0.0

    def test_unsorted_starts_fail(self):
        with pytest.raises(ValueError):
            ConcatenatedFunction.of_linear_functions([5.0, 0.0], [0.0, 1.0])

    def test_size_mismatch_fails(self):
        with pytest.raises(ValueError):
            ConcatenatedFunction.of_linear_functions([0.0, 5.0], [0.0])

    def test_fuzzy_evaluation_at_closed_end(self):
        tolerance = 1e-7
        f = ConcatenatedFunction.of_linear_functions([0.0, 5.0], [0.0, 5.0], tolerance=tolerance,
                                                     append_constant=False)
        assert f.value(5.0 + tolerance / 2).is_err()
        assert f.value_in_fuzzy(5.0 + tolerance / 2, tolerance).unwrap() == pytest.approx(5.0)
        assert isinstance(f.value_in_fuzzy(5.0 + 2 * tolerance, tolerance).error, DomainError)


class TestPolynomialConcatenation:

    @pytest.mark.parametrize("offset", [0.0, -2.0, 2.0, 1234.5])
    def test_values_are_shift_invariant(self, offset):
        f = ConcatenatedFunction.of_polynomial_functions(
            [0.0 + offset, 5.0 + offset], [[2.0, 3.0, 4.0, 1.0], [1.0, 2.0, 3.0, 4.0]])
        assert f.value(0.0 + offset).unwrap() == pytest.approx(2.0)
        assert f.value(2.0 + offset).unwrap() == pytest.approx(32.0)
        assert f.value(5.0 + offset).unwrap() == pytest.approx(1.0)
        assert f.value(7.0 + offset).unwrap() == pytest.approx(49.0)

    def test_zero_length_members_are_dropped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="roadgeom.function.combination"):
            f = ConcatenatedFunction.of_polynomial_functions(
                [0.0, 0.0, 5.0], [[9.0], [2.0, 1.0], [1.0]])
        assert len(f.members) == 2
        assert f.value(0.0).unwrap() == 2.0
        assert "length zero" in caplog.text

    def test_end_closes_last_member(self):
        f = ConcatenatedFunction.of_polynomial_functions([0.0, 1.0], [[0.0, 1.0], [1.0, 2.0]], end=2.0)
        assert f.domain == Range.closed(0.0, 2.0)
        assert f.value(2.0).unwrap() == 3.0
        assert f.value(2.5).is_err()

    def test_prepend_and_append_constants(self):
        f = ConcatenatedFunction.of_polynomial_functions(
            [0.0, 1.0], [[0.5, 1.0], [1.0, 2.0]], end=2.0, prepend_constant=True, append_constant=True)
        assert f.domain == Range.all()
        assert f.value(-3.0).unwrap() == 0.5
        assert f.value(10.0).unwrap() == 3.0

    def test_explicit_constant_values(self):
        f = ConcatenatedFunction.of_polynomial_functions(
            [0.0], [[1.0]], end=1.0, prepend_constant=True, prepend_constant_value=-1.0,
            append_constant=True, append_constant_value=7.0)
        assert f.value(-1.0).unwrap() == -1.0
        assert f.value(0.5).unwrap() == 1.0
        assert f.value(1.0).unwrap() == 7.0

    def test_append_requires_end(self):
        with pytest.raises(ValueError):
            ConcatenatedFunction.of_polynomial_functions([0.0], [[1.0]], append_constant=True)

    def test_non_finite_coefficients_fail(self):
        with pytest.raises(ValueError):
            ConcatenatedFunction.of_polynomial_functions([0.0], [[math.nan]])


class TestStackedFunction:

    def test_intersection_domain_without_default(self):
        f = StackedFunction.of_sum([ConstantFunction(1.0, Range.closed(0.0, 10.0)),
                                    ConstantFunction(2.0, Range.closed(5.0, 15.0))])
        assert f.domain == Range.closed(5.0, 10.0)
        assert f.value(7.0).unwrap() == 3.0
        assert f.value(2.0).is_err()

    def test_union_domain_with_default(self):
        f = StackedFunction.of_sum([ConstantFunction(1.0, Range.closed(0.0, 10.0)),
                                    ConstantFunction(2.0, Range.closed(5.0, 15.0))], default_value=0.0)
        assert f.domain == Range.closed(0.0, 15.0)
        assert f.value(2.0).unwrap() == 1.0
        assert f.value(12.0).unwrap() == 2.0
        assert f.value(7.0).unwrap() == 3.0

    def test_disjoint_members_without_default_fail(self):
        with pytest.raises(ValueError):
            StackedFunction.of_sum([ConstantFunction(1.0, Range.closed(0.0, 1.0)),
                                    ConstantFunction(2.0, Range.closed(5.0, 6.0))])

    def test_custom_operation(self):
        f = StackedFunction([LinearFunction(1.0), LinearFunction(2.0)], lambda values: max(values))
        assert f.value(3.0).unwrap() == 6.0
        assert f.value(-3.0).unwrap() == -3.0

    def test_slope_uses_zero_for_undefined_members(self):
        f = StackedFunction.of_sum([LinearFunction(1.0, 0.0, Range.closed(0.0, 10.0)),
                                    LinearFunction(3.0, 0.0, Range.closed(5.0, 15.0))], default_value=0.0)
        assert f.slope(2.0).unwrap() == 1.0
        assert f.slope(7.0).unwrap() == 4.0

    def test_fuzzy_evaluation_reaches_member_boundaries(self):
        f = StackedFunction.of_sum([ConstantFunction(1.0, Range.closed(0.0, 10.0)),
                                    ConstantFunction(2.0, Range.closed(0.0, 10.0))])
        assert f.value_in_fuzzy(10.0 + 1e-9, 1e-7).unwrap() == 3.0


class TestSectionedFunction:

    def test_section_is_rebased(self):
        complete = LinearFunction(2.0, 1.0, Range.closed(0.0, 10.0))
        section = SectionedUnivariateFunction(complete, Range.closed_open(3.0, 5.0))
        assert section.domain == Range.closed_open(0.0, 2.0)
        assert section.value(0.0).unwrap() == 7.0
        assert section.value(1.0).unwrap() == 9.0
        assert section.value(2.0).is_err()
        assert section.slope(1.0).unwrap() == 2.0

    def test_section_of_concatenated_function(self):
        complete = ConcatenatedFunction.of_linear_functions([0.0, 5.0], [0.0, -5.0])
        section = SectionedUnivariateFunction(complete, Range.closed(4.0, 6.0))
        assert section.value(0.0).unwrap() == pytest.approx(-4.0)
        assert section.value(2.0).unwrap() == -5.0

    def test_fuzzy_slope_beyond_section_end(self):
        complete = ConcatenatedFunction.of_polynomial_functions(
            [0.0, 5.0], [[0.0, 1.0], [5.0, 1.0, 0.5]], end=10.0)
        section = SectionedUnivariateFunction(complete, Range.closed(2.0, 10.0))
        x = 8.0 + 5e-8
        assert section.value_in_fuzzy(x, 1e-7).unwrap() == pytest.approx(22.5, abs=1e-6)
        assert section.slope_in_fuzzy(x, 1e-7).unwrap() == pytest.approx(6.0, abs=1e-6)
        assert section.slope_in_fuzzy(8.0 + 1e-3, 1e-7).is_err()

    def test_scaled_fuzzy_slope(self):
        complete = ConcatenatedFunction.of_polynomial_functions(
            [0.0, 5.0], [[0.0, 1.0], [5.0, 1.0, 0.5]], end=10.0)
        scaled = complete * 2.0
        assert scaled.slope_in_fuzzy(10.0 + 5e-8, 1e-7).unwrap() == pytest.approx(12.0, abs=1e-6)

    def test_section_must_lie_within_domain(self):
        with pytest.raises(ValueError):
            SectionedUnivariateFunction(LinearFunction(1.0, 0.0, Range.closed(0.0, 1.0)), Range.closed(0.5, 2.0))

    def test_section_requires_lower_bound(self):
        with pytest.raises(ValueError):
            SectionedUnivariateFunction(LinearFunction(1.0), Range.at_most(2.0))
