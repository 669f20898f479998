"""Tests for scaled-integer score and weight arithmetic."""

import pytest

from aptscore.core.fixed_point import (
    MAX_SCORE,
    MAX_WEIGHT,
    SCORE_SCALE,
    WEIGHT_SCALE,
    from_real,
    mul_div_score,
    score_from_real,
    to_real,
    weight_from_real,
)


class TestConversions:
    """Tests for real <-> scaled conversions."""

    def test_scales(self) -> None:
        """Test both quantities use three decimal places."""
        assert SCORE_SCALE == 1000
        assert WEIGHT_SCALE == 1000
        assert MAX_SCORE == 100_000
        assert MAX_WEIGHT == 1000

    def test_to_real(self) -> None:
        """Test scaled values convert back to reals."""
        assert to_real(85500) == 85.5
        assert to_real(0) == 0.0
        assert to_real(250, WEIGHT_SCALE) == 0.25

    def test_from_real(self) -> None:
        """Test reals convert to scaled integers."""
        assert from_real(85.5) == 85500
        assert score_from_real(100.0) == MAX_SCORE
        assert weight_from_real(0.25) == 250

    def test_from_real_rounds_to_nearest(self) -> None:
        """Test decimal inputs are not truncated by float representation."""
        assert from_real(0.29) == 290
        assert weight_from_real(0.07) == 70
        assert from_real(0.0004) == 0
        assert from_real(0.0006) == 1

    def test_round_trip_over_score_range(self) -> None:
        """Test from_real(to_real(v)) == v for in-range scores."""
        for value in range(0, MAX_SCORE + 1, 997):
            assert from_real(to_real(value)) == value
        assert from_real(to_real(MAX_SCORE)) == MAX_SCORE


class TestMulDivScore:
    """Tests for the score-weight combination primitive."""

    def test_basic(self) -> None:
        """Test a score weighted by a quarter."""
        assert mul_div_score(85500, 250) == 21375

    def test_full_weight_is_identity(self) -> None:
        """Test a weight of WEIGHT_SCALE returns the score unchanged."""
        assert mul_div_score(73210, WEIGHT_SCALE) == 73210

    def test_zero_weight(self) -> None:
        """Test a zero weight returns zero."""
        assert mul_div_score(MAX_SCORE, 0) == 0

    def test_truncates(self) -> None:
        """Test integer division truncates the fraction."""
        assert mul_div_score(1, 999) == 0
        assert mul_div_score(33333, 333) == 11099

    def test_custom_scale(self) -> None:
        """Test a weight stored with a different scale."""
        assert mul_div_score(50000, 5, scale_of_weight=10) == 25000

    @pytest.mark.parametrize(
        "score,weight",
        [(MAX_SCORE, MAX_WEIGHT), (10**15, 10**6), (2**62, 2**40)],
    )
    def test_large_operands_do_not_overflow(self, score: int, weight: int) -> None:
        """Test the intermediate product is exact for large operands."""
        assert mul_div_score(score, weight) == score * weight // WEIGHT_SCALE
