"""Tests for score analysis."""

from collections.abc import Callable, Mapping

import pytest

from aptscore.core.exceptions import UnsupportedStrategyError
from aptscore.core.fixed_point import ScoreValue
from aptscore.factors import Factor
from aptscore.scoring.analysis import (
    BASELINE_SCORE,
    analysis_to_dict,
    analyze_score,
    compare_scores,
    strategy_impact,
)
from aptscore.scoring.models import Grade, ScoreResult
from aptscore.scoring.strategies import WeightedSumStrategy
from aptscore.scoring.weights import WeightSet


def _result(total: float) -> ScoreResult:
    return ScoreResult(total_score=total, strategy="weighted_sum")


class TestAnalyzeScore:
    """Tests for analyze_score."""

    def test_strengths_and_weaknesses(
        self, mixed_scores: Mapping[Factor, ScoreValue], uniform: WeightSet
    ) -> None:
        """Test factors at or above 80 are strengths, at or below 60 weaknesses."""
        result = WeightedSumStrategy().calculate(mixed_scores, uniform)
        analysis = analyze_score(result)

        assert Factor.FLOOR_LEVEL in analysis.strengths  # 90
        assert Factor.SCHOOL_DISTRICT in analysis.strengths  # 80
        assert Factor.DISTANCE_TO_STATION in analysis.weaknesses  # 40
        assert Factor.CONSTRUCTION_YEAR in analysis.weaknesses  # 60
        assert Factor.ELEVATOR_PRESENCE not in analysis.strengths  # 75
        assert Factor.ELEVATOR_PRESENCE not in analysis.weaknesses

    def test_top_factors_by_impact(
        self, mixed_scores: Mapping[Factor, ScoreValue], uniform: WeightSet
    ) -> None:
        """Test top factors are ordered by score times weight."""
        result = WeightedSumStrategy().calculate(mixed_scores, uniform)
        analysis = analyze_score(result, top_n=3)

        assert len(analysis.top_factors) == 3
        # 95 at weight 0.071 beats 90 at weight 0.072
        assert analysis.top_factors[0].factor is Factor.NEARBY_AMENITIES
        assert analysis.top_factors[0].impact == pytest.approx(6.745)
        impacts = [item.impact for item in analysis.top_factors]
        assert impacts == sorted(impacts, reverse=True)

    def test_zero_scores_ignored(self) -> None:
        """Test unsupplied factors are not listed as weaknesses."""
        result = WeightedSumStrategy().calculate(
            {Factor.PARKING: 50_000}, {Factor.PARKING: 1000}
        )
        analysis = analyze_score(result)
        assert analysis.weaknesses == [Factor.PARKING]
        assert len(analysis.top_factors) == 1

    def test_comparison_and_grade(self) -> None:
        """Test the total is compared against the baseline."""
        result = WeightedSumStrategy().calculate(
            {Factor.PARKING: 82_000}, {Factor.PARKING: 1000}
        )
        analysis = analyze_score(result)
        assert analysis.comparison_score == pytest.approx(82.0 - BASELINE_SCORE)
        assert analysis.grade is Grade.B

    def test_improvement_tips(self) -> None:
        """Test weaknesses with known advice produce tips."""
        result = WeightedSumStrategy().calculate(
            {Factor.CRIME_RATE: 30_000, Factor.PARKING: 40_000},
            {Factor.CRIME_RATE: 500, Factor.PARKING: 500},
        )
        analysis = analyze_score(result)
        assert len(analysis.improvement_tips) == 1
        assert "crime" in analysis.improvement_tips[0]

    def test_to_dict(
        self, flat_scores: Callable[[float], dict[Factor, int]], uniform: WeightSet
    ) -> None:
        """Test JSON-friendly analysis output."""
        result = WeightedSumStrategy().calculate(flat_scores(85.0), uniform)
        data = analysis_to_dict(analyze_score(result))
        assert data["grade"] == "B"
        assert len(data["strengths"]) == 14
        assert data["weaknesses"] == []
        assert len(data["top_factors"]) == 5


class TestCompareScores:
    """Tests for compare_scores."""

    def test_first_better(self) -> None:
        """Test a clear lead for the first option."""
        assert "first option" in compare_scores(_result(90), _result(70))

    def test_second_better(self) -> None:
        """Test a clear lead for the second option."""
        message = compare_scores(_result(60), _result(75))
        assert "second option" in message
        assert "15.0" in message

    def test_similar(self) -> None:
        """Test differences within 10 points are called similar."""
        assert "about the same" in compare_scores(_result(80), _result(72))


class TestStrategyImpact:
    """Tests for strategy_impact."""

    def test_alternatives_exclude_current(
        self, mixed_scores: Mapping[Factor, ScoreValue], uniform: WeightSet
    ) -> None:
        """Test every other strategy is evaluated."""
        impact = strategy_impact(mixed_scores, uniform, "weighted_sum")
        assert impact.used_strategy == "weighted_sum"
        assert set(impact.alternative_results) == {
            "geometric_mean",
            "min_max",
            "harmonic_mean",
        }

    def test_best_alternative_largest_difference(
        self, mixed_scores: Mapping[Factor, ScoreValue], uniform: WeightSet
    ) -> None:
        """Test the alternative with the largest absolute difference wins."""
        impact = strategy_impact(mixed_scores, uniform, "weighted_sum")
        # min_max drops the total to the lowest score, 40
        assert impact.best_alternative == "min_max"
        assert impact.difference < -5
        assert "lower" in impact.reasoning

    def test_identical_totals(
        self, flat_scores: Callable[[float], dict[Factor, int]], uniform: WeightSet
    ) -> None:
        """Test every strategy agrees on uniform perfect scores."""
        impact = strategy_impact(flat_scores(100.0), uniform, "min_max")
        assert impact.difference == pytest.approx(0.0, abs=1e-9)

    def test_unknown_current(self, uniform: WeightSet) -> None:
        """Test an unknown current strategy is rejected."""
        with pytest.raises(UnsupportedStrategyError):
            strategy_impact({}, uniform, "median")
