"""Tests for calculation pipelines."""

import dataclasses
from collections.abc import Mapping

import pytest

from aptscore.core.exceptions import ValidationError
from aptscore.core.fixed_point import score_from_real
from aptscore.factors import Factor
from aptscore.scoring.pipeline import (
    CalculationPipeline,
    CalculationStep,
    RunningResult,
    calculate_with_pipeline,
    family_pipeline,
    total_above,
    total_below,
)


def _scores(**values: float) -> dict[Factor, int]:
    return {Factor[key.upper()]: score_from_real(v) for key, v in values.items()}


def _constant(value: float):
    def calculator(scores: Mapping, weights: Mapping) -> float:
        return value

    return calculator


class TestPredicates:
    """Tests for running-total predicates."""

    def test_total_above(self) -> None:
        """Test strict greater-than."""
        condition = total_above(60.0)
        assert condition(RunningResult(total_score=60.5)) is True
        assert condition(RunningResult(total_score=60.0)) is False

    def test_total_below(self) -> None:
        """Test strict less-than."""
        condition = total_below(10.0)
        assert condition(RunningResult(total_score=9.9)) is True
        assert condition(RunningResult(total_score=10.0)) is False

    def test_running_result_is_frozen(self) -> None:
        """Test predicates cannot modify the running result."""
        running = RunningResult(total_score=5.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            running.total_score = 99.0  # type: ignore[misc]


class TestCalculateWithPipeline:
    """Tests for calculate_with_pipeline."""

    def test_steps_run_in_priority_order(self) -> None:
        """Test steps are sorted by priority before running."""
        order: list[str] = []

        def recorder(name: str, value: float):
            def calculator(scores: Mapping, weights: Mapping) -> float:
                order.append(name)
                return value

            return calculator

        pipeline = CalculationPipeline(
            name="ordered",
            steps=[
                CalculationStep(
                    name="third", priority=3, calculator=recorder("third", 1)
                ),
                CalculationStep(
                    name="first", priority=1, calculator=recorder("first", 2)
                ),
                CalculationStep(
                    name="second", priority=2, calculator=recorder("second", 3)
                ),
            ],
        )
        result = calculate_with_pipeline({}, {}, pipeline)

        assert order == ["first", "second", "third"]
        assert result.steps_applied == ["first", "second", "third"]
        assert result.total_score == pytest.approx(6.0)

    def test_equal_priorities_keep_insertion_order(self) -> None:
        """Test sorting is stable."""
        pipeline = CalculationPipeline(name="stable")
        pipeline.add_step(CalculationStep(name="a", calculator=_constant(1)))
        pipeline.add_step(CalculationStep(name="b", calculator=_constant(1)))
        assert [s.name for s in pipeline.ordered_steps()] == ["a", "b"]

    def test_condition_sees_running_total(self) -> None:
        """Test a gated step runs only when its predicate holds."""
        seen: list[float] = []

        def condition(running: RunningResult) -> bool:
            seen.append(running.total_score)
            return running.total_score > 50.0

        pipeline = CalculationPipeline(
            name="gated",
            steps=[
                CalculationStep(name="base", priority=1, calculator=_constant(40.0)),
                CalculationStep(
                    name="bonus",
                    priority=2,
                    condition=condition,
                    calculator=_constant(10.0),
                ),
            ],
        )
        result = calculate_with_pipeline({}, {}, pipeline)

        assert seen == [40.0]
        assert result.steps_applied == ["base"]
        assert result.total_score == pytest.approx(40.0)

    def test_result_shape(self) -> None:
        """Test the result records pipeline metadata and raw inputs."""
        pipeline = CalculationPipeline(
            name="shape", steps=[CalculationStep(name="s", calculator=_constant(1))]
        )
        scores = _scores(parking=70)
        result = calculate_with_pipeline(scores, {Factor.PARKING: 1000}, pipeline)

        assert result.strategy == "pipeline"
        assert result.pipeline_name == "shape"
        assert result.weighted_scores == {}
        assert result.raw_scores[Factor.PARKING] == pytest.approx(70.0)
        assert result.weights[Factor.PARKING] == pytest.approx(1.0)
        assert len(result.raw_scores) == 14

    def test_invalid_score(self) -> None:
        """Test out-of-range scores are rejected."""
        pipeline = CalculationPipeline(name="empty")
        with pytest.raises(ValidationError):
            calculate_with_pipeline({Factor.PARKING: -1}, {}, pipeline)

    @pytest.mark.parametrize("weight", [1500, -1])
    def test_invalid_weight(self, weight: int) -> None:
        """Test out-of-range weights are rejected before any step runs."""
        calls: list[str] = []

        def calculator(scores: Mapping, weights: Mapping) -> float:
            calls.append("ran")
            return 1.0

        pipeline = CalculationPipeline(
            name="guarded", steps=[CalculationStep(name="s", calculator=calculator)]
        )
        with pytest.raises(ValidationError) as exc_info:
            calculate_with_pipeline(
                _scores(parking=70), {Factor.PARKING: weight}, pipeline
            )
        assert exc_info.value.field == "Parking"
        assert calls == []

    def test_partial_weights_accepted(self) -> None:
        """Test weights need not sum to the full scale."""
        pipeline = CalculationPipeline(
            name="partial", steps=[CalculationStep(name="s", calculator=_constant(5))]
        )
        result = calculate_with_pipeline(
            _scores(parking=70), {Factor.PARKING: 400}, pipeline
        )
        assert result.total_score == pytest.approx(5.0)
        assert result.weights[Factor.PARKING] == pytest.approx(0.4)

    def test_empty_pipeline(self) -> None:
        """Test a pipeline without steps gives zero."""
        result = calculate_with_pipeline({}, {}, CalculationPipeline(name="empty"))
        assert result.total_score == 0.0
        assert result.steps_applied == []


class TestFamilyPipeline:
    """Tests for the family pipeline."""

    def test_high_transport_bonus(self) -> None:
        """Test the full bonus is added above a base of 60."""
        scores = _scores(
            school_district=90,
            apartment_size=80,
            maintenance_fee=70,
            transportation_access=90,
        )
        result = calculate_with_pipeline(scores, {}, family_pipeline())

        # 36 + (48 + 28) * 0.4 + 1.0
        assert result.total_score == pytest.approx(67.4)
        assert result.steps_applied == [
            "school_priority",
            "size_fee_balance",
            "transport_bonus",
        ]
        assert result.pipeline_name == "family"

    def test_moderate_transport_bonus(self) -> None:
        """Test the reduced bonus for transport between 75 and 85."""
        scores = _scores(
            school_district=90,
            apartment_size=80,
            maintenance_fee=70,
            transportation_access=80,
        )
        result = calculate_with_pipeline(scores, {}, family_pipeline())
        assert result.total_score == pytest.approx(66.8)

    def test_bonus_skipped_below_threshold(self) -> None:
        """Test the bonus step is skipped when the base is not above 60."""
        scores = _scores(
            school_district=50,
            apartment_size=50,
            maintenance_fee=50,
            transportation_access=95,
        )
        result = calculate_with_pipeline(scores, {}, family_pipeline())

        assert result.total_score == pytest.approx(40.0)
        assert result.steps_applied == ["school_priority", "size_fee_balance"]
