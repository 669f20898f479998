"""Aggregation strategies and the strategy registry.

Each strategy turns per-factor scores and a validated weight set into a
ScoreResult:

- weighted_sum:   Σ(score × weight) / Σweight
- geometric_mean: exp(Σ weight × ln(max(score, ε)) / Σweight)
- min_max:        min(score), weights ignored for the total
- harmonic_mean:  Σweight / Σ(weight / max(score, ε))

For non-uniform scores harmonic ≤ geometric ≤ weighted sum; for uniform
scores all three coincide.
"""

import math
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from aptscore.core.exceptions import UnsupportedStrategyError, ValidationError
from aptscore.core.fixed_point import (
    MAX_SCORE,
    SCORE_SCALE,
    WEIGHT_SCALE,
    ScoreValue,
    Weight,
    mul_div_score,
    to_real,
)
from aptscore.core.logging import get_logger
from aptscore.factors import Factor
from aptscore.scoring.models import ScoreResult, StrategyType
from aptscore.scoring.weights import validate_weights

logger = get_logger(__name__)

# Floor applied before ln() and reciprocals: 0.1 points, in score scale
MIN_SCORE_FLOOR: ScoreValue = SCORE_SCALE // 10


def validate_scores(scores: Mapping[Factor, ScoreValue]) -> None:
    """Check every supplied score lies in [0, MAX_SCORE].

    Raises:
        ValidationError: Tagged with the offending factor's display name.
    """
    for factor in Factor:
        score = scores.get(factor, 0)
        if score < 0 or score > MAX_SCORE:
            raise ValidationError(
                field=factor.display_name,
                message=f"Score must be between 0 and {MAX_SCORE}, got {score}",
            )


class ScoringStrategy(ABC):
    """Base class for aggregation strategies.

    Subclasses implement ``aggregate``; ``calculate`` wraps it with input
    validation so that a bad weight set fails before any arithmetic runs.
    """

    strategy_type: str = ""
    name: str = ""
    description: str = ""

    def validate_inputs(
        self,
        scores: Mapping[Factor, ScoreValue],
        weights: Mapping[Factor, Weight],
    ) -> None:
        """Validate scores and weights.

        Raises:
            ValidationError: If any score or weight is out of range, or
                weights do not sum to WEIGHT_SCALE ± 1.
        """
        validate_scores(scores)
        validate_weights(weights)

    def calculate(
        self,
        scores: Mapping[Factor, ScoreValue],
        weights: Mapping[Factor, Weight],
        validate: bool = True,
    ) -> ScoreResult:
        """Validate inputs and aggregate.

        Args:
            scores: Factor to scaled score mapping; missing factors are 0.
            weights: Factor to scaled weight mapping; missing factors are 0.
            validate: Skip validation when the caller already validated.

        Returns:
            ScoreResult covering all 14 factors.
        """
        if validate:
            self.validate_inputs(scores, weights)

        result = self.aggregate(scores, weights)
        logger.debug(
            "strategy_calculated",
            strategy=self.strategy_type,
            total_score=result.total_score,
        )
        return result

    @abstractmethod
    def aggregate(
        self,
        scores: Mapping[Factor, ScoreValue],
        weights: Mapping[Factor, Weight],
    ) -> ScoreResult:
        """Compute the total and per-factor figures for validated inputs."""

    def _result(
        self,
        total: float,
        scores: Mapping[Factor, ScoreValue],
        weights: Mapping[Factor, Weight],
        weighted: dict[Factor, float],
    ) -> ScoreResult:
        return ScoreResult(
            total_score=total,
            raw_scores={f: to_real(scores.get(f, 0)) for f in Factor},
            weights={f: to_real(weights.get(f, 0), WEIGHT_SCALE) for f in Factor},
            weighted_scores=weighted,
            strategy=self.strategy_type,
        )


class WeightedSumStrategy(ScoringStrategy):
    """Linear weighted average; the default reference strategy."""

    strategy_type = StrategyType.WEIGHTED_SUM.value
    name = "Weighted Sum"
    description = (
        "Multiplies each factor score by its weight and sums the results."
    )

    def aggregate(
        self,
        scores: Mapping[Factor, ScoreValue],
        weights: Mapping[Factor, Weight],
    ) -> ScoreResult:
        weighted: dict[Factor, float] = {}
        weighted_total = 0.0
        total_weight = 0

        for factor in Factor:
            contribution = to_real(
                mul_div_score(scores.get(factor, 0), weights.get(factor, 0))
            )
            weighted[factor] = contribution
            weighted_total += contribution
            total_weight += weights.get(factor, 0)

        total = 0.0
        if total_weight > 0:
            total = weighted_total / to_real(total_weight, WEIGHT_SCALE)
        return self._result(total, scores, weights, weighted)


class GeometricMeanStrategy(ScoringStrategy):
    """Weighted geometric mean; one low score drags the total down hard."""

    strategy_type = StrategyType.GEOMETRIC_MEAN.value
    name = "Geometric Mean"
    description = (
        "Suited to cases where every factor must be balanced. "
        "A single low score lowers the total considerably."
    )

    def aggregate(
        self,
        scores: Mapping[Factor, ScoreValue],
        weights: Mapping[Factor, Weight],
    ) -> ScoreResult:
        weighted: dict[Factor, float] = {}
        log_sum = 0.0
        total_weight = 0

        for factor in Factor:
            score = max(scores.get(factor, 0), MIN_SCORE_FLOOR)
            weight = weights.get(factor, 0)
            weighted_log = to_real(weight, WEIGHT_SCALE) * math.log(to_real(score))
            weighted[factor] = math.exp(weighted_log)
            log_sum += weighted_log
            total_weight += weight

        total = 0.0
        if total_weight > 0:
            total = math.exp(log_sum / to_real(total_weight, WEIGHT_SCALE))
        return self._result(total, scores, weights, weighted)


class MinMaxStrategy(ScoringStrategy):
    """Worst-dimension gating: the total is the lowest raw score.

    Weighted figures are still reported per factor, but they do not enter
    the total.
    """

    strategy_type = StrategyType.MIN_MAX.value
    name = "Min-Max (Minimum Priority)"
    description = (
        "Suited to cases where every factor must clear a minimum level. "
        "The lowest score decides the total."
    )

    def aggregate(
        self,
        scores: Mapping[Factor, ScoreValue],
        weights: Mapping[Factor, Weight],
    ) -> ScoreResult:
        weighted: dict[Factor, float] = {}
        lowest = MAX_SCORE

        for factor in Factor:
            score = scores.get(factor, 0)
            weighted[factor] = to_real(mul_div_score(score, weights.get(factor, 0)))
            lowest = min(lowest, score)

        return self._result(to_real(lowest), scores, weights, weighted)


class HarmonicMeanStrategy(ScoringStrategy):
    """Weighted harmonic mean; penalizes low scores more than geometric."""

    strategy_type = StrategyType.HARMONIC_MEAN.value
    name = "Harmonic Mean"
    description = (
        "Reacts very strongly to low scores. "
        "Use when all factors matter about equally."
    )

    def aggregate(
        self,
        scores: Mapping[Factor, ScoreValue],
        weights: Mapping[Factor, Weight],
    ) -> ScoreResult:
        weighted: dict[Factor, float] = {}
        reciprocal_sum = 0.0
        total_weight = 0

        for factor in Factor:
            score = to_real(max(scores.get(factor, 0), MIN_SCORE_FLOOR))
            weight = weights.get(factor, 0)
            real_weight = to_real(weight, WEIGHT_SCALE)
            weighted[factor] = real_weight * score
            reciprocal_sum += real_weight / score
            total_weight += weight

        total = 0.0
        if reciprocal_sum > 0 and total_weight > 0:
            total = to_real(total_weight, WEIGHT_SCALE) / reciprocal_sum
        return self._result(total, scores, weights, weighted)


@dataclass(frozen=True)
class StrategyGuide:
    """When and how to use a strategy."""

    use_case: str
    best_for: str
    when_to_use: str
    limitations: str
    strengths: tuple[str, ...] = field(default_factory=tuple)
    weaknesses: tuple[str, ...] = field(default_factory=tuple)


STRATEGY_GUIDELINES: dict[str, StrategyGuide] = {
    StrategyType.WEIGHTED_SUM.value: StrategyGuide(
        use_case="General linear evaluation",
        best_for="Balanced decisions and most everyday comparisons",
        when_to_use="No special constraints; an intuitive score is wanted",
        limitations="Insensitive to extreme values; weak factors can be masked",
        strengths=("Intuitive", "Simple", "Predictable"),
        weaknesses=("Little balance enforcement", "Can hide weak factors"),
    ),
    StrategyType.GEOMETRIC_MEAN.value: StrategyGuide(
        use_case="Balance-demanding evaluation",
        best_for="Situations where every factor must be reasonably satisfied",
        when_to_use="Strict minimum standards, family homes, long-term living",
        limitations="Low scores have an outsized effect",
        strengths=("Enforces balance", "Highlights weak factors"),
        weaknesses=("Harder to predict", "Harsh on single weak factors"),
    ),
    StrategyType.MIN_MAX.value: StrategyGuide(
        use_case="Minimum requirement evaluation",
        best_for="Hard cut-offs on any single dimension",
        when_to_use="Safety standards, legal requirements, hard cut lines",
        limitations="Ignores strengths of the other factors entirely",
        strengths=("Clear pass/fail", "Guarantees a floor"),
        weaknesses=("Inflexible", "Ignores weights"),
    ),
    StrategyType.HARMONIC_MEAN.value: StrategyGuide(
        use_case="Reciprocal-relationship evaluation",
        best_for="Cost-performance and efficiency-centred evaluation",
        when_to_use="Price versus quality, energy efficiency, yield",
        limitations="Least intuitive; punishes low scores the most",
        strengths=("Emphasizes efficiency", "Strong low-score penalty"),
        weaknesses=("Hard to explain", "Narrow use cases"),
    ),
}


def recommend_strategy(profile: Mapping[str, Any] | None = None) -> str:
    """Suggest a strategy identifier from a simple user profile.

    Recognized keys: ``family_size`` (int), ``budget_constraint`` (bool),
    ``investment_focus`` (bool).
    """
    if not profile:
        return StrategyType.WEIGHTED_SUM.value

    family_size = profile.get("family_size")
    if isinstance(family_size, int) and family_size > 3:
        return StrategyType.GEOMETRIC_MEAN.value
    if profile.get("budget_constraint") is True:
        return StrategyType.MIN_MAX.value
    if profile.get("investment_focus") is True:
        return StrategyType.HARMONIC_MEAN.value
    return StrategyType.WEIGHTED_SUM.value


class StrategyRegistry:
    """
    Registry for aggregation strategies.

    Maps strategy identifiers to strategy classes. Adding a strategy never
    touches the existing ones.
    """

    def __init__(self) -> None:
        """Initialize the registry with the built-in strategies."""
        self._strategies: dict[str, type[ScoringStrategy]] = {}

        self.register(StrategyType.WEIGHTED_SUM.value, WeightedSumStrategy)
        self.register(StrategyType.GEOMETRIC_MEAN.value, GeometricMeanStrategy)
        self.register(StrategyType.MIN_MAX.value, MinMaxStrategy)
        self.register(StrategyType.HARMONIC_MEAN.value, HarmonicMeanStrategy)

    def register(
        self,
        strategy_type: str,
        strategy_class: type[ScoringStrategy],
    ) -> None:
        """
        Register a strategy.

        Args:
            strategy_type: Unique identifier for the strategy.
            strategy_class: Strategy class to instantiate.
        """
        self._strategies[strategy_type] = strategy_class

    def unregister(self, strategy_type: str) -> bool:
        """
        Unregister a strategy.

        Returns:
            True if the strategy was removed, False if it didn't exist.
        """
        return self._strategies.pop(strategy_type, None) is not None

    def get_strategy_class(self, strategy_type: str) -> type[ScoringStrategy]:
        """
        Get the strategy class for an identifier.

        Raises:
            UnsupportedStrategyError: If the identifier is not registered.
        """
        if strategy_type not in self._strategies:
            raise UnsupportedStrategyError(strategy_type)
        return self._strategies[strategy_type]

    def create(self, strategy_type: "str | StrategyType") -> ScoringStrategy:
        """
        Create a strategy instance.

        Raises:
            UnsupportedStrategyError: If the identifier is not registered.
        """
        if isinstance(strategy_type, StrategyType):
            strategy_type = strategy_type.value
        return self.get_strategy_class(strategy_type)()

    def list_strategies(self) -> list[str]:
        """List registered strategy identifiers, in registration order."""
        return list(self._strategies.keys())

    def is_registered(self, strategy_type: str) -> bool:
        """Check if a strategy identifier is registered."""
        return strategy_type in self._strategies


_default_registry: StrategyRegistry | None = None


def get_registry() -> StrategyRegistry:
    """Get the global strategy registry, creating it on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = StrategyRegistry()
    return _default_registry


def calculate_with_strategy(
    scores: Mapping[Factor, ScoreValue],
    weights: Mapping[Factor, Weight],
    strategy: "str | StrategyType" = StrategyType.WEIGHTED_SUM,
    registry: StrategyRegistry | None = None,
) -> ScoreResult:
    """Aggregate scores with the named strategy.

    Args:
        scores: Factor to scaled score mapping.
        weights: Validated factor to scaled weight mapping.
        strategy: Strategy identifier.
        registry: Registry to resolve the identifier in (global by default).

    Returns:
        ScoreResult produced by the strategy.

    Raises:
        UnsupportedStrategyError: If the strategy is unknown.
        ValidationError: If scores or weights are invalid.
    """
    registry = registry or get_registry()
    return registry.create(strategy).calculate(scores, weights)
