"""Score analysis: strengths, weaknesses, impact ranking, strategy comparison."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from aptscore.core.exceptions import AptScoreError
from aptscore.core.fixed_point import (
    WEIGHT_SCALE,
    ScoreValue,
    Weight,
    from_real,
    mul_div_score,
    to_real,
)
from aptscore.core.logging import get_logger
from aptscore.factors import Factor
from aptscore.scoring.models import Grade, ScoreResult, StrategyType, score_to_grade
from aptscore.scoring.strategies import StrategyRegistry, get_registry

logger = get_logger(__name__)

STRENGTH_THRESHOLD = 80.0
WEAKNESS_THRESHOLD = 60.0
BASELINE_SCORE = 75.0
# Difference above which one option is called clearly better
COMPARISON_MARGIN = 10.0
# Difference below which switching strategy is called negligible
STRATEGY_IMPACT_MARGIN = 5.0

IMPROVEMENT_TIPS: dict[Factor, str] = {
    Factor.FLOOR_LEVEL: "Consider units closer to the middle floors",
    Factor.DISTANCE_TO_STATION: "Look for a unit closer to a station",
    Factor.ELEVATOR_PRESENCE: "Prefer buildings with an elevator",
    Factor.CONSTRUCTION_YEAR: "Consider more recently built buildings",
    Factor.CONSTRUCTION_COMPANY: "Consider buildings from a reputable builder",
    Factor.APARTMENT_SIZE: "Choose a unit of a more suitable size",
    Factor.SCHOOL_DISTRICT: "Consider an area with a better school district",
    Factor.CRIME_RATE: "Choose a safer area with a lower crime rate",
    Factor.MAINTENANCE_FEE: "Look for a unit with a reasonable maintenance fee",
}


class FactorImpact(BaseModel):
    """A factor's raw score, weight and linear impact on the total."""

    factor: Factor = Field(..., description="Scored factor")
    score: float = Field(..., description="Raw score (0-100)")
    weight: float = Field(..., description="Weight (0.0-1.0)")
    impact: float = Field(..., description="score * weight, on the 0-100 scale")


class ScoreAnalysis(BaseModel):
    """Readable breakdown of a single ScoreResult."""

    total_score: float = Field(..., description="Analyzed total score")
    grade: Grade = Field(..., description="Letter grade of the total")
    strengths: list[Factor] = Field(default_factory=list)
    weaknesses: list[Factor] = Field(default_factory=list)
    top_factors: list[FactorImpact] = Field(default_factory=list)
    improvement_tips: list[str] = Field(default_factory=list)
    comparison_score: float = Field(
        ..., description="Total minus the baseline score"
    )


class StrategyImpact(BaseModel):
    """Totals of one input under every registered strategy."""

    used_strategy: str = Field(..., description="Strategy the caller used")
    current_score: float = Field(..., description="Total under the used strategy")
    alternative_results: dict[str, float] = Field(default_factory=dict)
    best_alternative: str | None = Field(
        None, description="Alternative with the largest absolute difference"
    )
    difference: float = Field(0.0, description="Best alternative minus current")
    reasoning: str = Field("", description="Human-readable explanation")


def analyze_score(result: ScoreResult, top_n: int = 5) -> ScoreAnalysis:
    """Analyze a score result.

    Factors with a zero raw score are treated as unsupplied and left out.
    A factor scoring at least 80 is a strength, one at most 60 a weakness.
    Top factors are ordered by impact, the truncated fixed-point product of
    raw score and weight.
    """
    strengths: list[Factor] = []
    weaknesses: list[Factor] = []
    impacts: list[FactorImpact] = []

    for factor in Factor:
        raw = result.raw_scores.get(factor, 0.0)
        if raw == 0:
            continue
        weight = result.weights.get(factor, 0.0)
        impact = mul_div_score(from_real(raw), from_real(weight, WEIGHT_SCALE))
        impacts.append(
            FactorImpact(
                factor=factor, score=raw, weight=weight, impact=to_real(impact)
            )
        )
        if raw >= STRENGTH_THRESHOLD:
            strengths.append(factor)
        elif raw <= WEAKNESS_THRESHOLD:
            weaknesses.append(factor)

    impacts.sort(key=lambda item: item.impact, reverse=True)

    return ScoreAnalysis(
        total_score=result.total_score,
        grade=score_to_grade(result.total_score),
        strengths=strengths,
        weaknesses=weaknesses,
        top_factors=impacts[: max(top_n, 0)],
        improvement_tips=[
            IMPROVEMENT_TIPS[f] for f in weaknesses if f in IMPROVEMENT_TIPS
        ],
        comparison_score=result.total_score - BASELINE_SCORE,
    )


def compare_scores(first: ScoreResult, second: ScoreResult) -> str:
    """Describe how two results compare."""
    diff = first.total_score - second.total_score
    if diff > COMPARISON_MARGIN:
        return f"The first option scores {diff:.1f} points higher"
    elif diff < -COMPARISON_MARGIN:
        return f"The second option scores {-diff:.1f} points higher"
    return f"Both options score about the same (difference: {diff:.1f} points)"


def strategy_impact(
    scores: Mapping[Factor, ScoreValue],
    weights: Mapping[Factor, Weight],
    current: "str | StrategyType" = StrategyType.WEIGHTED_SUM,
    registry: StrategyRegistry | None = None,
) -> StrategyImpact:
    """Compare the current strategy's total with every other registered one.

    Strategies that fail on this input are left out of the comparison.

    Raises:
        UnsupportedStrategyError: If ``current`` is not registered.
        ValidationError: If the inputs are invalid for ``current``.
    """
    registry = registry or get_registry()
    if isinstance(current, StrategyType):
        current = current.value

    current_score = registry.create(current).calculate(scores, weights).total_score

    alternatives: dict[str, float] = {}
    for strategy_type in registry.list_strategies():
        if strategy_type == current:
            continue
        try:
            total = registry.create(strategy_type).calculate(scores, weights)
        except AptScoreError as e:
            logger.warning(
                "strategy_impact_skipped", strategy=strategy_type, error=str(e)
            )
            continue
        alternatives[strategy_type] = total.total_score

    best: str | None = None
    best_diff = 0.0
    for strategy_type, total_score in alternatives.items():
        diff = total_score - current_score
        if abs(diff) > abs(best_diff):
            best = strategy_type
            best_diff = diff

    return StrategyImpact(
        used_strategy=current,
        current_score=current_score,
        alternative_results=alternatives,
        best_alternative=best,
        difference=best_diff,
        reasoning=_impact_reasoning(best, best_diff),
    )


def _impact_reasoning(best: str | None, diff: float) -> str:
    if best is None:
        return "Every strategy gives the same score for this input."
    if diff > STRATEGY_IMPACT_MARGIN:
        return (
            f"The {best} strategy would score {diff:.1f} points higher; "
            "it favours well-balanced inputs."
        )
    if diff < -STRATEGY_IMPACT_MARGIN:
        return (
            f"The {best} strategy would score {-diff:.1f} points lower; "
            "the current strategy suits this input better."
        )
    return (
        f"The difference from the {best} strategy is only {diff:.1f} points; "
        "the current strategy is appropriate."
    )


def analysis_to_dict(analysis: ScoreAnalysis) -> dict[str, Any]:
    """Convert an analysis to a JSON-friendly dictionary keyed by factor key."""
    return {
        "total_score": round(analysis.total_score, 3),
        "grade": analysis.grade.value,
        "strengths": [f.key for f in analysis.strengths],
        "weaknesses": [f.key for f in analysis.weaknesses],
        "top_factors": [
            {"factor": item.factor.key, "impact": round(item.impact, 3)}
            for item in analysis.top_factors
        ],
        "improvement_tips": list(analysis.improvement_tips),
        "comparison_score": round(analysis.comparison_score, 3),
    }
