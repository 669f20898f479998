"""Scoring: weights, aggregation strategies, pipelines and ranking."""

from aptscore.scoring.analysis import (
    ScoreAnalysis,
    StrategyImpact,
    analyze_score,
    compare_scores,
    strategy_impact,
)
from aptscore.scoring.models import (
    PIPELINE_STRATEGY,
    Entity,
    FactorScore,
    Grade,
    RankingResult,
    RankingsSummary,
    ScoreResult,
    StrategyType,
    score_to_grade,
)
from aptscore.scoring.pipeline import (
    CalculationPipeline,
    CalculationStep,
    RunningResult,
    calculate_with_pipeline,
    family_pipeline,
    total_above,
    total_below,
)
from aptscore.scoring.ranking import rank_entities
from aptscore.scoring.strategies import (
    STRATEGY_GUIDELINES,
    GeometricMeanStrategy,
    HarmonicMeanStrategy,
    MinMaxStrategy,
    ScoringStrategy,
    StrategyRegistry,
    WeightedSumStrategy,
    calculate_with_strategy,
    get_registry,
    recommend_strategy,
)
from aptscore.scoring.weights import (
    complete_weights,
    normalize_weights,
    prepare_weights,
    uniform_weights,
    validate_weight_range,
    validate_weights,
    weights_from_real,
)

__all__ = [
    "CalculationPipeline",
    "CalculationStep",
    "Entity",
    "FactorScore",
    "GeometricMeanStrategy",
    "Grade",
    "HarmonicMeanStrategy",
    "MinMaxStrategy",
    "PIPELINE_STRATEGY",
    "RankingResult",
    "RankingsSummary",
    "RunningResult",
    "STRATEGY_GUIDELINES",
    "ScoreAnalysis",
    "ScoreResult",
    "ScoringStrategy",
    "StrategyImpact",
    "StrategyRegistry",
    "StrategyType",
    "WeightedSumStrategy",
    "analyze_score",
    "calculate_with_pipeline",
    "calculate_with_strategy",
    "compare_scores",
    "complete_weights",
    "family_pipeline",
    "get_registry",
    "normalize_weights",
    "prepare_weights",
    "rank_entities",
    "recommend_strategy",
    "score_to_grade",
    "strategy_impact",
    "total_above",
    "total_below",
    "uniform_weights",
    "validate_weight_range",
    "validate_weights",
    "weights_from_real",
]
