"""Relative evaluation of scores against comparison groups."""

from aptscore.statistics.models import (
    EntityScore,
    EvaluationSummary,
    GroupCriteria,
    RelativeScore,
    ScoreComparison,
    ScoreDistribution,
    SimilarityCriteria,
)
from aptscore.statistics.relative import (
    RelativeEvaluator,
    entity_scores_from_rankings,
)

__all__ = [
    "EntityScore",
    "EvaluationSummary",
    "GroupCriteria",
    "RelativeEvaluator",
    "RelativeScore",
    "ScoreComparison",
    "ScoreDistribution",
    "SimilarityCriteria",
    "entity_scores_from_rankings",
]
