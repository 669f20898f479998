"""Batch scoring and ranking of entities."""

from collections.abc import Mapping, Sequence

from aptscore.core.exceptions import AptScoreError, RankingError, ValidationError
from aptscore.core.fixed_point import Weight
from aptscore.core.logging import get_logger
from aptscore.factors import Factor
from aptscore.scoring.models import (
    Entity,
    RankingResult,
    RankingsSummary,
    ScoreResult,
    StrategyType,
)
from aptscore.scoring.strategies import (
    StrategyRegistry,
    get_registry,
    validate_scores,
)
from aptscore.scoring.weights import validate_weights

logger = get_logger(__name__)


def min_max_percentile(score: float, min_score: float, max_score: float) -> float:
    """Position of ``score`` between the batch minimum and maximum (0-100).

    Defined as 100 when every score in the batch is identical.
    """
    if max_score > min_score:
        return (score - min_score) / (max_score - min_score) * 100.0
    return 100.0


def rank_entities(
    entities: Sequence[Entity],
    weights: Mapping[Factor, Weight],
    strategy: "str | StrategyType" = StrategyType.WEIGHTED_SUM,
    registry: StrategyRegistry | None = None,
) -> RankingsSummary:
    """Score every entity with one strategy and rank them.

    Ranks are assigned 1..n in descending score order. Equal scores keep
    their input order and receive consecutive (not shared) ranks.

    Args:
        entities: Entities to rank.
        weights: Weight set applied to every entity.
        strategy: Strategy identifier.
        registry: Strategy registry (global by default).

    Returns:
        RankingsSummary with rankings best-first and the score range.

    Raises:
        ValidationError: If ``entities`` is empty or the weight set is invalid.
        UnsupportedStrategyError: If the strategy is unknown.
        RankingError: On the first entity whose score cannot be computed.
            No partial results are returned.
    """
    if not entities:
        raise ValidationError(field="entities", message="No entities to rank")

    validate_weights(weights)
    scorer = (registry or get_registry()).create(strategy)

    scored: list[tuple[Entity, ScoreResult]] = []
    for entity in entities:
        try:
            validate_scores(entity.scores)
            result = scorer.calculate(entity.scores, weights, validate=False)
        except AptScoreError as e:
            logger.warning("ranking_aborted", entity_id=entity.id, error=str(e))
            raise RankingError(entity.id, str(e)) from e
        scored.append((entity, result))

    totals = [result.total_score for _, result in scored]
    min_score = min(totals)
    max_score = max(totals)
    average = sum(totals) / len(totals)

    # sorted() is stable, so ties keep input order
    ordered = sorted(scored, key=lambda pair: pair[1].total_score, reverse=True)
    rankings = [
        RankingResult(
            entity=entity,
            result=result,
            score=result.total_score,
            rank=position,
            percentile=min_max_percentile(result.total_score, min_score, max_score),
            strategy=scorer.strategy_type,
        )
        for position, (entity, result) in enumerate(ordered, start=1)
    ]

    logger.info(
        "entities_ranked",
        count=len(rankings),
        strategy=scorer.strategy_type,
        min_score=min_score,
        max_score=max_score,
    )

    return RankingsSummary(
        total_entities=len(rankings),
        strategy=scorer.strategy_type,
        rankings=rankings,
        min_score=min_score,
        max_score=max_score,
        average_score=average,
    )
