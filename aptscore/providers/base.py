"""Collaborator contracts and the core helpers that consume them.

The scoring core never computes context adjustments, supplementary data or
personalized orderings itself. It talks to collaborators through the
abstract classes below:

- ``ContextProvider``: per-factor weight multipliers for a location and time
- ``DataProvider``: raw scores for factors the caller did not supply
- ``PersonalizationConsumer``: re-orders a batch of results for a user
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from datetime import datetime

from aptscore.core.exceptions import ValidationError
from aptscore.core.fixed_point import MAX_SCORE, Weight
from aptscore.core.logging import get_logger
from aptscore.factors import Factor, parse_factor
from aptscore.scoring.models import Entity, ScoreResult
from aptscore.scoring.weights import WeightSet, normalize_weights

logger = get_logger(__name__)


class ContextProvider(ABC):
    """Source of externally adjusted weight multipliers."""

    @abstractmethod
    def get_weight_multipliers(
        self, location: str, timestamp: datetime
    ) -> dict[str, float]:
        """
        Return per-factor weight multipliers.

        Args:
            location: Location label of the entity being scored.
            timestamp: Moment the score is computed for.

        Returns:
            Mapping of factor key to multiplier. Factors not present keep
            their weight unchanged.
        """


class DataProvider(ABC):
    """Source of supplementary raw scores."""

    @abstractmethod
    def get_additional_scores(
        self, entity_id: str, missing: Sequence[Factor]
    ) -> dict[Factor, int]:
        """
        Return scaled scores for some or all of the missing factors.

        Args:
            entity_id: Entity the scores are requested for.
            missing: Factors the caller did not supply.

        Returns:
            Factor to scaled score mapping.
        """


class PersonalizationConsumer(ABC):
    """Re-orders scored results for a particular user."""

    @abstractmethod
    def recommend(
        self, results: Sequence[ScoreResult], user_id: str
    ) -> list[ScoreResult]:
        """
        Return the results as a recommendation list for ``user_id``.

        Args:
            results: Batch of score results.
            user_id: User the recommendation is for.

        Returns:
            Re-ordered results.
        """


def apply_context(
    weights: Mapping[Factor, Weight],
    provider: ContextProvider,
    location: str,
    timestamp: datetime,
) -> WeightSet:
    """Scale a weight set by a provider's multipliers, then re-normalize.

    The returned set is normalized but not validated; rounding can leave
    its total a few units off WEIGHT_SCALE.

    Raises:
        ValidationError: If a multiplier is negative or names an unknown
            factor.
    """
    multipliers = provider.get_weight_multipliers(location, timestamp)

    adjusted: WeightSet = dict(weights)
    for key, multiplier in multipliers.items():
        try:
            factor = parse_factor(key)
        except KeyError as e:
            raise ValidationError(
                field=str(key), message="Unknown factor in context multipliers"
            ) from e
        if multiplier < 0:
            raise ValidationError(
                field=factor.display_name,
                message=f"Multiplier must not be negative, got {multiplier}",
            )
        if factor in adjusted:
            adjusted[factor] = int(round(adjusted[factor] * multiplier))

    logger.debug(
        "context_applied",
        location=location,
        multipliers=len(multipliers),
    )
    return normalize_weights(adjusted)


def fill_missing_scores(entity: Entity, provider: DataProvider) -> Entity:
    """Return a copy of ``entity`` with missing factor scores filled in.

    Only factors absent from the entity are taken from the provider; any
    other scores it returns are ignored. The provider is not consulted when
    nothing is missing.

    Raises:
        ValidationError: If the provider returns an out-of-range score.
    """
    missing = entity.missing_factors()
    if not missing:
        return entity

    supplied = provider.get_additional_scores(entity.id, missing)
    filled = dict(entity.scores)
    for factor in missing:
        if factor not in supplied:
            continue
        score = supplied[factor]
        if score < 0 or score > MAX_SCORE:
            raise ValidationError(
                field=factor.display_name,
                message=f"Provider score out of range: {score}",
            )
        filled[factor] = score

    logger.debug(
        "missing_scores_filled",
        entity_id=entity.id,
        requested=len(missing),
        filled=len(filled) - len(entity.scores),
    )
    return Entity(
        id=entity.id, name=entity.name, location=entity.location, scores=filled
    )


def personalize(
    results: Sequence[ScoreResult],
    user_id: str,
    consumer: PersonalizationConsumer | None = None,
) -> list[ScoreResult]:
    """Hand results to a personalization consumer, if one is configured."""
    if consumer is None:
        return list(results)
    return consumer.recommend(list(results), user_id)
