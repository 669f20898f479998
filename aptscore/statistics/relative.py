"""Relative evaluation of a score against a comparison group."""

import math
from collections.abc import Sequence
from datetime import datetime, timezone

from aptscore.core.exceptions import EvaluationError
from aptscore.core.logging import get_logger
from aptscore.scoring.models import RankingsSummary

from .models import (
    EntityScore,
    EvaluationSummary,
    GroupCriteria,
    RelativeScore,
    ScoreComparison,
    ScoreDistribution,
    SimilarityCriteria,
)

logger = get_logger(__name__)

DEFAULT_SIMILAR_BAND = 5.0
DEFAULT_SIMILARITY_THRESHOLD = 0.6
DEFAULT_MAX_RESULTS = 10
DEFAULT_SCORE_RANGE = 10.0

# Similarity credited to a candidate in a different location
OTHER_LOCATION_SIMILARITY = 0.5


class RelativeEvaluator:
    """Evaluates entities relative to a comparison group.

    Provides:
    - Distribution statistics (mean, population std, median, naive quartiles)
    - Interpolated percentile of a score within the group
    - Better/worse/similar member counts and a tie-aware group rank
    - Similar-entity search and per-entity group evaluation
    """

    def __init__(
        self,
        similar_band: float = DEFAULT_SIMILAR_BAND,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        default_max_results: int = DEFAULT_MAX_RESULTS,
        default_score_range: float = DEFAULT_SCORE_RANGE,
    ) -> None:
        """
        Initialize the evaluator.

        Args:
            similar_band: Absolute score distance counted as "similar".
            similarity_threshold: Minimum similarity kept by find_similar.
            default_max_results: Result cap when criteria leave it at 0.
            default_score_range: Score window when criteria leave it at 0.
        """
        self.similar_band = similar_band
        self.similarity_threshold = similarity_threshold
        self.default_max_results = default_max_results
        self.default_score_range = default_score_range

    @classmethod
    def from_settings(cls, settings: object) -> "RelativeEvaluator":
        """Build an evaluator from ``AptScoreSettings.scoring``."""
        scoring = settings.scoring  # type: ignore[attr-defined]
        return cls(
            similar_band=scoring.similar_band,
            similarity_threshold=scoring.similarity_threshold,
            default_max_results=scoring.default_similar_results,
            default_score_range=scoring.default_score_range,
        )

    def evaluate_relative(
        self, target: EntityScore, group: Sequence[EntityScore]
    ) -> RelativeScore:
        """Evaluate ``target`` against ``group``.

        The group may or may not contain the target itself; comparison
        counts skip members sharing the target's id.

        Raises:
            EvaluationError: If the group is empty.
        """
        if not group:
            raise EvaluationError("empty comparison group")

        return RelativeScore(
            entity_id=target.id,
            absolute_score=target.score,
            percentile_rank=self.calculate_percentile(target.score, group),
            group_rank=self.calculate_group_rank(target, group),
            distribution=self.calculate_distribution(group),
            comparison=self.calculate_comparison(target, group),
        )

    @staticmethod
    def calculate_distribution(group: Sequence[EntityScore]) -> ScoreDistribution:
        """Calculate distribution statistics over the group's scores.

        Raises:
            EvaluationError: If the group is empty.
        """
        if not group:
            raise EvaluationError("empty comparison group")

        scores = sorted(member.score for member in group)
        n = len(scores)
        mean = sum(scores) / n
        mid = n // 2
        if n % 2 == 0:
            median = (scores[mid - 1] + scores[mid]) / 2
        else:
            median = scores[mid]
        variance = sum((s - mean) ** 2 for s in scores) / n

        return ScoreDistribution(
            mean=mean,
            median=median,
            std_dev=math.sqrt(variance),
            min=scores[0],
            max=scores[-1],
            q1=scores[n // 4],
            q3=scores[n * 3 // 4],
            count=n,
        )

    @staticmethod
    def calculate_percentile(score: float, group: Sequence[EntityScore]) -> float:
        """Percentile of ``score`` within the group (0-100).

        Scores at or below the group minimum map to 0 and scores above the
        maximum map to 100. In between, the position is interpolated
        linearly between the two bracketing sorted scores and expressed on
        the 0..n-1 index scale.
        """
        if not group:
            return 0.0

        scores = sorted(member.score for member in group)
        n = len(scores)
        lower = sum(1 for s in scores if s < score)

        if lower == 0:
            return 0.0
        if lower == n:
            return 100.0

        lower_score = scores[lower - 1]
        upper_score = scores[lower]
        if upper_score == lower_score:
            return (lower - 1) / (n - 1) * 100.0

        position = (lower - 1) + (score - lower_score) / (upper_score - lower_score)
        return position / (n - 1) * 100.0

    @staticmethod
    def calculate_group_rank(target: EntityScore, group: Sequence[EntityScore]) -> int:
        """Tie-aware (competition) rank of the target in the group.

        Equal scores share a rank and the next distinct score skips ahead,
        e.g. 90, 80, 80, 70 rank as 1, 2, 2, 4. Returns 0 if the target id
        is not in the group.
        """
        ordered = sorted(group, key=lambda member: member.score, reverse=True)
        rank = 0
        for position, member in enumerate(ordered, start=1):
            if position == 1 or member.score != ordered[position - 2].score:
                rank = position
            if member.id == target.id:
                return rank
        return 0

    def calculate_comparison(
        self, target: EntityScore, group: Sequence[EntityScore]
    ) -> ScoreComparison:
        """Count members scoring higher, lower and within the similar band.

        ``rank_percentile`` divides the better count by ``len(group) - 1``,
        the group size less the target's own slot, whether or not the
        target is a member.
        """
        better = 0
        worse = 0
        similar = 0
        for member in group:
            if member.id == target.id:
                continue
            if member.score > target.score:
                better += 1
            elif member.score < target.score:
                worse += 1
            if abs(member.score - target.score) <= self.similar_band:
                similar += 1

        n_others = len(group) - 1
        rank_percentile = better / n_others * 100.0 if n_others > 0 else 0.0
        return ScoreComparison(
            better_than_count=better,
            worse_than_count=worse,
            similar_count=similar,
            rank_percentile=rank_percentile,
        )

    def find_similar(
        self,
        target: EntityScore,
        candidates: Sequence[EntityScore],
        criteria: SimilarityCriteria | None = None,
    ) -> list[EntityScore]:
        """Find candidates similar to the target.

        Similarity blends score closeness and location match:
        ``(1 - diff / range) * (1 - lw) + location_similarity * lw``.
        Candidates outside the score window are never similar. Candidates
        are scanned in order and the scan stops at ``max_results``.
        """
        criteria = criteria or SimilarityCriteria()
        max_results = criteria.max_results or self.default_max_results
        score_range = criteria.score_range or self.default_score_range
        location_weight = criteria.location_weight

        similar: list[EntityScore] = []
        for candidate in candidates:
            if candidate.id == target.id:
                continue

            diff = abs(candidate.score - target.score)
            if diff > score_range:
                continue

            location_similarity = 1.0
            if location_weight > 0 and candidate.location != target.location:
                location_similarity = OTHER_LOCATION_SIMILARITY

            similarity = (1.0 - diff / score_range) * (
                1.0 - location_weight
            ) + location_similarity * location_weight
            if similarity >= self.similarity_threshold:
                similar.append(candidate)
            if len(similar) >= max_results:
                break

        return similar

    @staticmethod
    def filter_group(
        candidates: Sequence[EntityScore], criteria: GroupCriteria
    ) -> list[EntityScore]:
        """Select candidates inside the score window, up to the size cap."""
        group: list[EntityScore] = []
        for candidate in candidates:
            if not criteria.min_score <= candidate.score <= criteria.max_score:
                continue
            if criteria.max_group_size and len(group) >= criteria.max_group_size:
                break
            group.append(candidate)
        return group

    def evaluate_group(
        self,
        entities: Sequence[EntityScore],
        criteria: GroupCriteria | None = None,
    ) -> list[RelativeScore]:
        """Evaluate every entity against the group its criteria select.

        Entities whose filtered group is empty are skipped.

        Raises:
            EvaluationError: If ``entities`` is empty.
        """
        if not entities:
            raise EvaluationError("no entities to evaluate")

        criteria = criteria or GroupCriteria()
        group = self.filter_group(entities, criteria)
        results: list[RelativeScore] = []
        for entity in entities:
            if not group:
                logger.info("relative_evaluation_skipped", entity_id=entity.id)
                continue
            results.append(self.evaluate_relative(entity, group))
        return results

    @staticmethod
    def summarize(results: Sequence[RelativeScore]) -> EvaluationSummary:
        """Summarize a batch of relative evaluations."""
        scores = [r.absolute_score for r in results]
        if scores:
            mean = sum(scores) / len(scores)
            std = math.sqrt(sum((s - mean) ** 2 for s in scores) / len(scores))
        else:
            mean = 0.0
            std = 0.0
        return EvaluationSummary(
            total_evaluated=len(results),
            average_score=mean,
            score_std_deviation=std,
            generated_at=datetime.now(timezone.utc),
        )


def entity_scores_from_rankings(summary: RankingsSummary) -> list[EntityScore]:
    """Turn a ranked batch into comparison members, best first."""
    return [
        EntityScore(
            id=ranking.entity.id,
            score=ranking.score,
            location=ranking.entity.location,
            metadata={"name": ranking.entity.name, "rank": ranking.rank},
        )
        for ranking in summary.rankings
    ]
