"""Data models for relative evaluation of scores within a group."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator


class EntityScore(BaseModel):
    """A total score attached to an entity, used as a comparison member."""

    id: str = Field(..., description="Entity identifier", min_length=1)
    score: float = Field(..., description="Total score (0-100)")
    location: str = Field("", description="Location label")
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Free-form extra attributes"
    )


class ScoreDistribution(BaseModel):
    """Distribution of scores over a comparison group.

    Quartiles use index truncation on the sorted scores (no interpolation).
    Standard deviation is the population standard deviation.
    """

    mean: float = Field(..., description="Arithmetic mean")
    median: float = Field(..., description="Median value")
    std_dev: float = Field(..., description="Population standard deviation", ge=0.0)
    min: float = Field(..., description="Minimum score")
    max: float = Field(..., description="Maximum score")
    q1: float = Field(..., description="First quartile (sorted[n // 4])")
    q3: float = Field(..., description="Third quartile (sorted[3n // 4])")
    count: int = Field(..., description="Group size", ge=1)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "mean": round(self.mean, 4),
            "median": round(self.median, 4),
            "std_dev": round(self.std_dev, 4),
            "min": round(self.min, 4),
            "max": round(self.max, 4),
            "q1": round(self.q1, 4),
            "q3": round(self.q3, 4),
            "count": self.count,
        }


class ScoreComparison(BaseModel):
    """How the target compares with the other group members."""

    better_than_count: int = Field(
        ..., description="Members scoring strictly higher than the target", ge=0
    )
    worse_than_count: int = Field(
        ..., description="Members scoring strictly lower than the target", ge=0
    )
    similar_count: int = Field(
        ..., description="Members within the similarity band of the target", ge=0
    )
    rank_percentile: float = Field(
        ..., description="Share of other members scoring higher (0-100)", ge=0.0
    )


class RelativeScore(BaseModel):
    """Result of evaluating one entity against a comparison group."""

    entity_id: str = Field(..., description="Target entity identifier")
    absolute_score: float = Field(..., description="Target total score")
    percentile_rank: float = Field(
        ..., description="Interpolated percentile (0-100)", ge=0.0, le=100.0
    )
    group_rank: int = Field(
        ..., description="Tie-aware rank in the group (0 if target not in group)"
    )
    distribution: ScoreDistribution = Field(..., description="Group distribution")
    comparison: ScoreComparison = Field(..., description="Member comparison counts")


class SimilarityCriteria(BaseModel):
    """Criteria for finding entities similar to a target."""

    location_weight: float = Field(
        0.0, description="Weight of location match in similarity", ge=0.0, le=1.0
    )
    score_range: float = Field(
        0.0, description="Maximum score distance; 0 selects the default", ge=0.0
    )
    max_results: int = Field(
        0, description="Result cap; 0 selects the default", ge=0
    )


class GroupCriteria(BaseModel):
    """Criteria for building a comparison group from a candidate pool."""

    min_score: float = Field(0.0, description="Lowest admitted score")
    max_score: float = Field(100.0, description="Highest admitted score")
    max_group_size: int = Field(
        0, description="Group size cap; 0 means unlimited", ge=0
    )

    @model_validator(mode="after")
    def validate_range(self) -> "GroupCriteria":
        """Ensure min_score <= max_score."""
        if self.min_score > self.max_score:
            raise ValueError(
                f"min_score ({self.min_score}) cannot exceed "
                f"max_score ({self.max_score})"
            )
        return self


class EvaluationSummary(BaseModel):
    """Aggregate view over a batch of relative evaluations."""

    total_evaluated: int = Field(..., description="Number of evaluated entities")
    average_score: float = Field(..., description="Mean absolute score")
    score_std_deviation: float = Field(
        ..., description="Population std deviation of absolute scores", ge=0.0
    )
    generated_at: datetime = Field(..., description="Generation timestamp")
