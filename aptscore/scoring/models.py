"""Data models for scoring and ranking."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aptscore.core.fixed_point import MAX_SCORE, score_from_real, to_real
from aptscore.factors import Factor, parse_factor


class StrategyType(str, Enum):
    """Built-in aggregation strategy identifiers."""

    WEIGHTED_SUM = "weighted_sum"
    GEOMETRIC_MEAN = "geometric_mean"
    MIN_MAX = "min_max"
    HARMONIC_MEAN = "harmonic_mean"


# Strategy label recorded on results produced by a calculation pipeline
PIPELINE_STRATEGY = "pipeline"


class Grade(str, Enum):
    """Letter grade for a 0-100 score."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


def score_to_grade(score: float) -> Grade:
    """Convert a 0-100 score to a letter grade."""
    if score >= 90:
        return Grade.A
    elif score >= 80:
        return Grade.B
    elif score >= 70:
        return Grade.C
    elif score >= 60:
        return Grade.D
    else:
        return Grade.F


def _coerce_factor_keys(value: Any) -> Any:
    if isinstance(value, dict):
        try:
            return {parse_factor(k): v for k, v in value.items()}
        except KeyError as e:
            # pydantic only wraps ValueError raised inside validators
            raise ValueError(e.args[0]) from e
    return value


class Entity(BaseModel):
    """A scored item, e.g. an apartment.

    ``scores`` holds scaled ScoreValues (0 to 100 * SCORE_SCALE). Factors
    missing from ``scores`` are treated as 0 during aggregation.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Entity identifier", min_length=1)
    name: str = Field("", description="Display name")
    location: str = Field("", description="Location label")
    scores: dict[Factor, int] = Field(
        default_factory=dict, description="Per-factor scaled scores"
    )

    @field_validator("scores", mode="before")
    @classmethod
    def parse_score_keys(cls, v: Any) -> Any:
        """Accept factor keys, display names or indexes as dictionary keys."""
        return _coerce_factor_keys(v)

    @field_validator("scores")
    @classmethod
    def validate_score_range(cls, v: dict[Factor, int]) -> dict[Factor, int]:
        """Reject scores outside [0, 100 * SCORE_SCALE]."""
        for factor, score in v.items():
            if score < 0 or score > MAX_SCORE:
                raise ValueError(
                    f"Score for {factor.display_name} out of range: {score}"
                )
        return v

    @classmethod
    def from_real_scores(
        cls,
        id: str,
        scores: dict[Any, float],
        name: str = "",
        location: str = "",
    ) -> "Entity":
        """Build an entity from 0-100 real scores."""
        return cls(
            id=id,
            name=name or id,
            location=location,
            scores={k: score_from_real(v) for k, v in scores.items()},
        )

    def score_of(self, factor: Factor) -> int:
        """Return the scaled score for ``factor`` (0 if absent)."""
        return self.scores.get(factor, 0)

    def missing_factors(self) -> list[Factor]:
        """Return factors without a supplied score, in canonical order."""
        return [f for f in Factor if f not in self.scores]

    def real_scores(self) -> dict[str, float]:
        """Return scores as a factor-key to 0-100 real mapping."""
        return {f.key: to_real(s) for f, s in sorted(self.scores.items())}


class FactorScore(BaseModel):
    """One factor's contribution to a ScoreResult."""

    factor: Factor = Field(..., description="Scored factor")
    raw_score: float = Field(..., description="Raw score (0-100)", ge=0.0, le=100.0)
    weight: float = Field(..., description="Weight used (0.0-1.0)", ge=0.0, le=1.0)
    weighted_score: float = Field(
        ..., description="Strategy-specific weighted figure", ge=0.0
    )


class ScoreResult(BaseModel):
    """Output of one aggregation.

    The meaning of ``weighted_scores`` depends on the strategy: a linear
    contribution for weighted sum and min-max, the per-factor exponential
    term for geometric mean, and weight * score for harmonic mean.
    """

    total_score: float = Field(..., description="Aggregated score (0-100)")
    raw_scores: dict[Factor, float] = Field(
        default_factory=dict, description="Raw per-factor scores (0-100)"
    )
    weights: dict[Factor, float] = Field(
        default_factory=dict, description="Per-factor weights used (0.0-1.0)"
    )
    weighted_scores: dict[Factor, float] = Field(
        default_factory=dict, description="Strategy-specific per-factor figures"
    )
    strategy: str = Field(..., description="Strategy identifier that produced this")
    pipeline_name: str | None = Field(
        None, description="Pipeline name when produced by a calculation pipeline"
    )
    steps_applied: list[str] = Field(
        default_factory=list, description="Pipeline steps that contributed"
    )

    @property
    def grade(self) -> Grade:
        """Letter grade of the total score."""
        return score_to_grade(self.total_score)

    @property
    def factors(self) -> list[FactorScore]:
        """Per-factor breakdown in canonical order."""
        return [
            FactorScore(
                factor=f,
                raw_score=self.raw_scores.get(f, 0.0),
                weight=self.weights.get(f, 0.0),
                weighted_score=self.weighted_scores.get(f, 0.0),
            )
            for f in Factor
        ]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary keyed by factor key."""
        return {
            "total_score": round(self.total_score, 3),
            "grade": self.grade.value,
            "strategy": self.strategy,
            "pipeline_name": self.pipeline_name,
            "steps_applied": list(self.steps_applied),
            "factors": {
                fs.factor.key: {
                    "raw": fs.raw_score,
                    "weight": fs.weight,
                    "weighted": round(fs.weighted_score, 6),
                }
                for fs in self.factors
            },
        }


class RankingResult(BaseModel):
    """An entity's score with its position in a ranked batch."""

    entity: Entity = Field(..., description="Ranked entity")
    result: ScoreResult = Field(..., description="Underlying score result")
    score: float = Field(..., description="Total score (0-100)", ge=0.0)
    rank: int = Field(..., description="1-based rank, 1 = best", ge=1)
    percentile: float = Field(
        ..., description="Min-max percentile (0-100)", ge=0.0, le=100.0
    )
    strategy: str = Field(..., description="Strategy used")


class RankingsSummary(BaseModel):
    """Ranked batch plus score range statistics."""

    total_entities: int = Field(..., description="Number of ranked entities", ge=0)
    strategy: str = Field(..., description="Strategy used for every entity")
    rankings: list[RankingResult] = Field(
        default_factory=list, description="Rankings, best first"
    )
    min_score: float = Field(..., description="Lowest total score")
    max_score: float = Field(..., description="Highest total score")
    average_score: float = Field(..., description="Mean total score")

    def top(self, n: int) -> list[RankingResult]:
        """Return the best ``n`` rankings (all when n <= 0)."""
        if n <= 0:
            return list(self.rankings)
        return self.rankings[:n]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "total_entities": self.total_entities,
            "strategy": self.strategy,
            "score_range": {
                "min": round(self.min_score, 3),
                "max": round(self.max_score, 3),
                "avg": round(self.average_score, 3),
            },
            "rankings": [
                {
                    "id": r.entity.id,
                    "name": r.entity.name,
                    "location": r.entity.location,
                    "score": round(r.score, 3),
                    "rank": r.rank,
                    "percentile": round(r.percentile, 3),
                }
                for r in self.rankings
            ],
        }
