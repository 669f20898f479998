"""Models for scoring documents loaded from files."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from aptscore.factors import Factor
from aptscore.scoring.models import Entity
from aptscore.scoring.weights import WeightSet

UNIFORM_WEIGHTS = "uniform"


class EntityDefinition(BaseModel):
    """An entity as written in a document, with 0-100 real scores."""

    id: str = Field(..., description="Entity identifier", min_length=1)
    name: str = Field("", description="Display name (defaults to the id)")
    location: str = Field("", description="Location label")
    scores: dict[str, float] = Field(
        default_factory=dict, description="Factor key to 0-100 score"
    )

    @field_validator("scores")
    @classmethod
    def validate_scores(cls, v: dict[str, float]) -> dict[str, float]:
        """Reject scores outside 0-100."""
        for key, score in v.items():
            if not 0.0 <= score <= 100.0:
                raise ValueError(
                    f"Score for '{key}' must be within 0-100, got {score}"
                )
        return v


class DocumentDefinition(BaseModel):
    """Raw document structure before factor resolution."""

    weights: dict[str, float] | Literal["uniform"] = Field(
        UNIFORM_WEIGHTS,
        description="Factor key to relative weight, or 'uniform'",
    )
    strategy: str | None = Field(None, description="Strategy identifier")
    entities: list[EntityDefinition] = Field(
        default_factory=list, description="Entities to score"
    )


class ScoringDocument(BaseModel):
    """A loaded document: a validated weight set and resolved entities."""

    weights: dict[Factor, int] = Field(..., description="Validated weight set")
    strategy: str | None = Field(None, description="Strategy named in the file")
    entities: list[Entity] = Field(default_factory=list)
    source: str | None = Field(None, description="File the document came from")

    @property
    def weight_set(self) -> WeightSet:
        """The weight set as a plain dictionary."""
        return dict(self.weights)

    def get_entity(self, entity_id: str) -> Entity | None:
        """Return the entity with ``entity_id`` or None."""
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        return None
