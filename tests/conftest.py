"""Shared pytest fixtures for aptscore tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from aptscore.core.fixed_point import score_from_real
from aptscore.core.logging import reset_logging
from aptscore.factors import Factor
from aptscore.scoring.models import Entity
from aptscore.scoring.weights import WeightSet, uniform_weights


@pytest.fixture(autouse=True)
def reset_logging_state():  # type: ignore[misc]
    """Reset logging state around each test."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def apartments_path(fixtures_dir: Path) -> Path:
    """Return path to the sample apartments document."""
    return fixtures_dir / "apartments.yaml"


@pytest.fixture
def uniform() -> WeightSet:
    """Return equal weights over all 14 factors."""
    return uniform_weights()


@pytest.fixture
def flat_scores() -> Callable[[float], dict[Factor, int]]:
    """Return a factory for score sets with every factor at the same value."""

    def make(value: float) -> dict[Factor, int]:
        return {factor: score_from_real(value) for factor in Factor}

    return make


@pytest.fixture
def mixed_scores() -> dict[Factor, int]:
    """Return a score set with clearly different factor scores."""
    values = [90, 40, 75, 60, 85, 70, 95, 55, 80, 65, 50, 88, 72, 45]
    return {factor: score_from_real(v) for factor, v in zip(Factor, values)}


@pytest.fixture
def make_entity(
    flat_scores: Callable[[float], dict[Factor, int]],
) -> Callable[..., Entity]:
    """Return a factory for entities with uniform scores."""

    def make(entity_id: str, value: float, location: str = "") -> Entity:
        return Entity(
            id=entity_id,
            name=entity_id,
            location=location,
            scores=flat_scores(value),
        )

    return make
