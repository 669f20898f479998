"""Tests for the aptscore exception hierarchy."""

import pytest

from aptscore.core.exceptions import (
    AptScoreError,
    EvaluationError,
    LoaderError,
    ParseError,
    RankingError,
    UnsupportedStrategyError,
    ValidationError,
)


class TestExceptions:
    """Tests for exception attributes and messages."""

    @pytest.mark.parametrize(
        "error",
        [
            ValidationError(field="Floor Level", message="bad"),
            UnsupportedStrategyError("nope"),
            EvaluationError("empty comparison group"),
            RankingError("apt-1", "bad score"),
            LoaderError("broken"),
            ParseError("broken"),
        ],
    )
    def test_all_derive_from_base(self, error: Exception) -> None:
        """Test every error is an AptScoreError."""
        assert isinstance(error, AptScoreError)

    def test_validation_error_carries_field(self) -> None:
        """Test ValidationError exposes the field and message."""
        error = ValidationError(field="total_weight", message="Weights must sum")
        assert error.field == "total_weight"
        assert error.message == "Weights must sum"
        assert "total_weight" in str(error)

    def test_unsupported_strategy_message(self) -> None:
        """Test the unknown identifier appears in the message."""
        error = UnsupportedStrategyError("median")
        assert error.strategy == "median"
        assert str(error) == "Unsupported strategy: median"

    def test_ranking_error_names_entity(self) -> None:
        """Test RankingError includes the entity id."""
        error = RankingError("apt-9", "score out of range")
        assert error.entity_id == "apt-9"
        assert "apt-9" in str(error)
        assert "score out of range" in str(error)

    def test_loader_error_location(self) -> None:
        """Test file and line are prefixed when known."""
        error = LoaderError("Unknown factor", line=12, file_path="doc.yaml")
        assert str(error) == "File: doc.yaml, Line: 12: Unknown factor"
        assert error.line == 12

    def test_loader_error_without_location(self) -> None:
        """Test the bare message is used without a location."""
        assert str(ParseError("Empty document")) == "Empty document"
