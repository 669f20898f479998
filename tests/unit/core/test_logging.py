"""Tests for aptscore structured logging."""

import json
import logging
from pathlib import Path

from aptscore import __version__
from aptscore.core.logging import (
    add_common_fields,
    bind_context,
    configure_logging,
    get_bound_context,
    get_logger,
)


class TestBindContext:
    """Tests for the bind_context manager."""

    def test_context_bound_and_restored(self) -> None:
        """Test fields are visible inside the block only."""
        assert get_bound_context() == {}
        with bind_context(batch="north"):
            assert get_bound_context() == {"batch": "north"}
            with bind_context(step=2):
                assert get_bound_context() == {"batch": "north", "step": 2}
            assert get_bound_context() == {"batch": "north"}
        assert get_bound_context() == {}


class TestProcessors:
    """Tests for custom structlog processors."""

    def test_add_common_fields(self) -> None:
        """Test the library version is added."""
        event = add_common_fields(None, "info", {"event": "x"})
        assert event["aptscore_version"] == __version__


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_root_level(self) -> None:
        """Test the root logger level follows the argument."""
        configure_logging(level="WARNING", json_output=True)
        assert logging.getLogger().level == logging.WARNING

    def test_json_output_to_file(self, tmp_path: Path) -> None:
        """Test events are rendered as JSON with context fields."""
        log_file = tmp_path / "aptscore.log"
        configure_logging(level="INFO", json_output=True, log_file=str(log_file))

        logger = get_logger("aptscore.test")
        with bind_context(batch="b-1"):
            logger.info("entities_ranked", count=3)

        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["event"] == "entities_ranked"
        assert record["count"] == 3
        assert record["batch"] == "b-1"
        assert record["level"] == "info"

    def test_debug_filtered_at_info(self, tmp_path: Path) -> None:
        """Test events below the configured level are dropped."""
        log_file = tmp_path / "aptscore.log"
        configure_logging(level="INFO", json_output=True, log_file=str(log_file))

        get_logger("aptscore.test").debug("strategy_calculated", total_score=1.0)
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "strategy_calculated" not in log_file.read_text()
