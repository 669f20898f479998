"""Structured logging for aptscore.

The library only obtains loggers; it never configures output. Applications
(the CLI included) call ``configure_logging`` once at startup.

Example usage:
    from aptscore.core.logging import configure_logging, get_logger

    configure_logging(level="DEBUG")
    logger = get_logger(__name__)
    logger.info("entities_ranked", count=12, strategy="weighted_sum")

    with bind_context(batch="north-district"):
        logger.info("ranking_started")  # includes batch="north-district"
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from aptscore import __version__

_bound_context: ContextVar[dict[str, Any]] = ContextVar("bound_context", default={})


class bind_context:
    """Context manager to bind additional fields to every log event.

    Example:
        with bind_context(batch_id="b-17"):
            logger.info("scoring")  # includes batch_id
    """

    def __init__(self, **kwargs: Any) -> None:
        self.ctx = kwargs
        self._token: Any = None

    def __enter__(self) -> "bind_context":
        old_context = _bound_context.get()
        self._token = _bound_context.set({**old_context, **self.ctx})
        return self

    def __exit__(self, *args: Any) -> None:
        _bound_context.reset(self._token)


def get_bound_context() -> dict[str, Any]:
    """Return the fields currently bound with ``bind_context``."""
    return dict(_bound_context.get())


# =============================================================================
# Structlog Processors
# =============================================================================


def add_bound_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add bound context variables to log events."""
    for key, value in _bound_context.get().items():
        event_dict.setdefault(key, value)
    return event_dict


def add_common_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the library version to every event."""
    event_dict.setdefault("aptscore_version", __version__)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_bound_context,
        add_common_fields,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.format_exc_info,
    ]


# =============================================================================
# Logging Configuration
# =============================================================================


def configure_logging(
    level: str | int = logging.INFO,
    json_output: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Global log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Use JSON output format. If None, auto-detects:
            True if stderr is not a TTY, False otherwise.
        log_file: Optional file path for log output.
    """
    if json_output is None:
        json_output = not sys.stderr.isatty()

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    shared_processors = _shared_processors()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if json_output:
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stderr keeps stdout free for CLI results
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def configure_logging_from_settings(settings: Any = None) -> None:
    """Configure logging from aptscore settings.

    Args:
        settings: AptScoreSettings instance. Defaults to the cached settings.
    """
    if settings is None:
        from aptscore.core.settings import get_cached_settings

        settings = get_cached_settings()

    configure_logging(
        level=settings.effective_log_level,
        json_output=settings.logging.json_output,
        log_file=settings.logging.file,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        A structured logger instance.
    """
    return structlog.get_logger(name)


def reset_logging() -> None:
    """Reset logging configuration to defaults. Used by tests."""
    _bound_context.set({})
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
