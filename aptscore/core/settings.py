"""aptscore configuration management.

Configuration is loaded from multiple sources with the following priority
(highest to lowest):
1. Explicit overrides (CLI options, keyword arguments)
2. Environment variables (with APTSCORE_ prefix)
3. Configuration file (aptscore.config.yaml)
4. Default values

Example usage:
    from aptscore.core.settings import get_settings

    settings = get_settings()
    print(settings.default_strategy)

Environment variable support:
    APTSCORE_LOG_LEVEL=DEBUG
    APTSCORE_DEFAULT_STRATEGY=geometric_mean
    APTSCORE_SCORING__SIMILAR_BAND=2.5
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ["aptscore.config.yaml", "aptscore.config.yml"]

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

NESTED_SECTIONS = ("scoring", "logging")


def _find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find configuration file by searching current directory and parents.

    Args:
        start_dir: Directory to start search from.
            Defaults to current working directory.

    Returns:
        Path to config file if found, None otherwise.
    """
    search_dir = start_dir or Path.cwd()

    for _ in range(10):
        for filename in CONFIG_FILE_NAMES:
            config_path = search_dir / filename
            if config_path.exists():
                return config_path

        parent = search_dir.parent
        if parent == search_dir:
            break
        search_dir = parent

    return None


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Dictionary of configuration values (empty if unreadable).
    """
    try:
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}
            return config if isinstance(config, dict) else {}
    except yaml.YAMLError as e:
        logger.warning("Failed to parse config file %s: %s", config_path, e)
        return {}
    except OSError as e:
        logger.warning("Failed to read config file %s: %s", config_path, e)
        return {}


def _validate_level(v: str) -> str:
    upper_v = v.upper()
    if upper_v not in VALID_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
    return upper_v


class ScoringSettings(BaseSettings):
    """Numeric knobs for relative evaluation and reporting."""

    similar_band: float = Field(
        default=5.0,
        ge=0.0,
        le=100.0,
        description="Absolute score distance counted as 'similar' in comparisons",
    )
    similarity_threshold: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Minimum similarity for find_similar matches",
    )
    default_similar_results: int = Field(
        default=10,
        ge=1,
        description="Result cap used when similarity criteria set none",
    )
    default_score_range: float = Field(
        default=10.0,
        gt=0.0,
        description="Score window used when similarity criteria set none",
    )
    percentile_precision: int = Field(
        default=1,
        ge=0,
        le=6,
        description="Decimal places used when displaying percentiles",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: str | None = Field(
        default=None,
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); "
        "falls back to the top-level log_level when unset",
    )
    json_output: bool = Field(
        default=False,
        description="Output logs in JSON format",
    )
    file: str | None = Field(
        default=None,
        description="Log file path (optional)",
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str | None:
        """Validate log level is a valid Python logging level."""
        return None if v is None else _validate_level(v)


class AptScoreSettings(BaseSettings):
    """Main aptscore configuration settings.

    Example:
        settings = AptScoreSettings(default_strategy="harmonic_mean")
        print(settings.scoring.similar_band)
    """

    model_config = SettingsConfigDict(
        env_prefix="APTSCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    log_level: str = Field(
        default="INFO",
        description="Application log level",
    )
    default_strategy: str = Field(
        default="weighted_sum",
        min_length=1,
        description="Strategy used when none is given explicitly",
    )

    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        return _validate_level(v)

    @field_validator("default_strategy")
    @classmethod
    def normalize_strategy(cls, v: str) -> str:
        """Strategy identifiers are lowercase snake_case."""
        return v.strip().lower().replace("-", "_")

    @model_validator(mode="before")
    @classmethod
    def load_from_config_file(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Merge values from aptscore.config.yaml under explicit values."""
        if data.get("_skip_file_loading"):
            data.pop("_skip_file_loading", None)
            return data

        config_path = _find_config_file()
        if not config_path:
            return data

        file_config = _load_yaml_config(config_path)
        if not file_config:
            return data

        logger.debug("Loaded configuration from %s", config_path)
        merged = {**file_config, **data}
        for section in NESTED_SECTIONS:
            if isinstance(file_config.get(section), dict):
                explicit = data.get(section)
                merged[section] = {
                    **file_config[section],
                    **(explicit if isinstance(explicit, dict) else {}),
                }
        return merged

    @property
    def effective_log_level(self) -> str:
        """Level used to configure logging.

        ``logging.level`` wins when set; otherwise ``log_level`` applies, so
        ``APTSCORE_LOG_LEVEL=DEBUG`` works on its own.
        """
        return self.logging.level or self.log_level

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a plain dictionary."""
        return self.model_dump()


def get_settings(
    config_file: Path | None = None,
    **overrides: Any,
) -> AptScoreSettings:
    """Get aptscore settings instance.

    Args:
        config_file: Optional explicit path to configuration file. When given,
            the automatic search for aptscore.config.yaml is skipped.
        **overrides: Explicit configuration overrides.

    Returns:
        Configured AptScoreSettings instance.
    """
    if config_file and config_file.exists():
        file_config = _load_yaml_config(config_file)
        merged = {**file_config, **overrides, "_skip_file_loading": True}
        return AptScoreSettings(**merged)

    return AptScoreSettings(**overrides)


@lru_cache
def get_cached_settings() -> AptScoreSettings:
    """Get cached settings instance.

    The cache can be cleared with get_cached_settings.cache_clear().
    """
    return get_settings()
