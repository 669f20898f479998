"""Core primitives: errors, fixed-point arithmetic, settings and logging."""

from aptscore.core.exceptions import (
    AptScoreError,
    EvaluationError,
    LoaderError,
    ParseError,
    RankingError,
    UnsupportedStrategyError,
    ValidationError,
)
from aptscore.core.fixed_point import (
    MAX_SCORE,
    SCORE_SCALE,
    WEIGHT_SCALE,
    from_real,
    mul_div_score,
    to_real,
)

__all__ = [
    "AptScoreError",
    "EvaluationError",
    "LoaderError",
    "MAX_SCORE",
    "ParseError",
    "RankingError",
    "SCORE_SCALE",
    "UnsupportedStrategyError",
    "ValidationError",
    "WEIGHT_SCALE",
    "from_real",
    "mul_div_score",
    "to_real",
]
