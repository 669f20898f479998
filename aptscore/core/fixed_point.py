"""Scaled-integer score and weight arithmetic.

Scores (0-100) and weights (0.0-1.0) are stored as integers multiplied by a
fixed scale so that repeated multiply/divide operations do not accumulate
floating-point drift. Callers convert to and from real numbers only at the
edges.

Example:
    >>> score = from_real(85.5)
    >>> score
    85500
    >>> mul_div_score(score, from_real(0.25))
    21375
    >>> to_real(21375)
    21.375
"""

# Three decimal places for both quantities
SCORE_SCALE = 1000
WEIGHT_SCALE = 1000

MIN_SCORE = 0
MAX_SCORE = 100 * SCORE_SCALE
MAX_WEIGHT = WEIGHT_SCALE

# Type aliases for readability; both are plain scaled integers
ScoreValue = int
Weight = int


def to_real(value: int, scale: int = SCORE_SCALE) -> float:
    """Convert a scaled integer to a real number.

    Args:
        value: Scaled integer value.
        scale: Scale factor the value was stored with.

    Returns:
        Real-valued equivalent.
    """
    return value / scale


def from_real(value: float, scale: int = SCORE_SCALE) -> int:
    """Convert a real number to a scaled integer.

    Rounds to the nearest unit so that values such as 0.29 map to 290
    rather than truncating to 289.

    Args:
        value: Real value.
        scale: Scale factor to store the value with.

    Returns:
        Scaled integer.
    """
    return int(round(value * scale))


def score_from_real(value: float) -> ScoreValue:
    """Convert a 0-100 real score to a ScoreValue."""
    return from_real(value, SCORE_SCALE)


def weight_from_real(value: float) -> Weight:
    """Convert a 0.0-1.0 real weight to a Weight."""
    return from_real(value, WEIGHT_SCALE)


def mul_div_score(
    score: ScoreValue, weight: Weight, scale_of_weight: int = WEIGHT_SCALE
) -> ScoreValue:
    """Combine a score with a weight: ``score * weight / scale_of_weight``.

    This is the single primitive used wherever a score is weighted. Python
    integers are unbounded, so the intermediate product cannot overflow even
    with both operands at their maximum (100 * S and S). Division truncates
    toward negative infinity, which for the non-negative domain is the same
    as truncation toward zero.

    Args:
        score: Scaled score.
        weight: Scaled weight.
        scale_of_weight: Scale the weight is stored with.

    Returns:
        Weighted score, in score scale.
    """
    return score * weight // scale_of_weight
