"""Weight set validation and normalization.

A weight set maps each Factor to a scaled Weight (0 to WEIGHT_SCALE).
Absent factors count as zero. A valid set sums to WEIGHT_SCALE within a
tolerance of one unit.
"""

from collections.abc import Mapping
from typing import Any

from aptscore.core.exceptions import ValidationError
from aptscore.core.fixed_point import (
    MAX_WEIGHT,
    WEIGHT_SCALE,
    Weight,
    to_real,
    weight_from_real,
)
from aptscore.core.logging import get_logger
from aptscore.factors import FACTOR_COUNT, Factor, parse_factor

logger = get_logger(__name__)

# Allowed deviation of a validated weight total from WEIGHT_SCALE
WEIGHT_TOTAL_TOLERANCE = 1

WeightSet = dict[Factor, Weight]


def weights_total(weights: Mapping[Factor, Weight]) -> int:
    """Return the sum of all entries in a weight set."""
    return sum(weights.values())


def validate_weight_range(weights: Mapping[Factor, Weight]) -> None:
    """Check every entry lies in [0, WEIGHT_SCALE] without checking the total.

    Raises:
        ValidationError: Tagged with the display name of the first
            out-of-range factor.
    """
    for factor in Factor:
        weight = weights.get(factor, 0)
        if weight < 0 or weight > MAX_WEIGHT:
            raise ValidationError(
                field=factor.display_name,
                message=(
                    f"Weight must be between 0 and {MAX_WEIGHT}, got {weight}"
                ),
            )


def validate_weights(weights: Mapping[Factor, Weight]) -> None:
    """Validate a weight set.

    Each of the 14 factors must carry a weight in [0, WEIGHT_SCALE]; the
    total must lie in [WEIGHT_SCALE - 1, WEIGHT_SCALE + 1].

    Args:
        weights: Factor to scaled weight mapping.

    Raises:
        ValidationError: Tagged with the factor display name for an
            out-of-range entry, or "total_weight" for a bad total.
    """
    validate_weight_range(weights)
    total = weights_total(weights)

    if abs(total - WEIGHT_SCALE) > WEIGHT_TOTAL_TOLERANCE:
        raise ValidationError(
            field="total_weight",
            message=(
                f"Weights must sum to {WEIGHT_SCALE} "
                f"(±{WEIGHT_TOTAL_TOLERANCE}), got {total}"
            ),
        )


def normalize_weights(weights: Mapping[Factor, Weight]) -> WeightSet:
    """Rescale a weight set proportionally so it sums to about WEIGHT_SCALE.

    Each entry becomes ``round(w * WEIGHT_SCALE / total)`` using
    round-half-up integer arithmetic. Entries are rounded independently and
    there is no reconciliation pass, so the result may miss WEIGHT_SCALE by
    up to ``len(weights) - 1`` units.

    A zero total is returned unchanged.

    Args:
        weights: Factor to scaled weight mapping.

    Returns:
        New weight set with the same keys.
    """
    total = weights_total(weights)
    if total == 0:
        return dict(weights)

    normalized = {
        factor: (weight * WEIGHT_SCALE + total // 2) // total
        for factor, weight in weights.items()
    }
    new_total = weights_total(normalized)
    if new_total != WEIGHT_SCALE:
        logger.debug(
            "weights_normalized_with_drift",
            original_total=total,
            normalized_total=new_total,
        )
    return normalized


def complete_weights(weights: Mapping[Factor, Weight]) -> WeightSet:
    """Return a weight set with every factor present (missing ones as 0)."""
    return {factor: weights.get(factor, 0) for factor in Factor}


def uniform_weights() -> WeightSet:
    """Return equal weights for all 14 factors summing exactly to WEIGHT_SCALE.

    WEIGHT_SCALE is not divisible by 14, so the remainder is spread one unit
    at a time over the first factors.
    """
    base, remainder = divmod(WEIGHT_SCALE, FACTOR_COUNT)
    return {
        factor: base + (1 if index < remainder else 0)
        for index, factor in enumerate(Factor)
    }


def weights_from_real(weights: Mapping[Any, float]) -> WeightSet:
    """Convert real 0.0-1.0 weights keyed by any factor spelling.

    Raises:
        ValidationError: If a key does not name a factor.
    """
    result: WeightSet = {}
    for key, value in weights.items():
        try:
            factor = parse_factor(key)
        except KeyError as e:
            raise ValidationError(field=str(key), message="Unknown factor") from e
        result[factor] = weight_from_real(value)
    return result


def weights_to_real(weights: Mapping[Factor, Weight]) -> dict[Factor, float]:
    """Convert a scaled weight set to real 0.0-1.0 values."""
    return {factor: to_real(w, WEIGHT_SCALE) for factor, w in weights.items()}


def prepare_weights(weights: Mapping[Factor, Weight]) -> WeightSet:
    """Normalize then validate a caller-supplied weight set.

    This is the usual entry point for raw user weights (e.g. percentages
    that sum to 100). The normalized set is validated before it is returned.

    Raises:
        ValidationError: If an entry is negative or the normalized total
            drifted outside the tolerance.
    """
    for factor, weight in weights.items():
        if weight < 0:
            raise ValidationError(
                field=factor.display_name,
                message=f"Weight must not be negative, got {weight}",
            )
    normalized = complete_weights(normalize_weights(weights))
    validate_weights(normalized)
    return normalized
