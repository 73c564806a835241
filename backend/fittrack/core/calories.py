"""
Calorie estimation from a fixed MET (Metabolic Equivalent of Task) table.

    calories = MET * weight_kg * duration_hours

Rounded half-up to whole kilocalories.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Tuple, Union

from .errors import InvalidArgument
from ..models.tracking import ActivityType, Intensity

DEFAULT_WEIGHT_KG = 70.0

# Every row is non-decreasing from light to very_vigorous.
MET_TABLE: Dict[ActivityType, Dict[Intensity, float]] = {
    ActivityType.RUNNING: {
        Intensity.LIGHT: 6.0, Intensity.MODERATE: 8.3,
        Intensity.VIGOROUS: 11.0, Intensity.VERY_VIGOROUS: 12.8,
    },
    ActivityType.WALKING: {
        Intensity.LIGHT: 2.5, Intensity.MODERATE: 3.5,
        Intensity.VIGOROUS: 5.0, Intensity.VERY_VIGOROUS: 6.3,
    },
    ActivityType.CYCLING: {
        Intensity.LIGHT: 4.0, Intensity.MODERATE: 6.8,
        Intensity.VIGOROUS: 10.0, Intensity.VERY_VIGOROUS: 12.0,
    },
    ActivityType.SWIMMING: {
        Intensity.LIGHT: 5.8, Intensity.MODERATE: 7.0,
        Intensity.VIGOROUS: 9.8, Intensity.VERY_VIGOROUS: 11.0,
    },
    ActivityType.GYM: {
        Intensity.LIGHT: 3.5, Intensity.MODERATE: 5.0,
        Intensity.VIGOROUS: 6.0, Intensity.VERY_VIGOROUS: 8.0,
    },
    ActivityType.YOGA: {
        Intensity.LIGHT: 2.0, Intensity.MODERATE: 2.5,
        Intensity.VIGOROUS: 3.0, Intensity.VERY_VIGOROUS: 4.0,
    },
    ActivityType.DANCING: {
        Intensity.LIGHT: 3.0, Intensity.MODERATE: 5.0,
        Intensity.VIGOROUS: 7.3, Intensity.VERY_VIGOROUS: 8.0,
    },
    ActivityType.SPORTS: {
        Intensity.LIGHT: 4.0, Intensity.MODERATE: 6.0,
        Intensity.VIGOROUS: 8.0, Intensity.VERY_VIGOROUS: 10.0,
    },
    ActivityType.HIKING: {
        Intensity.LIGHT: 4.5, Intensity.MODERATE: 6.0,
        Intensity.VIGOROUS: 7.8, Intensity.VERY_VIGOROUS: 9.0,
    },
    ActivityType.OTHER: {
        Intensity.LIGHT: 3.0, Intensity.MODERATE: 4.0,
        Intensity.VIGOROUS: 6.0, Intensity.VERY_VIGOROUS: 8.0,
    },
}


def resolve_activity_type(value: Union[str, ActivityType], strict: bool = True) -> ActivityType:
    """
    Map a raw activity type to the enum.

    Args:
        value: Activity type as submitted
        strict: When False, unknown types fall back to ``other``

    Raises:
        InvalidArgument: Unknown type in strict mode
    """
    try:
        return ActivityType(value)
    except ValueError:
        if strict:
            allowed = ", ".join(t.value for t in ActivityType)
            raise InvalidArgument(f"Unknown activity type: {value!r} (expected one of: {allowed})") from None
        return ActivityType.OTHER


def resolve_intensity(value: Union[str, Intensity]) -> Intensity:
    """Map a raw intensity to the enum; unknown values are always an error."""
    try:
        return Intensity(value)
    except ValueError:
        allowed = ", ".join(i.value for i in Intensity)
        raise InvalidArgument(f"Unknown intensity: {value!r} (expected one of: {allowed})") from None


def lookup_met(
    activity_type: Union[str, ActivityType],
    intensity: Union[str, Intensity],
    strict: bool = True,
) -> Tuple[ActivityType, Intensity, float]:
    """Return the resolved (type, intensity) pair and its MET coefficient."""
    resolved_type = resolve_activity_type(activity_type, strict=strict)
    resolved_intensity = resolve_intensity(intensity)
    return resolved_type, resolved_intensity, MET_TABLE[resolved_type][resolved_intensity]


def estimate_calories(
    activity_type: Union[str, ActivityType],
    duration_minutes: float,
    intensity: Union[str, Intensity],
    weight_kg: float = DEFAULT_WEIGHT_KG,
    strict: bool = True,
) -> int:
    """
    Estimate energy expenditure for an activity session.

    Args:
        activity_type: One of the ActivityType values
        duration_minutes: Session length in minutes (> 0)
        intensity: One of the Intensity values
        weight_kg: Body weight, 70 kg when unknown
        strict: Reject unknown activity types instead of using ``other``

    Returns:
        int: Estimated kilocalories, rounded half-up

    Raises:
        InvalidArgument: Unknown enum value or non-positive duration/weight
    """
    if duration_minutes is None or duration_minutes <= 0:
        raise InvalidArgument(f"Duration must be greater than 0, got {duration_minutes!r}")
    if weight_kg is None or weight_kg <= 0:
        raise InvalidArgument(f"Weight must be greater than 0, got {weight_kg!r}")

    _, _, met = lookup_met(activity_type, intensity, strict=strict)

    calories = (
        Decimal(str(met))
        * Decimal(str(weight_kg))
        * Decimal(str(duration_minutes))
        / Decimal(60)
    )
    return int(calories.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
