"""Seismic intensity classification - Pure functions.

This module maps the JMA seismic intensity scale (as carried by the P2P
earthquake feed) to display labels, severity colors and notification
thresholds. All functions are pure with no side effects.

The scale is ordinal and non-contiguous: 45 and 50 are the "5 Lower" and
"5 Upper" steps between 40 and 55. Comparisons always use the raw value.
"""

from enum import IntEnum


class Intensity(IntEnum):
    """Known values of the seismic intensity scale."""
    UNKNOWN = -1
    ZERO = 0
    ONE = 10
    TWO = 20
    THREE = 30
    FOUR = 40
    FIVE_LOWER = 45
    FIVE_UPPER = 50
    SIX_LOWER = 55
    SIX_UPPER = 60
    SEVEN = 70
    ABNORMAL = 99


class InvalidConfigValue(ValueError):
    """Raised when a configuration token cannot be parsed."""


UNKNOWN_LABEL = "Unknown"

INTENSITY_LABELS: dict[int, str] = {
    Intensity.UNKNOWN: UNKNOWN_LABEL,
    Intensity.ZERO: "Intensity 0",
    Intensity.ONE: "Intensity 1",
    Intensity.TWO: "Intensity 2",
    Intensity.THREE: "Intensity 3",
    Intensity.FOUR: "Intensity 4",
    Intensity.FIVE_LOWER: "Intensity 5 Lower",
    Intensity.FIVE_UPPER: "Intensity 5 Upper",
    Intensity.SIX_LOWER: "Intensity 6 Lower",
    Intensity.SIX_UPPER: "Intensity 6 Upper",
    Intensity.SEVEN: "Intensity 7",
    Intensity.ABNORMAL: "Abnormal",
}

# Threshold tokens accepted in configuration
THRESHOLD_TOKENS: dict[str, Intensity] = {
    "1": Intensity.ONE,
    "2": Intensity.TWO,
    "3": Intensity.THREE,
    "4": Intensity.FOUR,
    "5-": Intensity.FIVE_LOWER,
    "5弱": Intensity.FIVE_LOWER,
    "5+": Intensity.FIVE_UPPER,
    "5強": Intensity.FIVE_UPPER,
    "6-": Intensity.SIX_LOWER,
    "6弱": Intensity.SIX_LOWER,
    "6+": Intensity.SIX_UPPER,
    "6強": Intensity.SIX_UPPER,
    "7": Intensity.SEVEN,
}

CANONICAL_TOKENS = ("1", "2", "3", "4", "5-", "5+", "6-", "6+", "7")

# Readings that must never trigger a notification
SENTINELS = frozenset({Intensity.UNKNOWN, Intensity.ABNORMAL})

COLOR_LOW = "#3AA3E3"       # Blue
COLOR_MODERATE = "#F2C744"  # Yellow
COLOR_HIGH = "#F18D00"      # Orange
COLOR_SEVERE = "#E2231A"    # Red


def to_label(intensity: int) -> str:
    """Convert an intensity value to a human-readable label.

    Pure function. Values outside the known scale map to "Unknown".
    """
    return INTENSITY_LABELS.get(intensity, UNKNOWN_LABEL)


def parse_threshold(token: str) -> Intensity:
    """Parse a configuration token into an intensity threshold.

    Pure function.

    Args:
        token: One of 1, 2, 3, 4, 5-, 5+, 6-, 6+, 7 (or 5弱, 5強, 6弱, 6強)

    Returns:
        The matching Intensity

    Raises:
        InvalidConfigValue: If the token is not recognized
    """
    intensity = THRESHOLD_TOKENS.get(str(token).strip())
    if intensity is None:
        raise InvalidConfigValue(
            f"Invalid intensity threshold: {token!r}. "
            f"Valid values: {', '.join(CANONICAL_TOKENS)}"
        )
    return intensity


def is_notify_worthy(intensity: int, threshold: int) -> bool:
    """Check whether an intensity meets the notification threshold.

    Pure function. Unknown and abnormal readings are never notify-worthy,
    whatever the threshold.

    Args:
        intensity: Observed intensity value
        threshold: Minimum intensity to notify on (inclusive)

    Returns:
        True if a notification should be sent
    """
    if intensity < 0 or intensity in SENTINELS:
        return False

    return intensity >= threshold


def color_for(intensity: int) -> str:
    """Get a severity color for an intensity value.

    Pure function. Used for presentation only.
    """
    if intensity <= Intensity.THREE:
        return COLOR_LOW
    elif intensity == Intensity.FOUR:
        return COLOR_MODERATE
    elif Intensity.FIVE_LOWER <= intensity <= Intensity.FIVE_UPPER:
        return COLOR_HIGH
    else:
        return COLOR_SEVERE
