"""Words-per-minute arithmetic shared by sessions and rolling averages."""

import math
from typing import Sequence

CHARS_PER_WORD = 5


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def calculate_wpm(chars: int, duration_seconds: float) -> int:
    """Standard WPM: (characters / 5) per minute, rounded to an integer.

    Returns 0 for a zero or negative duration.
    """
    if duration_seconds <= 0:
        return 0
    words = chars / CHARS_PER_WORD
    minutes = duration_seconds / 60
    return round_half_up(words / minutes)


def rounded_mean(values: Sequence[int]) -> int:
    """Rounded integer mean, 0 for an empty sequence."""
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))
