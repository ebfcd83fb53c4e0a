import math
from typing import Union

Number = Union[int, float]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def round_half_away(value: float) -> int:
    """Round to the nearest integer with halves going away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def clamp(value: Number, low: Number, high: Number) -> Number:
    return max(low, min(high, value))


def percent_change(recent: float, baseline: float) -> float:
    """Percentage change from baseline; 0 when there is no baseline."""
    if baseline == 0:
        return 0.0
    return ((recent - baseline) / baseline) * 100.0
