"""
Weight rounding helpers.

Weights are snapped to the nearest loadable increment.  Halves round up
(``floor(x + 0.5)``) so that 67.25 kg becomes 67.5 kg, not 67.0 kg.
Any non-finite or negative outcome is clamped to 0: bad numbers typed into a
config form must produce a visibly-wrong zero rather than a crash.
"""

import math

from .config import FLOAT_PRECISION


def _round_half_up(value: float) -> float:
    if not math.isfinite(value):
        return value
    return float(math.floor(value + 0.5))


def round_to_nearest_half(value: float) -> float:
    """
    Round a weight to the nearest 0.5.

    Args:
        value: Raw weight

    Returns:
        Rounded weight, or 0.0 if the result is negative or not finite
    """
    if not math.isfinite(value):
        return 0.0
    rounded = _round_half_up(value * 2) / 2
    if not math.isfinite(rounded) or rounded < 0:
        return 0.0
    return rounded


def round_to_nearest(value: float, step: float) -> float:
    """
    Round a weight to the nearest multiple of ``step``.

    Falls back to :func:`round_to_nearest_half` when ``step`` is not a
    positive finite number.

    Args:
        value: Raw weight
        step: Loadable increment (e.g. 2.5)

    Returns:
        Rounded weight, or 0.0 if the result is negative or not finite
    """
    if not math.isfinite(step) or step <= 0:
        return round_to_nearest_half(value)
    if not math.isfinite(value):
        return 0.0
    rounded = _round_half_up(value / step) * step
    if not math.isfinite(rounded) or rounded < 0:
        return 0.0
    # Strip float artifacts (67.49999... -> 67.5)
    return _round_half_up(rounded * FLOAT_PRECISION) / FLOAT_PRECISION
