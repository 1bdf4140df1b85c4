from __future__ import annotations

"""Display-scale helpers."""

import math

from .constants import AXIS_MAX, AXIS_MIN, FIVE_POINT_MAX


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like the web client (Math.round), not banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def to_five_point(value: float, lo: float = AXIS_MIN, hi: float = AXIS_MAX) -> float:
    """Rescale a native axis value onto 0..5, one decimal."""
    return round_half_up(((float(value) - lo) / (hi - lo)) * FIVE_POINT_MAX, 1)
