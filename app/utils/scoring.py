"""Numeric helpers shared by the engine scorers and the aggregator."""

from __future__ import annotations

import math
from typing import Iterable


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (92.5 -> 93).

    The builtin ``round`` uses banker's rounding, which would report 92 for
    a Dream Board mean of 92.5.
    """
    return int(math.floor(value + 0.5))


def percent(part: int, whole: int) -> int:
    """``round(100 * part / whole)``, or 0 when ``whole`` is empty."""
    if whole <= 0:
        return 0
    return round_half_up(100.0 * part / whole)


def mean(values: Iterable[float]) -> float | None:
    items = list(values)
    if not items:
        return None
    return sum(items) / len(items)
