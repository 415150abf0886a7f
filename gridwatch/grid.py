"""Grid ladder generation.

A ladder is the ``count + 1`` price levels a grid bot trades at, from
``lower`` to ``upper`` inclusive. Levels are rounded to 8 decimal places so
float noise never leaks into equality checks or ordering downstream.
"""

from __future__ import annotations

import math
from enum import Enum

from .errors import ValidationError

LEVEL_PRECISION = 8


class GridType(str, Enum):
    ARITHMETIC = "arithmetic"  # uniform absolute spacing
    GEOMETRIC = "geometric"  # uniform percentage spacing


def check_grid_bounds(lower: float, upper: float, count: int) -> None:
    """Reject inputs ``generate_levels`` cannot handle.

    Raises:
        ValidationError: if ``count < 1``, a bound is not finite,
            ``lower <= 0`` or ``upper <= lower``.
    """
    if count < 1:
        raise ValidationError(f"grid_count must be at least 1, got {count}")
    # NaN compares False against everything, so check finiteness first
    if not (math.isfinite(lower) and math.isfinite(upper)):
        raise ValidationError(
            f"grid bounds must be finite, got lower={lower}, upper={upper}"
        )
    if lower <= 0:
        raise ValidationError(f"lower_limit must be positive, got {lower}")
    if upper <= lower:
        raise ValidationError(
            f"upper_limit ({upper}) must be greater than lower_limit ({lower})"
        )


def generate_levels(
    lower: float, upper: float, count: int, kind: GridType | str
) -> list[float]:
    """Return the ascending price ladder for a grid.

    The caller is responsible for validating the bounds first
    (see ``check_grid_bounds``); ``count == 0`` divides by zero here.
    """
    kind = GridType(kind)
    levels: list[float] = []
    if kind is GridType.GEOMETRIC:
        ratio = (upper / lower) ** (1 / count)
        for i in range(count + 1):
            levels.append(round(lower * ratio**i, LEVEL_PRECISION))
    else:
        step = (upper - lower) / count
        for i in range(count + 1):
            levels.append(round(lower + step * i, LEVEL_PRECISION))
    return levels


def grid_spacing_pct(levels: list[float]) -> tuple[float, float]:
    """Smallest and largest step between adjacent levels, in percent.

    Each step is measured relative to its lower level, so a geometric ladder
    yields a single value and an arithmetic ladder a shrinking range.
    """
    if len(levels) < 2:
        return (0.0, 0.0)
    steps = [
        (hi - lo) / lo * 100
        for lo, hi in zip(levels, levels[1:])
        if lo > 0
    ]
    if not steps:
        return (0.0, 0.0)
    return (min(steps), max(steps))
