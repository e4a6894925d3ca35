"""
Golden-section search for the minimum of a unimodal loss on an interval.

Only one new point is probed per step: the interior point ``mid`` carries over
from the previous step and its loss comes back from the evaluator's cache.
"""

from __future__ import annotations

import logging
import math
from typing import Callable

logger = logging.getLogger(__name__)

PHI = (1 + math.sqrt(5)) / 2
RESPHI = 2 - PHI

Loss = Callable[[float], float]


def golden_section(loss: Loss, low: float, mid: float, high: float, tolerance: float) -> float:
    """
    Narrow ``(low, mid, high)`` until the interval is small relative to the
    magnitude of the probed points, then return its midpoint.

    ``mid`` must be the golden-section point of ``(low, high)``. Works for
    ``low > high`` too: the ranges change sign, so sides are compared by size.

    The stopping rule scales with ``|mid| + |x|``, so when the minimum sits at
    0 it rarely fires and the loop runs until two probes give equal losses.
    With losses printed to a few decimals that happens within a few steps; an
    exact analytic loss can take hundreds of steps before the floats collapse.
    """
    while True:
        upper_range = high - mid
        lower_range = mid - low
        probe_upper = abs(upper_range) > abs(lower_range)
        if probe_upper:
            x = mid + RESPHI * upper_range
        else:
            x = mid - RESPHI * lower_range

        if abs(high - low) < tolerance * (abs(mid) + abs(x)):
            return (high + low) / 2

        loss_x = loss(x)
        loss_mid = loss(mid)

        if loss_x == loss_mid:
            logger.warning(
                "loss(%g) == loss(%g) == %g, stopping early; is the loss flat or non-unimodal here?",
                x, mid, loss_x,
            )
            return (x + mid) / 2

        if loss_x < loss_mid:
            if probe_upper:
                low, mid = mid, x
            else:
                mid, high = x, mid
        elif probe_upper:
            high = x
        else:
            low = x


def best_hyperparam(loss: Loss, lower: float, upper: float, tolerance: float) -> tuple[float, float]:
    mid = lower + RESPHI * (upper - lower)
    best = golden_section(loss, lower, mid, upper, tolerance)
    return best, loss(best)


def argmin3(a, loss_a, b, loss_b, c, loss_c):
    """Pick the best of three evaluated points; ties go to the earlier one."""
    best = (a, loss_a)
    if loss_b < best[1]:
        best = (b, loss_b)
    if loss_c < best[1]:
        best = (c, loss_c)
    return best
