from __future__ import annotations

import math
from dataclasses import dataclass

from orebot.domain.constants import (
    ADMIN_COST_FACTOR,
    C,
    NUM_SLOTS,
    P_WIN,
    PROTOCOL_CUT,
    REFINE_ITERATIONS,
)


@dataclass(frozen=True)
class Valuation:
    y: float
    ev: float


REJECTED = Valuation(y=0.0, ev=-math.inf)
NO_ACTION = Valuation(y=0.0, ev=0.0)


def _pool_value(others: float, total: float, reward_value: float, y: float = 0.0) -> float:
    return (1 - PROTOCOL_CUT) * (total - others - y) + reward_value


def evaluate(others: float, total: float, reward_value: float) -> Valuation:
    """Optimal extra stake ``y`` for one slot and the EV of placing it.

    ``others`` is the stake already in the slot, ``total`` the stake across all
    slots and ``reward_value`` the reward-token value of a round expressed in SOL.
    The fixed point is refined a fixed number of times; the result after the
    last pass is used as-is.
    """
    if not (math.isfinite(others) and math.isfinite(total) and math.isfinite(reward_value)):
        return REJECTED
    if others <= 0 or total <= 0:
        return REJECTED
    if _pool_value(others, total, reward_value) <= 0:
        return REJECTED

    y = math.sqrt(max(0.0, reward_value) * others / C)
    for _ in range(REFINE_ITERATIONS):
        value = _pool_value(others, total, reward_value, y)
        if value <= 0:
            break
        y = max(0.0, math.sqrt(value * others / C) - others)

    if y <= 0:
        return NO_ACTION

    value = _pool_value(others, total, reward_value, y)
    share = y / (others + y)
    ev = P_WIN * (-(NUM_SLOTS - 1) * y + value * share) - ADMIN_COST_FACTOR * y
    return Valuation(y=y, ev=ev)
