from __future__ import annotations

import math

from orebot.domain import BoardAnalysis, RoundDetail, SlotRanking
from orebot.domain.constants import (
    BASE_REWARD,
    DEFAULT_MOTHERLODE,
    HIT_PROB,
    LAMPORTS_PER_SOL,
    NUM_SLOTS,
    ORE_PER_UNIT,
    REF_MULT,
)
from orebot.domain.models import EMPTY_ANALYSIS
from orebot.strategy.valuation import evaluate


def reward_value(detail: RoundDetail, ore_sol: float) -> float:
    """Expected reward-token payout of one round, priced in SOL."""
    try:
        motherlode = float(detail.motherlode) * ORE_PER_UNIT
    except (TypeError, ValueError):
        motherlode = math.nan
    if not math.isfinite(motherlode):
        motherlode = DEFAULT_MOTHERLODE
    return ore_sol * REF_MULT * (BASE_REWARD + motherlode * HIT_PROB)


def analyze(detail: RoundDetail | None, ore_sol: float = 0.0) -> BoardAnalysis:
    """Rank the 25 slots of a round by EV (descending) and SOL/player ratio (ascending)."""
    if detail is None:
        return EMPTY_ANALYSIS

    total = detail.total_deployed / LAMPORTS_PER_SOL
    value = reward_value(detail, ore_sol)

    slots: list[SlotRanking] = []
    for i in range(NUM_SLOTS):
        sol = detail.deployed[i] / LAMPORTS_PER_SOL
        count = int(detail.count[i])
        ratio = sol / count if count > 0 else math.inf
        ev = evaluate(sol, total, value).ev
        slots.append(
            SlotRanking(
                slot=i + 1,
                sol=sol,
                count=count,
                ratio=ratio,
                ev=ev if math.isfinite(ev) else -math.inf,
            )
        )

    by_ev = tuple(sorted((s for s in slots if s.ev > 0), key=lambda s: (-s.ev, s.slot)))
    by_ratio = tuple(
        sorted((s for s in slots if 0 < s.ratio < math.inf), key=lambda s: (s.ratio, s.slot))
    )
    return BoardAnalysis(
        best_ev=by_ev[0] if by_ev else None,
        best_ratio=by_ratio[0] if by_ratio else None,
        by_ev=by_ev,
        by_ratio=by_ratio,
        slots=tuple(slots),
    )
