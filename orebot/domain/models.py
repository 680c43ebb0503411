from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from orebot.domain.constants import LAMPORTS_PER_SOL, ORE_PER_UNIT


class RoundPhase(str, Enum):
    AWAITING_DETAIL = "awaiting_detail"
    ACTIVE = "active"
    EXPIRED_AWAITING_OUTCOME = "expired_awaiting_outcome"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class BoardSnapshot:
    round_id: int
    start_slot: int
    end_slot: int


@dataclass(frozen=True)
class RoundDetail:
    round_id: int
    deployed: tuple[int, ...]
    slot_hash: bytes
    count: tuple[int, ...]
    expires_at: int
    motherlode: int
    rent_payer: bytes
    top_miner: bytes
    top_miner_reward: int
    total_deployed: int
    total_vaulted: int
    total_winnings: int

    @property
    def total_deployed_sol(self) -> float:
        return self.total_deployed / LAMPORTS_PER_SOL


@dataclass(frozen=True)
class MinerSnapshot:
    authority: bytes
    deployed: tuple[int, ...]
    cumulative: tuple[int, ...]
    checkpoint_fee: int
    checkpoint_id: int
    last_claim_ore_at: int
    last_claim_sol_at: int
    rewards_factor: bytes
    rewards_sol: int
    rewards_ore: int
    refined_ore: int
    round_id: int
    lifetime_rewards_sol: int
    lifetime_rewards_ore: int

    @property
    def rewards_sol_amount(self) -> float:
        return self.rewards_sol / LAMPORTS_PER_SOL

    @property
    def rewards_ore_amount(self) -> float:
        return self.rewards_ore * ORE_PER_UNIT

    @property
    def refined_ore_amount(self) -> float:
        return self.refined_ore * ORE_PER_UNIT


@dataclass(frozen=True)
class PriceQuote:
    ore_usd: float = 0.0
    sol_usd: float = 0.0

    @property
    def ore_sol(self) -> float:
        """ORE priced in SOL; 0 means unknown."""
        if self.ore_usd > 0 and self.sol_usd > 0:
            return self.ore_usd / self.sol_usd
        return 0.0


@dataclass(frozen=True)
class SlotRanking:
    slot: int
    sol: float
    count: int
    ratio: float
    ev: float

    def as_dict(self) -> dict:
        return {
            "slot": self.slot,
            "sol": round(self.sol, 9),
            "count": self.count,
            "ratio": self.ratio if math.isfinite(self.ratio) else None,
            "ev": self.ev if math.isfinite(self.ev) else None,
        }


@dataclass(frozen=True)
class BoardAnalysis:
    best_ev: SlotRanking | None = None
    best_ratio: SlotRanking | None = None
    by_ev: tuple[SlotRanking, ...] = ()
    by_ratio: tuple[SlotRanking, ...] = ()
    slots: tuple[SlotRanking, ...] = field(default_factory=tuple)

    def as_dict(self) -> dict:
        return {
            "best_ev": self.best_ev.slot if self.best_ev else None,
            "best_ratio": self.best_ratio.slot if self.best_ratio else None,
            "by_ev": [r.as_dict() for r in self.by_ev],
            "by_ratio": [r.as_dict() for r in self.by_ratio],
            "slots": [r.as_dict() for r in self.slots],
        }


EMPTY_ANALYSIS = BoardAnalysis()
