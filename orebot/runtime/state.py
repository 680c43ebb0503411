from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from solders.keypair import Keypair

from orebot.config.automation import AutomationConfig
from orebot.domain import (
    EMPTY_ANALYSIS,
    BoardAnalysis,
    BoardSnapshot,
    MinerSnapshot,
    PriceQuote,
    RoundDetail,
    RoundPhase,
)


@dataclass
class RoundFlags:
    automation_fired: bool = False
    checkpoint_fired: bool = False
    winner_announced: bool = False

    def reset(self) -> None:
        self.automation_fired = False
        self.checkpoint_fired = False
        self.winner_announced = False


@dataclass
class AppState:
    """Single owner of all mutable runtime state; handed by reference to each component."""

    config: AutomationConfig = field(default_factory=AutomationConfig)
    board: BoardSnapshot | None = None
    round_id: int = -1
    round_detail: RoundDetail | None = None
    phase: RoundPhase = RoundPhase.AWAITING_DETAIL
    flags: RoundFlags = field(default_factory=RoundFlags)
    transitioning: bool = False
    analysis: BoardAnalysis = EMPTY_ANALYSIS
    seconds_remaining: int | None = None
    last_winner: int | None = None
    announced_round: int = -1
    prices: PriceQuote = field(default_factory=PriceQuote)
    signer: Keypair | None = None
    balance_sol: float = 0.0
    miner: MinerSnapshot | None = None

    def snapshot(self) -> dict[str, Any]:
        miner = self.miner
        return {
            "ok": True,
            "round": self.round_id if self.round_id >= 0 else None,
            "phase": self.phase.value,
            "seconds_remaining": self.seconds_remaining,
            "last_winner": self.last_winner,
            "flags": {
                "automation_fired": self.flags.automation_fired,
                "checkpoint_fired": self.flags.checkpoint_fired,
                "winner_announced": self.flags.winner_announced,
            },
            "config": self.config.as_dict(),
            "prices": {
                "ore_usd": self.prices.ore_usd,
                "sol_usd": self.prices.sol_usd,
                "ore_sol": self.prices.ore_sol,
            },
            "wallet": {
                "address": str(self.signer.pubkey()) if self.signer else None,
                "balance_sol": self.balance_sol,
                "rewards_sol": miner.rewards_sol_amount if miner else 0.0,
                "rewards_ore": miner.rewards_ore_amount if miner else 0.0,
                "refined_ore": miner.refined_ore_amount if miner else 0.0,
            },
            "total_deployed_sol": self.round_detail.total_deployed_sol if self.round_detail else 0.0,
            "analysis": self.analysis.as_dict(),
        }
