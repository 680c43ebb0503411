from __future__ import annotations

import logging
from dataclasses import dataclass

from orebot.data.layouts import decode_miner
from orebot.data.ledger import NOTHING_TO_CLAIM_MARKERS
from orebot.domain import MinerSnapshot
from orebot.domain.constants import LAMPORTS_PER_SOL
from orebot.errors import AccountDecodeError, SubmissionRejected
from orebot.execution.instructions import ProgramAccounts, claim_sol_ix
from orebot.infra import RuntimeEventLogger


@dataclass(frozen=True)
class SettlementResult:
    ok: bool
    claimed_sol: float
    message: str


class SettlementManager:
    """Miner reward tracking and SOL reward claims for the loaded signer."""

    def __init__(
        self,
        ledger,
        state,
        accounts: ProgramAccounts,
        *,
        log: logging.Logger,
        events: RuntimeEventLogger | None = None,
        min_claim_sol: float = 0.001,
    ):
        self.ledger = ledger
        self.state = state
        self.accounts = accounts
        self.log = log
        self.events = events or RuntimeEventLogger(None)
        self.min_claim_sol = min_claim_sol

    async def refresh_miner(self) -> MinerSnapshot | None:
        signer = self.state.signer
        if signer is None:
            return None
        authority = signer.pubkey()
        try:
            raw = await self.ledger.get_account_data(self.accounts.miner(authority))
            self.state.balance_sol = await self.ledger.get_balance(authority) / LAMPORTS_PER_SOL
        except Exception as exc:
            self.log.warning("miner refresh failed: %s", exc)
            return self.state.miner
        if raw is None:
            return None
        try:
            self.state.miner = decode_miner(raw)
        except AccountDecodeError as exc:
            self.log.warning("miner account unreadable: %s", exc)
        return self.state.miner

    async def claim_sol(self) -> SettlementResult:
        signer = self.state.signer
        if signer is None:
            self.log.error("claim SOL failed: signer not loaded")
            return SettlementResult(ok=False, claimed_sol=0.0, message="no_signer")
        pending = self.state.miner.rewards_sol_amount if self.state.miner else 0.0
        self.log.info("attempting to claim %.4f SOL from miner account...", pending)
        try:
            signature = await self.ledger.submit(
                [claim_sol_ix(self.accounts, signer.pubkey())], signer
            )
        except SubmissionRejected as exc:
            if any(marker in str(exc) for marker in NOTHING_TO_CLAIM_MARKERS):
                self.log.info("claim SOL: no pending rewards to claim")
                return SettlementResult(ok=True, claimed_sol=0.0, message="nothing_to_claim")
            self.log.error("claim SOL failed: %s", exc)
            return SettlementResult(ok=False, claimed_sol=0.0, message=str(exc))
        self.log.info("claim SOL successful: %s...", signature[:16])
        self.events.emit("claim.ok", claimed_sol=pending, signature=signature)
        await self.refresh_miner()
        return SettlementResult(ok=True, claimed_sol=pending, message="claimed")

    async def maybe_auto_claim(self) -> SettlementResult | None:
        """Claim once pending SOL rewards reach the threshold; never while dry-running."""
        if self.state.config.dry_run or self.state.signer is None:
            return None
        miner = self.state.miner
        rewards = miner.rewards_sol_amount if miner else 0.0
        if rewards < self.min_claim_sol:
            return None
        self.log.info("auto-claiming: %.4f SOL", rewards)
        return await self.claim_sol()
