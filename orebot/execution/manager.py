from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from solders.keypair import Keypair

from orebot.data.layouts import decode_miner, decode_round
from orebot.data.ledger import TOO_LATE_MARKERS
from orebot.domain import SlotRanking
from orebot.domain.constants import LAMPORTS_PER_SOL
from orebot.errors import AccountDecodeError, SubmissionRejected
from orebot.execution.instructions import (
    ProgramAccounts,
    checkpoint_ix,
    compute_budget_ixs,
    deploy_ix,
)
from orebot.infra import RuntimeEventLogger


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one deployment attempt.

    ``ok`` is False only for failures worth surfacing; expected races such as
    a round closing under us come back as ``ok=True`` with a skip reason.
    """

    ok: bool
    reason: str
    signature: str = ""
    slots: tuple[int, ...] = ()
    amount_lamports: int = 0
    checkpoint_round: int | None = None


def checkpoint_round_for(miner_round_id: int, miner_checkpoint_id: int, current_round_id: int) -> int | None:
    """Round that must be checkpointed before deploying into ``current_round_id``, if any."""
    if miner_round_id == miner_checkpoint_id:
        return None
    if miner_round_id < current_round_id:
        return miner_round_id
    return None


def is_too_late(message: str) -> bool:
    return any(marker in message for marker in TOO_LATE_MARKERS)


class DeploymentSequencer:
    """Builds checkpoint + deploy into a single transaction and submits it."""

    def __init__(
        self,
        ledger,
        state,
        accounts: ProgramAccounts,
        *,
        log: logging.Logger,
        events: RuntimeEventLogger | None = None,
    ):
        self.ledger = ledger
        self.state = state
        self.accounts = accounts
        self.log = log
        self.events = events or RuntimeEventLogger(None)
        self.submitted = 0

    async def deploy(
        self,
        targets: Sequence[SlotRanking],
        amount_sol: float,
        signer: Keypair,
    ) -> ExecutionResult:
        if not targets:
            self.log.info("deploy skipped: no targets provided")
            return ExecutionResult(ok=True, reason="no_targets")

        round_id = self.state.round_id
        slots = tuple(t.slot for t in targets)
        amount_lamports = int(math.floor(amount_sol * LAMPORTS_PER_SOL))
        authority = signer.pubkey()

        try:
            raw_round = await self.ledger.get_account_data(self.accounts.round(round_id))
        except Exception as exc:
            self.log.warning("deploy skipped: round %s fetch failed: %s", round_id, exc)
            return ExecutionResult(ok=False, reason="rpc_error", slots=slots)
        if raw_round is None:
            self.log.info("deploy skipped: round %s account not found, waiting for next tick", round_id)
            return ExecutionResult(ok=True, reason="round_missing", slots=slots)
        try:
            decode_round(raw_round)
        except AccountDecodeError:
            self.log.info("deploy skipped: round %s account not initialized, waiting for next tick", round_id)
            return ExecutionResult(ok=True, reason="round_uninitialized", slots=slots)

        miner_round_id, miner_checkpoint_id = 0, 0
        try:
            raw_miner = await self.ledger.get_account_data(self.accounts.miner(authority))
            if raw_miner is not None:
                miner = decode_miner(raw_miner)
                miner_round_id, miner_checkpoint_id = miner.round_id, miner.checkpoint_id
        except AccountDecodeError as exc:
            self.log.warning("miner account unreadable, assuming fresh miner: %s", exc)
        except Exception as exc:
            self.log.warning("deploy skipped: miner fetch failed: %s", exc)
            return ExecutionResult(ok=False, reason="rpc_error", slots=slots)

        instructions = compute_budget_ixs()
        checkpoint_round = checkpoint_round_for(miner_round_id, miner_checkpoint_id, round_id)
        if checkpoint_round is not None:
            instructions.append(checkpoint_ix(self.accounts, authority, checkpoint_round))
            self.state.flags.checkpoint_fired = True
            self.log.info("checkpointing round %s before deploy", checkpoint_round)
        elif miner_round_id != miner_checkpoint_id:
            self.log.warning(
                "state dirty but miner round %s is not older than %s; skipping checkpoint",
                miner_round_id,
                round_id,
            )
        instructions.append(deploy_ix(self.accounts, authority, round_id, amount_lamports, slots))

        self.log.info("sending deploy tx for %d target(s)...", len(slots))
        self.submitted += 1
        try:
            signature = await self.ledger.submit(instructions, signer)
        except SubmissionRejected as exc:
            if is_too_late(str(exc)):
                self.log.info("deploy skipped: transaction too late (round %s likely ended)", round_id)
                self.events.emit("deploy.too_late", round_id=round_id, slots=list(slots))
                return ExecutionResult(
                    ok=True,
                    reason="too_late",
                    slots=slots,
                    amount_lamports=amount_lamports,
                    checkpoint_round=checkpoint_round,
                )
            self.log.error("deploy failed: %s", exc)
            self.events.emit("deploy.error", round_id=round_id, error=str(exc))
            return ExecutionResult(
                ok=False,
                reason="rejected",
                slots=slots,
                amount_lamports=amount_lamports,
                checkpoint_round=checkpoint_round,
            )

        self.log.info("deploy successful! signature: %s...", signature[:16])
        self.events.emit(
            "deploy.ok",
            round_id=round_id,
            slots=list(slots),
            amount_lamports=amount_lamports,
            checkpoint_round=checkpoint_round,
            signature=signature,
        )
        await self._refresh_balance(authority)
        return ExecutionResult(
            ok=True,
            reason="submitted",
            signature=signature,
            slots=slots,
            amount_lamports=amount_lamports,
            checkpoint_round=checkpoint_round,
        )

    async def _refresh_balance(self, authority) -> None:
        try:
            self.state.balance_sol = await self.ledger.get_balance(authority) / LAMPORTS_PER_SOL
        except Exception as exc:
            self.log.warning("balance refresh failed: %s", exc)
