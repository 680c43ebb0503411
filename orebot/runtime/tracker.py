from __future__ import annotations

import logging
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Protocol

from orebot.data.layouts import decode_board, decode_round
from orebot.domain import EMPTY_ANALYSIS, RoundDetail, RoundPhase
from orebot.domain.constants import MS_PER_SLOT
from orebot.errors import AccountDecodeError
from orebot.execution.instructions import ProgramAccounts
from orebot.infra import ErrorTracker, RuntimeEventLogger
from orebot.settlement.outcome import is_populated, winning_slot
from orebot.strategy.analyzer import analyze


class Subscription(Protocol):
    def start(self) -> None: ...

    async def stop(self) -> None: ...


SubscribeFn = Callable[[str, Callable[[bytes], Awaitable[None]], str], Subscription]


def seconds_until(end_slot: int, current_slot: int) -> int:
    slots_left = end_slot - current_slot
    if slots_left <= 0:
        return 0
    return slots_left * MS_PER_SLOT // 1000


def _short(address: str) -> str:
    return address if len(address) < 8 else f"{address[:4]}...{address[-4:]}"


class RoundStateTracker:
    """Owns the notion of the current round.

    Board notifications drive round boundaries: when the board's round id moves
    past the tracked one, the old round is finalized (final fetch, winner
    announcement) before flags are reset and the new round's detail stream is
    opened. The 1 Hz ``tick`` turns the board's end slot into a countdown and
    hands it to the automation trigger.
    """

    def __init__(
        self,
        state,
        ledger,
        accounts: ProgramAccounts,
        trigger,
        *,
        log: logging.Logger,
        subscribe: SubscribeFn | None = None,
        events: RuntimeEventLogger | None = None,
    ):
        self.state = state
        self.ledger = ledger
        self.accounts = accounts
        self.trigger = trigger
        self.log = log
        self.subscribe = subscribe
        self.events = events or RuntimeEventLogger(None)
        self.errors = ErrorTracker(log)
        self.winners: deque[tuple[int, int]] = deque(maxlen=50)
        self._round_sub: Subscription | None = None

    @property
    def phase(self) -> RoundPhase:
        return self.state.phase

    async def on_board(self, raw: bytes) -> None:
        try:
            board = decode_board(raw)
        except AccountDecodeError as exc:
            self.log.warning("error parsing board update: %s", exc)
            return

        state = self.state
        tracked = state.round_id
        if board.round_id < tracked:
            self.log.debug("ignoring stale board for round %s (tracking %s)", board.round_id, tracked)
            return
        try:
            if board.round_id > tracked >= 0:
                state.transitioning = True
                await self._finalize(tracked)
            # The old round keeps its end slot until it is finalized.
            state.board = board
            if board.round_id == state.round_id:
                await self._refresh_detail()
                return
            await self._begin_round(board.round_id)
        except Exception as exc:
            self.log.error("error processing board update: %s", exc)
        finally:
            state.transitioning = False

    async def on_round(self, raw: bytes) -> None:
        try:
            detail = decode_round(raw)
        except AccountDecodeError as exc:
            self.log.warning("error parsing round update: %s", exc)
            return
        if detail.round_id != self.state.round_id:
            self.log.debug("dropping detail for round %s (tracking %s)", detail.round_id, self.state.round_id)
            return
        self._apply_detail(detail)

    async def tick(self) -> int | None:
        state = self.state
        board = state.board
        if board is None:
            state.seconds_remaining = None
            return None
        try:
            current_slot = await self.ledger.get_slot()
        except Exception as exc:
            self.errors.tick("get_slot", err=exc, every=10)
            return None
        self.errors.clear("get_slot")

        board = state.board
        remaining = seconds_until(board.end_slot, current_slot)
        state.seconds_remaining = remaining

        if remaining > 0:
            if not state.transitioning:
                state.flags.winner_announced = False
            detail = state.round_detail
            if detail is not None and detail.round_id == state.round_id and not state.transitioning:
                state.phase = RoundPhase.ACTIVE
                await self.trigger.maybe_trigger(detail, remaining)
            return remaining

        detail = state.round_detail
        if detail is not None and is_populated(detail.slot_hash):
            self.announce_winner(detail)
            return 0
        if state.phase is not RoundPhase.FINALIZED:
            state.phase = RoundPhase.EXPIRED_AWAITING_OUTCOME
        if state.round_id >= 0 and not state.transitioning:
            await self._recheck_outcome()
        return 0

    def announce_winner(self, detail: RoundDetail) -> int | None:
        """Emit the winning slot once per round; None when already announced or unknown."""
        state = self.state
        if detail.round_id == state.announced_round or not is_populated(detail.slot_hash):
            return None
        winner = winning_slot(detail.slot_hash)
        state.announced_round = detail.round_id
        if detail.round_id == state.round_id:
            state.flags.winner_announced = True
        self.state.last_winner = winner
        self.state.phase = RoundPhase.FINALIZED
        self.winners.append((detail.round_id, winner))
        self.log.info("winner for round %s is #%d", detail.round_id, winner)
        self.events.emit("round.winner", round_id=detail.round_id, slot=winner)
        return winner

    async def close(self) -> None:
        await self._close_round_subscription()

    def _apply_detail(self, detail: RoundDetail) -> None:
        state = self.state
        state.round_detail = detail
        state.analysis = analyze(detail, state.prices.ore_sol)
        if state.phase is RoundPhase.AWAITING_DETAIL:
            state.phase = RoundPhase.ACTIVE

    async def _refresh_detail(self) -> None:
        raw = await self.ledger.get_account_data(self.accounts.round(self.state.round_id))
        if raw is not None:
            await self.on_round(raw)

    async def _recheck_outcome(self) -> None:
        round_id = self.state.round_id
        try:
            raw = await self.ledger.get_account_data(self.accounts.round(round_id))
            if raw is None:
                return
            fresh = decode_round(raw)
        except Exception as exc:
            self.errors.tick("round_recheck", err=exc, every=10)
            return
        # A board notification may have moved the tracker on during the fetch.
        if self.state.transitioning or fresh.round_id != round_id or round_id != self.state.round_id:
            return
        self._apply_detail(fresh)
        if is_populated(fresh.slot_hash):
            self.announce_winner(fresh)

    async def _finalize(self, round_id: int) -> None:
        self.log.info("fetching final data for round %s...", round_id)
        self.events.emit("round.finalize", round_id=round_id)
        try:
            raw = await self.ledger.get_account_data(self.accounts.round(round_id))
            if raw is None:
                self.log.warning("final data for round %s not found", round_id)
                return
            detail = decode_round(raw)
        except Exception as exc:
            self.log.error("error fetching final data for round %s: %s", round_id, exc)
            return
        self._apply_detail(detail)
        if is_populated(detail.slot_hash):
            self.announce_winner(detail)
        else:
            self.log.info("no winner hash found for round %s", round_id)
        self.state.phase = RoundPhase.FINALIZED

    async def _begin_round(self, round_id: int) -> None:
        state = self.state
        state.flags.reset()
        state.round_id = round_id
        state.round_detail = None
        state.analysis = EMPTY_ANALYSIS
        state.phase = RoundPhase.AWAITING_DETAIL

        await self._close_round_subscription()
        pda = str(self.accounts.round(round_id))
        self.log.info("current round: %s - %s", round_id, _short(pda))
        self.events.emit("round.start", round_id=round_id, account=pda)
        if self.subscribe is not None:
            self._round_sub = self.subscribe(pda, self.on_round, f"round-{round_id}")
            self._round_sub.start()
        await self._refresh_detail()

    async def _close_round_subscription(self) -> None:
        sub, self._round_sub = self._round_sub, None
        if sub is None:
            return
        try:
            await sub.stop()
            self.log.debug("cleared old round subscription")
        except Exception as exc:
            self.log.debug("round unsubscribe failed: %s", exc)
