from __future__ import annotations

import logging
from dataclasses import dataclass

from orebot.domain import RoundDetail, SlotRanking
from orebot.domain.constants import TRIGGER_WINDOW_SECONDS
from orebot.execution.manager import ExecutionResult
from orebot.infra import RuntimeEventLogger
from orebot.strategy.analyzer import analyze
from orebot.strategy.gates import pass_trigger_gates, select_targets


@dataclass(frozen=True)
class TriggerResult:
    fired: bool
    reason: str
    targets: tuple[SlotRanking, ...] = ()
    execution: ExecutionResult | None = None


class AutomationTrigger:
    """Once-per-round end-of-round deployment decision."""

    def __init__(
        self,
        state,
        sequencer,
        *,
        log: logging.Logger,
        events: RuntimeEventLogger | None = None,
        window: int = TRIGGER_WINDOW_SECONDS,
    ):
        self.state = state
        self.sequencer = sequencer
        self.log = log
        self.events = events or RuntimeEventLogger(None)
        self.window = window

    async def maybe_trigger(self, detail: RoundDetail | None, seconds_remaining: int) -> TriggerResult:
        config = self.state.config
        flags = self.state.flags
        ok, reason = pass_trigger_gates(
            config.mode,
            seconds_remaining=seconds_remaining,
            already_fired=flags.automation_fired,
            window=self.window,
        )
        if not ok:
            return TriggerResult(fired=False, reason=reason)

        # Must be set before the first await: ticks may re-enter.
        flags.automation_fired = True
        self.log.info("lfg: mode %s @ %ss", config.mode.value, seconds_remaining)

        analysis = analyze(detail, self.state.prices.ore_sol)
        self.state.analysis = analysis
        if analysis.best_ev is None:
            self.log.info("no positive EV slots found, skipping")
            return TriggerResult(fired=True, reason="no_positive_ev")

        targets = tuple(select_targets(config.mode, analysis))
        if not targets:
            self.log.info("mode %s selected, but no valid targets found", config.mode.value)
            return TriggerResult(fired=True, reason="no_targets")

        amount = config.deploy_amount_sol
        self.log.info("deploying %s sol/target, %s total", amount, amount * len(targets))
        for target in targets:
            self.log.info("auto target: #%d (EV: %.4f sol)", target.slot, target.ev)
        self.events.emit(
            "automation.fire",
            round_id=self.state.round_id,
            mode=config.mode.value,
            dry_run=config.dry_run,
            seconds_remaining=seconds_remaining,
            slots=[t.slot for t in targets],
            amount_sol=amount,
        )

        if config.dry_run:
            self.log.info("skipping deploy, dry run is on")
            return TriggerResult(fired=True, reason="dry_run", targets=targets)

        signer = self.state.signer
        if signer is None:
            self.log.error("deploy failed: keypair not loaded (check KEYPAIR_PATH)")
            return TriggerResult(fired=True, reason="no_signer", targets=targets)

        try:
            result = await self.sequencer.deploy(targets, amount, signer)
        except Exception as exc:
            self.log.error("deploy error: %s", exc)
            return TriggerResult(fired=True, reason="deploy_error", targets=targets)
        return TriggerResult(fired=True, reason=result.reason, targets=targets, execution=result)
