from __future__ import annotations

from orebot.config.automation import Mode
from orebot.domain import BoardAnalysis, SlotRanking
from orebot.domain.constants import TRIGGER_WINDOW_SECONDS


def pass_trigger_gates(
    mode: Mode,
    *,
    seconds_remaining: int,
    already_fired: bool,
    window: int = TRIGGER_WINDOW_SECONDS,
) -> tuple[bool, str]:
    if mode is Mode.IDLE:
        return False, "idle"
    if seconds_remaining > window or seconds_remaining <= 0:
        return False, "outside_window"
    if already_fired:
        return False, "already_fired"
    return True, "ok"


def select_targets(mode: Mode, analysis: BoardAnalysis) -> list[SlotRanking]:
    if mode is Mode.TOP1:
        return [analysis.best_ev] if analysis.best_ev else []
    return list(analysis.by_ev[: mode.target_count])
