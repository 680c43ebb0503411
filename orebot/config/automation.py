from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from orebot.errors import ConfigError


class Mode(str, Enum):
    IDLE = "idle"
    TOP1 = "top1"
    TOP3 = "top3"
    TOP5 = "top5"
    TOP25 = "top25"

    @property
    def target_count(self) -> int:
        return _TARGET_COUNTS[self]


_TARGET_COUNTS = {
    Mode.IDLE: 0,
    Mode.TOP1: 1,
    Mode.TOP3: 3,
    Mode.TOP5: 5,
    Mode.TOP25: 25,
}

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}


def parse_bool(raw) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"expected a boolean, got {raw!r}")


@dataclass
class AutomationConfig:
    """User-controlled automation settings; every setter validates its input."""

    mode: Mode = Mode.IDLE
    dry_run: bool = False
    deploy_amount_sol: float = 0.0001

    @classmethod
    def from_settings(cls, settings) -> "AutomationConfig":
        cfg = cls(dry_run=bool(settings.dry_run))
        cfg.set_mode(settings.app_mode)
        cfg.set_deploy_amount(settings.deploy_amount_sol)
        return cfg

    def set_mode(self, value: str | Mode) -> Mode:
        try:
            self.mode = Mode(str(value.value if isinstance(value, Mode) else value).strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in Mode)
            raise ConfigError(f"unknown mode {value!r} (expected one of: {valid})") from None
        return self.mode

    def set_dry_run(self, enabled: bool) -> bool:
        self.dry_run = bool(enabled)
        return self.dry_run

    def toggle_dry_run(self) -> bool:
        return self.set_dry_run(not self.dry_run)

    def set_deploy_amount(self, raw: str | float) -> float:
        try:
            amount = float(raw)
        except (TypeError, ValueError):
            raise ConfigError(f"deploy amount {raw!r} is not a number") from None
        if not math.isfinite(amount) or amount <= 0:
            raise ConfigError(f"deploy amount must be positive, got {raw!r}")
        self.deploy_amount_sol = amount
        return amount

    def as_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "dry_run": self.dry_run,
            "deploy_amount_sol": self.deploy_amount_sol,
        }
