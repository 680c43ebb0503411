from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from orebot.infra import RuntimeEventLogger


@dataclass
class LoopHealth:
    name: str
    restarts: int = 0
    last_error: str = ""
    alive: bool = False


@dataclass
class RuntimeHealth:
    loops: dict[str, LoopHealth] = field(default_factory=dict)

    def touch(self, name: str, *, alive: bool | None = None, err: str = "") -> LoopHealth:
        h = self.loops.setdefault(name, LoopHealth(name=name))
        if alive is not None:
            h.alive = alive
        if err:
            h.last_error = err
        return h

    def restarted(self, name: str, err: Exception) -> None:
        self.touch(name, alive=False, err=str(err)).restarts += 1

    def summary(self) -> str:
        if not self.loops:
            return "loops=0"
        up = sum(1 for h in self.loops.values() if h.alive)
        restarts = sum(h.restarts for h in self.loops.values())
        return f"loops={up}/{len(self.loops)} restarts={restarts}"


class LoopSupervisor:
    """Restarts managed async loops after failure with bounded backoff."""

    def __init__(
        self,
        log: logging.Logger,
        *,
        events: RuntimeEventLogger | None = None,
        base_delay: float = 2.0,
        max_delay: float = 20.0,
    ):
        self.log = log
        self.events = events or RuntimeEventLogger(None)
        self.health = RuntimeHealth()
        self.base_delay = base_delay
        self.max_delay = max_delay

    async def run_forever(self, name: str, fn: Callable[[], Awaitable[None]]) -> None:
        delay = self.base_delay
        while True:
            try:
                self.health.touch(name, alive=True)
                await fn()
                self.health.touch(name, alive=False)
                self.log.warning("loop %s exited cleanly; restarting", name)
            except asyncio.CancelledError:
                self.health.touch(name, alive=False)
                raise
            except Exception as exc:
                self.health.restarted(name, exc)
                self.log.exception("loop %s crashed: %s", name, exc)
                self.events.emit("loop.crash", name=name, error=str(exc), restarts=self.health.loops[name].restarts)
            await asyncio.sleep(delay)
            delay = min(self.max_delay, max(self.base_delay, delay * 1.5))

    async def every(self, name: str, interval: float, fn: Callable[[], Awaitable[object]]) -> None:
        """Run ``fn`` now and then every ``interval`` seconds; errors are logged, not fatal."""
        while True:
            try:
                await fn()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.log.warning("%s error: %s", name, exc)
            await asyncio.sleep(interval)
