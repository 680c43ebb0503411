from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable


class PreciseTicker:
    """Fixed-rate ticker whose fire times are computed from a fixed origin.

    A tick that is still running when the next one is due causes that fire to
    be skipped, so ``fn`` never runs concurrently with itself. If the loop falls
    more than one interval behind, the schedule jumps forward instead of
    bursting to catch up.
    """

    def __init__(
        self,
        interval: float,
        fn: Callable[[], Awaitable[object]],
        *,
        log: logging.Logger,
        name: str = "ticker",
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = float(interval)
        self.fn = fn
        self.log = log
        self.name = name
        self.fired = 0
        self.skipped = 0
        self._busy = False
        self._inflight: asyncio.Task | None = None

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        origin = loop.time()
        n = 0
        try:
            while True:
                n += 1
                target = origin + n * self.interval
                now = loop.time()
                if now - target > self.interval:
                    n = math.floor((now - origin) / self.interval) + 1
                    target = origin + n * self.interval
                await asyncio.sleep(max(0.0, target - loop.time()))
                if self._busy:
                    self.skipped += 1
                    continue
                self._busy = True
                self._inflight = asyncio.create_task(self._fire(), name=f"tick:{self.name}")
        finally:
            if self._inflight is not None and not self._inflight.done():
                self._inflight.cancel()

    async def _fire(self) -> None:
        try:
            self.fired += 1
            await self.fn()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.log.error("%s tick error: %s", self.name, exc)
        finally:
            self._busy = False
