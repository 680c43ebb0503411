import asyncio

import pytest

from orebot.runtime.scheduler import PreciseTicker
from orebot.tests.helpers import quiet_logger


def test_slow_tick_is_never_reentered() -> None:
    active = 0
    peak = 0

    async def slow():
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.12)
        active -= 1

    ticker = PreciseTicker(0.03, slow, log=quiet_logger(), name="test")

    async def main():
        task = asyncio.create_task(ticker.run())
        await asyncio.sleep(0.4)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(main())
    assert peak == 1
    assert ticker.fired >= 2
    assert ticker.skipped >= 1


def test_tick_errors_are_contained() -> None:
    async def boom():
        raise RuntimeError("tick failed")

    ticker = PreciseTicker(0.02, boom, log=quiet_logger(), name="test")

    async def main():
        task = asyncio.create_task(ticker.run())
        await asyncio.sleep(0.15)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(main())
    assert ticker.fired >= 2


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PreciseTicker(0, lambda: None, log=quiet_logger())
