import asyncio

import pytest

from orebot.runtime.supervisor import LoopSupervisor
from orebot.tests.helpers import RecordingEvents, quiet_logger


def test_crashed_loop_is_restarted() -> None:
    runs = 0
    events = RecordingEvents()
    sup = LoopSupervisor(quiet_logger(), events=events, base_delay=0.01, max_delay=0.02)

    async def flaky():
        nonlocal runs
        runs += 1
        if runs == 1:
            raise RuntimeError("boom")
        await asyncio.sleep(3600)

    async def main():
        task = asyncio.create_task(sup.run_forever("flaky", flaky))
        await asyncio.sleep(0.1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(main())
    assert runs == 2
    health = sup.health.loops["flaky"]
    assert health.restarts == 1
    assert health.last_error == "boom"
    assert health.alive is False
    assert [name for name, _ in events.calls] == ["loop.crash"]
    assert sup.health.summary() == "loops=0/1 restarts=1"


def test_every_survives_errors() -> None:
    calls = 0
    sup = LoopSupervisor(quiet_logger())

    async def sometimes():
        nonlocal calls
        calls += 1
        if calls % 2:
            raise RuntimeError("transient")

    async def main():
        task = asyncio.create_task(sup.every("prices", 0.01, sometimes))
        await asyncio.sleep(0.1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(main())
    assert calls >= 3
