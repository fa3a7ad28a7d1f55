"""Unit tests for live.scheduler."""

import asyncio

import pytest

from tradelab.live.scheduler import PeriodicTask


def test_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        PeriodicTask("x", 0, lambda: None)


def test_fires_until_stopped():
    calls = []

    async def tick():
        calls.append(1)

    async def scenario():
        task = PeriodicTask("t", 0.01, tick)
        task.start()
        task.start()  # second start is a no-op
        await asyncio.sleep(0.15)
        await task.stop()
        count = len(calls)
        await asyncio.sleep(0.05)
        return task, count

    task, count = asyncio.run(scenario())
    assert count >= 3
    assert len(calls) == count
    assert task.fired >= count
    assert not task.running


def test_overlapping_tick_is_skipped():
    async def slow():
        await asyncio.sleep(0.08)

    async def scenario():
        task = PeriodicTask("slow", 0.01, slow)
        task.start()
        await asyncio.sleep(0.2)
        await task.stop()
        return task

    task = asyncio.run(scenario())
    assert task.skipped >= 1
    assert task.fired >= 1


def test_failing_tick_does_not_stop_loop():
    async def boom():
        raise RuntimeError("tick failed")

    async def scenario():
        task = PeriodicTask("boom", 0.01, boom)
        task.start()
        await asyncio.sleep(0.1)
        running = task.running
        await task.stop()
        return task, running

    task, running = asyncio.run(scenario())
    assert running
    assert task.fired >= 2


def test_stop_cancels_in_flight_tick():
    state = {"started": False, "finished": False}

    async def long_tick():
        state["started"] = True
        await asyncio.sleep(10)
        state["finished"] = True

    async def scenario():
        task = PeriodicTask("long", 0.01, long_tick)
        task.start()
        await asyncio.sleep(0.05)
        await task.stop()

    asyncio.run(scenario())
    assert state == {"started": True, "finished": False}


def test_stop_before_start():
    asyncio.run(PeriodicTask("idle", 1.0, lambda: None).stop())
