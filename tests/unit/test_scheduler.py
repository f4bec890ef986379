"""Tests for akoolgen.tracking.scheduler.AsyncioPollScheduler."""

from __future__ import annotations

import asyncio

from akoolgen.tracking.scheduler import AsyncioPollScheduler


def _counter():
    calls = []

    async def callback():
        calls.append(len(calls))

    return calls, callback


class TestAsyncioPollScheduler:
    """Cycles run on the event loop until cancelled."""

    def test_polls_immediately_then_repeats(self):
        async def scenario():
            scheduler = AsyncioPollScheduler(interval=0.01)
            calls, callback = _counter()
            scheduler.start("job", callback)
            await asyncio.sleep(0)
            first = len(calls)
            await asyncio.sleep(0.1)
            scheduler.cancel("job")
            return first, len(calls)

        first, total = asyncio.run(scenario())
        assert first == 1
        assert total >= 2

    def test_cancel_stops_cycle(self):
        async def scenario():
            scheduler = AsyncioPollScheduler(interval=0.01)
            calls, callback = _counter()
            scheduler.start("job", callback)
            await asyncio.sleep(0.03)
            scheduler.cancel("job")
            await asyncio.sleep(0)
            stopped_at = len(calls)
            await asyncio.sleep(0.05)
            return scheduler, stopped_at, len(calls)

        scheduler, stopped_at, total = asyncio.run(scenario())
        assert stopped_at == total
        assert not scheduler.is_active("job")

    def test_cancel_is_idempotent(self):
        async def scenario():
            scheduler = AsyncioPollScheduler(interval=0.01)
            _, callback = _counter()
            scheduler.start("job", callback)
            scheduler.cancel("job")
            scheduler.cancel("job")
            scheduler.cancel("never-started")
            scheduler.cancel_all()
            return scheduler.active_ids()

        assert asyncio.run(scenario()) == []

    def test_failing_callback_keeps_cycle_alive(self):
        async def scenario():
            scheduler = AsyncioPollScheduler(interval=0.01)
            calls = []

            async def callback():
                calls.append(1)
                raise RuntimeError("boom")

            scheduler.start("job", callback)
            await asyncio.sleep(0.05)
            active = scheduler.is_active("job")
            scheduler.cancel_all()
            return active, len(calls)

        active, count = asyncio.run(scenario())
        assert active
        assert count >= 2

    def test_callback_can_cancel_its_own_cycle(self):
        async def scenario():
            scheduler = AsyncioPollScheduler(interval=0.01)
            calls = []

            async def callback():
                calls.append(1)
                scheduler.cancel("job")

            scheduler.start("job", callback)
            await asyncio.sleep(0.05)
            return scheduler.is_active("job"), len(calls)

        active, count = asyncio.run(scenario())
        assert not active
        assert count == 1

    def test_restart_replaces_cycle(self):
        async def scenario():
            scheduler = AsyncioPollScheduler(interval=0.01)
            first_calls, first = _counter()
            second_calls, second = _counter()
            scheduler.start("job", first)
            await asyncio.sleep(0)
            scheduler.start("job", second)
            await asyncio.sleep(0.03)
            before = len(first_calls)
            await asyncio.sleep(0.03)
            scheduler.cancel_all()
            return before, len(first_calls), len(second_calls), scheduler.active_ids()

        before, after, second_count, active = asyncio.run(scenario())
        assert before == after
        assert second_count >= 1
        assert active == []
