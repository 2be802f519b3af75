from __future__ import annotations

import asyncio

import pytest

from places_autocomplete.services.debounce import Debouncer


@pytest.mark.asyncio
async def test_only_last_scheduled_call_runs():
    calls = []
    debouncer = Debouncer(0.03)

    for value in range(5):
        async def record(value=value):
            calls.append(value)

        debouncer.schedule(record)
    await debouncer.wait()

    assert calls == [4]
    assert debouncer.pending is False


@pytest.mark.asyncio
async def test_cancel_prevents_call():
    calls = []
    debouncer = Debouncer(0.02)

    async def record():
        calls.append(1)

    debouncer.schedule(record)
    assert debouncer.pending is True
    debouncer.cancel()
    await asyncio.sleep(0.05)

    assert calls == []


@pytest.mark.asyncio
async def test_started_work_is_not_cancelled_by_new_schedule():
    finished = []
    debouncer = Debouncer(0)

    async def slow():
        await asyncio.sleep(0.05)
        finished.append("slow")

    async def fast():
        finished.append("fast")

    debouncer.schedule(slow)
    await asyncio.sleep(0.01)
    assert debouncer.in_flight == 1

    debouncer.schedule(fast)
    await debouncer.wait()

    assert sorted(finished) == ["fast", "slow"]
    assert debouncer.in_flight == 0
