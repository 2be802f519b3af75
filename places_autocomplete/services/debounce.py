from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Set


class Debouncer:
    """Runs a coroutine once input has been quiet for ``delay_s`` seconds.

    Only one timer is pending at a time; scheduling again cancels it. Work that
    already started is not cancelled, it runs in its own task.
    """

    def __init__(self, delay_s: float) -> None:
        self.delay_s = delay_s
        self._timer: Optional[asyncio.Task[None]] = None
        self._in_flight: Set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def schedule(self, fn: Callable[[], Awaitable[None]]) -> None:
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._delayed(fn))

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _delayed(self, fn: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(self.delay_s)
        self._timer = None
        task = asyncio.ensure_future(fn())
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def wait(self) -> None:
        """Wait for the pending timer and everything it started."""
        while self._timer is not None or self._in_flight:
            tasks = list(self._in_flight)
            if self._timer is not None:
                tasks.append(self._timer)
            await asyncio.gather(*tasks, return_exceptions=True)
