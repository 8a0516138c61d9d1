"""Debounce, throttle and stale-response guards for client-side fetching."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional


class Debouncer:
    """Trailing-edge debounce: only the last call within ``delay`` seconds runs.

    ``cancel()`` drops a pending call. A call that has already fired is not
    interrupted, stale results are filtered with ``RequestSequence`` instead.
    """

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._pending: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def call(self, factory: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        self.cancel()
        task = asyncio.get_running_loop().create_task(self._run(factory))
        self._pending = task
        return task

    async def _run(self, factory: Callable[[], Awaitable[Any]]) -> Any:
        await asyncio.sleep(self.delay)
        self._pending = None
        return await factory()

    def cancel(self) -> bool:
        if self.pending:
            self._pending.cancel()
            self._pending = None
            return True
        return False


class Throttle:
    """Allow at most one attempt per ``min_interval`` seconds."""

    def __init__(self, min_interval: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._last: float | None = None

    def try_acquire(self) -> bool:
        now = self._clock()
        if self._last is not None and now - self._last < self.min_interval:
            return False
        self._last = now
        return True

    @property
    def remaining(self) -> float:
        if self._last is None:
            return 0.0
        return max(0.0, self.min_interval - (self._clock() - self._last))

    def reset(self) -> None:
        self._last = None


class RequestSequence:
    """Monotonic request ids, only the newest request may publish its result."""

    def __init__(self) -> None:
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def next(self) -> int:
        self._current += 1
        return self._current

    def is_current(self, request_id: int) -> bool:
        return request_id == self._current


__all__ = ["Debouncer", "RequestSequence", "Throttle"]
