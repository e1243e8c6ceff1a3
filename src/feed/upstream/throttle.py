"""Outbound call pacing shared by all in-flight range fetches.

One RateThrottle instance lives for the whole process and every upstream
call goes through it. Calls are admitted one at a time, in submission
order (asyncio.Lock wakes waiters FIFO), and consecutive call starts are
spaced by at least ``min_interval`` seconds.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from feed.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RateThrottle:
    """Serializes and paces upstream calls.

    The throttle adds latency only. Exceptions raised by the wrapped call
    propagate unchanged and still count as a started call for pacing.
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative")
        self._min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_start: float | None = None
        self._calls = 0

    async def run(
        self,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Wait for admission, then await ``fn(*args, **kwargs)``."""
        async with self._lock:
            await self._wait_for_slot()
            self._last_start = self._clock()
            self._calls += 1
            return await fn(*args, **kwargs)

    async def _wait_for_slot(self) -> None:
        if self._last_start is None:
            return
        delay = self._min_interval - (self._clock() - self._last_start)
        if delay > 0:
            logger.debug(
                "throttle_wait",
                delay_seconds=round(delay, 3),
                admitted=self._calls,
            )
            await self._sleep(delay)
