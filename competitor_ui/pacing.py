"""Fixed-delay pacing for calls to external targets.

A RateLimiter is a single-slot gate: one holder at a time, and after each
release the slot refills only once ``delay_seconds`` have passed. Both the
capture loop (async) and the scoring loop (sync) pace through it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Single-slot token gate with a fixed refill delay."""

    def __init__(
        self,
        delay_seconds: float,
        name: str = "",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay_seconds = delay_seconds
        self.name = name
        self._clock = clock
        self._sleep = sleep
        self._async_sleep = async_sleep
        self._released_at: float | None = None
        self._held = False

    def _remaining(self) -> float:
        if self._released_at is None:
            return 0.0
        return max(0.0, self._released_at + self.delay_seconds - self._clock())

    def _take(self) -> None:
        if self._held:
            raise RuntimeError(f"RateLimiter {self.name!r} is already held")
        self._held = True

    def acquire(self) -> None:
        wait = self._remaining()
        if wait > 0:
            logger.debug("Pacing %s: waiting %.1fs", self.name or "gate", wait)
            self._sleep(wait)
        self._take()

    async def acquire_async(self) -> None:
        wait = self._remaining()
        if wait > 0:
            logger.debug("Pacing %s: waiting %.1fs", self.name or "gate", wait)
            await self._async_sleep(wait)
        self._take()

    def release(self) -> None:
        self._held = False
        self._released_at = self._clock()

    def __enter__(self) -> "RateLimiter":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire_async()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()
