"""Request throttle — one analysis in flight, spaced by a minimum delay."""

from __future__ import annotations

import asyncio
import logging
import time
from types import TracebackType

logger = logging.getLogger(__name__)


class RequestThrottle:
    """Serializes analysis requests.

    Holding the throttle (``async with throttle:``) excludes every other
    request; entering also waits until ``min_interval_ms`` has passed since
    the previous request started.
    """

    def __init__(self, min_interval_ms: int = 500) -> None:
        self._min_interval = min_interval_ms / 1000.0
        self._last_start: float | None = None
        self._lock = asyncio.Lock()

        # Stats
        self._total_requests = 0
        self._total_wait_seconds = 0.0

    async def acquire(self) -> float:
        """Wait for the slot, then take it.

        Returns the time spent sleeping for the interval (seconds).
        """
        await self._lock.acquire()
        wait = 0.0
        if self._last_start is not None:
            elapsed = time.monotonic() - self._last_start
            wait = max(0.0, self._min_interval - elapsed)
        if wait > 0:
            logger.debug("Throttling request for %.3fs", wait)
            try:
                await asyncio.sleep(wait)
            except BaseException:
                self._lock.release()
                raise
        self._last_start = time.monotonic()
        self._total_requests += 1
        self._total_wait_seconds += wait
        return wait

    @property
    def min_interval_ms(self) -> int:
        return round(self._min_interval * 1000)

    def release(self) -> None:
        self._lock.release()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @property
    def stats(self) -> dict:
        return {
            "total_requests": self._total_requests,
            "total_wait_seconds": self._total_wait_seconds,
            "in_flight": self._lock.locked(),
        }

    def reset(self) -> None:
        """Reset pacing and stats (for testing)."""
        self._last_start = None
        self._total_requests = 0
        self._total_wait_seconds = 0.0

    async def __aenter__(self) -> RequestThrottle:
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
