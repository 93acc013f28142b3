"""Tests for the request throttle."""

import asyncio

import pytest

from vision_insights.concurrency.rate_limiter import RequestThrottle


class TestRequestThrottle:
    async def test_first_acquire_does_not_wait(self):
        throttle = RequestThrottle(min_interval_ms=1000)
        wait = await throttle.acquire()
        throttle.release()
        assert wait == 0.0

    async def test_second_acquire_waits_for_interval(self):
        throttle = RequestThrottle(min_interval_ms=50)
        async with throttle:
            pass
        wait = await throttle.acquire()
        throttle.release()
        assert 0.0 < wait <= 0.05

    async def test_zero_interval_never_waits(self):
        throttle = RequestThrottle(min_interval_ms=0)
        for _ in range(3):
            async with throttle:
                pass
        assert throttle.stats["total_wait_seconds"] == 0.0
        assert throttle.stats["total_requests"] == 3

    async def test_one_request_in_flight(self):
        throttle = RequestThrottle(min_interval_ms=0)
        order: list[str] = []

        async def worker(name: str) -> None:
            async with throttle:
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))
        assert order == ["a-start", "a-end", "b-start", "b-end"]

    async def test_released_on_error(self):
        throttle = RequestThrottle(min_interval_ms=0)
        with pytest.raises(RuntimeError):
            async with throttle:
                assert throttle.locked
                raise RuntimeError("boom")
        assert not throttle.locked

    async def test_cancelled_wait_releases(self):
        throttle = RequestThrottle(min_interval_ms=10_000)
        async with throttle:
            pass
        task = asyncio.create_task(throttle.acquire())
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert not throttle.locked

    async def test_stats_and_reset(self):
        throttle = RequestThrottle(min_interval_ms=0)
        async with throttle:
            assert throttle.stats["in_flight"] is True
        assert throttle.stats["in_flight"] is False
        throttle.reset()
        assert throttle.stats["total_requests"] == 0

    def test_min_interval_ms(self):
        assert RequestThrottle(min_interval_ms=250).min_interval_ms == 250
