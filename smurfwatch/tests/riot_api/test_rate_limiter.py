"""
Tests for the request-pacing rate limiter.
"""

import asyncio
import time

import pytest

from smurfwatch.core.riot_api.errors import NotFoundError, RateLimitError
from smurfwatch.core.riot_api.rate_limiter import RateLimiter


def recorder(log, value):
    """Request factory that records its start time and returns ``value``."""

    async def request():
        log.append((value, time.monotonic()))
        return value

    return lambda: request()


class TestRateLimiter:
    """Test cases for RateLimiter."""

    def test_initialization(self):
        limiter = RateLimiter(requests_per_second=20)
        assert limiter.request_spacing == 0.05
        assert limiter.pending == 0

    def test_rejects_non_positive_rate(self):
        with pytest.raises(ValueError):
            RateLimiter(requests_per_second=0)

    @pytest.mark.asyncio
    async def test_one_per_second_pacing(self):
        """Test five queued requests at 1 req/s span at least four seconds."""
        limiter = RateLimiter(requests_per_second=1)
        log = []
        try:
            start = time.monotonic()
            results = await asyncio.gather(
                *(limiter.submit(recorder(log, i)) for i in range(5))
            )
            elapsed = log[-1][1] - log[0][1]
        finally:
            await limiter.close()

        assert results == [0, 1, 2, 3, 4]
        assert elapsed >= 4.0 - 0.05
        assert time.monotonic() - start >= 4.0 - 0.05

    @pytest.mark.asyncio
    async def test_fifo_order(self):
        """Test requests start in submission order."""
        limiter = RateLimiter(requests_per_second=200)
        log = []
        try:
            await asyncio.gather(*(limiter.submit(recorder(log, i)) for i in range(10)))
        finally:
            await limiter.close()

        assert [value for value, _ in log] == list(range(10))
        assert limiter.requests_made == 10

    @pytest.mark.asyncio
    async def test_error_propagates_and_queue_keeps_draining(self):
        """Test a failing request fails only its own caller."""
        limiter = RateLimiter(requests_per_second=200)

        async def failing():
            raise NotFoundError("Resource not found", status_code=404)

        log = []
        try:
            results = await asyncio.gather(
                limiter.submit(lambda: failing()),
                limiter.submit(recorder(log, "ok")),
                return_exceptions=True,
            )
        finally:
            await limiter.close()

        assert isinstance(results[0], NotFoundError)
        assert results[1] == "ok"

    @pytest.mark.asyncio
    async def test_full_queue_rejects(self):
        """Test submissions beyond the queue size raise RateLimitError."""
        limiter = RateLimiter(requests_per_second=200, max_queue_size=1)
        release = asyncio.Event()

        async def blocked():
            await release.wait()
            return "first"

        first = asyncio.create_task(limiter.submit(lambda: blocked()))
        await asyncio.sleep(0.05)  # drain task is now waiting on ``blocked``
        second = asyncio.create_task(limiter.submit(recorder([], "second")))
        await asyncio.sleep(0.05)

        try:
            with pytest.raises(RateLimitError) as exc_info:
                await limiter.submit(recorder([], "third"))
            assert exc_info.value.status_code == 429

            release.set()
            assert await first == "first"
            assert await second == "second"
        finally:
            await limiter.close()

    @pytest.mark.asyncio
    async def test_close_cancels_pending(self):
        """Test close abandons the in-flight and queued requests."""
        limiter = RateLimiter(requests_per_second=200)
        never = asyncio.Event()

        async def blocked():
            await never.wait()

        first = asyncio.create_task(limiter.submit(lambda: blocked()))
        await asyncio.sleep(0.05)
        second = asyncio.create_task(limiter.submit(lambda: blocked()))
        await asyncio.sleep(0.05)

        await limiter.close()

        with pytest.raises(asyncio.CancelledError):
            await first
        with pytest.raises(asyncio.CancelledError):
            await second
        assert limiter.pending == 0
