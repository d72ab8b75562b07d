"""Request pacing for the Riot API: a single FIFO queue drained at a fixed rate."""

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional, Tuple
import structlog

from .errors import RateLimitError

logger = structlog.get_logger(__name__)

RequestFactory = Callable[[], Awaitable[Any]]


class RateLimiter:
    """
    Serializes outbound requests through one background drain task.

    Each submitted request runs to completion before the next one starts,
    and the drain task sleeps ``1 / requests_per_second`` after every request,
    so requests start no closer together than that interval.
    """

    def __init__(self, requests_per_second: float = 20.0, max_queue_size: int = 1000):
        """
        Initialize rate limiter.

        Args:
            requests_per_second: Steady-state request rate
            max_queue_size: Pending requests accepted before rejecting
        """
        if requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")

        self.requests_per_second = requests_per_second
        self.request_spacing = 1.0 / requests_per_second
        self.max_queue_size = max_queue_size

        self._queue: "asyncio.Queue[Tuple[RequestFactory, asyncio.Future]]" = (
            asyncio.Queue(maxsize=max_queue_size)
        )
        self._worker: Optional[asyncio.Task] = None
        self.last_request_time: float = 0.0
        self.requests_made = 0

    @property
    def pending(self) -> int:
        """Requests waiting in the queue."""
        return self._queue.qsize()

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._drain())

    async def submit(self, factory: RequestFactory) -> Any:
        """
        Queue a request and wait for its result.

        Args:
            factory: Zero-argument callable returning the request coroutine

        Returns:
            Whatever the request coroutine returns

        Raises:
            RateLimitError: If the queue is full
        """
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        try:
            self._queue.put_nowait((factory, future))
        except asyncio.QueueFull:
            logger.warning(
                "Request queue is full, rejecting request",
                max_queue_size=self.max_queue_size,
            )
            raise RateLimitError("Request queue is full", status_code=429) from None

        self._ensure_worker()
        return await future

    async def _drain(self) -> None:
        while True:
            factory, future = await self._queue.get()
            try:
                if future.cancelled():
                    continue

                self.last_request_time = time.monotonic()
                self.requests_made += 1
                try:
                    result = await factory()
                except asyncio.CancelledError:
                    future.cancel()
                    raise
                except Exception as e:
                    if not future.done():
                        future.set_exception(e)
                else:
                    if not future.done():
                        future.set_result(result)

                await asyncio.sleep(self.request_spacing)
            finally:
                self._queue.task_done()

    async def close(self) -> None:
        """Stop the drain task; queued requests are abandoned."""
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None

        while not self._queue.empty():
            _, future = self._queue.get_nowait()
            if not future.done():
                future.cancel()
            self._queue.task_done()

        logger.debug("Rate limiter stopped", requests_made=self.requests_made)
