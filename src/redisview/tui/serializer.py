"""Serialization of backend requests."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestSerializer:
    """Single permit shared by every backend request of a session.

    At most one request is in flight; later requests wait in arrival order
    (asyncio.Lock wakes waiters FIFO). No timeout or cancellation is added
    here.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._waiting = 0

    @property
    def busy(self) -> bool:
        """Whether a request currently holds the permit."""
        return self._lock.locked()

    @property
    def waiting(self) -> int:
        """Number of requests queued behind the current one."""
        return self._waiting

    @asynccontextmanager
    async def permit(self) -> AsyncIterator[None]:
        """Hold the permit for the duration of the block."""
        if self._lock.locked():
            logger.debug("Backend busy, request queued behind %d others", self._waiting + 1)
        self._waiting += 1
        try:
            await self._lock.acquire()
        finally:
            self._waiting -= 1
        try:
            yield
        finally:
            self._lock.release()

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Await ``operation()`` while holding the permit."""
        async with self.permit():
            return await operation()
