from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class RequestLane:
    """Single-lane request queue with a minimum spacing between dispatches.

    Jobs run one at a time in submission order (``asyncio.Lock`` wakes waiters
    FIFO). A job starts no earlier than ``min_interval`` seconds after the
    previous job started. Separate lanes do not block each other.
    """

    def __init__(
        self,
        name: str,
        min_interval: float,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.name = name
        self.min_interval = max(0.0, min_interval)
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_dispatch: Optional[float] = None
        self.dispatched = 0

    async def schedule(self, func: Callable[..., Awaitable[T]], *args: Any) -> T:
        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._last_dispatch is not None:
                wait = self._last_dispatch + self.min_interval - loop.time()
                if wait > 0:
                    log.debug("lane %s: czekam %.2fs", self.name, wait)
                    await self._sleep(wait)
            self._last_dispatch = loop.time()
            self.dispatched += 1
            return await func(*args)
