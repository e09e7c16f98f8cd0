from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Mapping, Optional

import aiohttp

from .models import ScrapeStats

log = logging.getLogger(__name__)

RATE_LIMIT_BACKOFF_S = 2.0
SERVER_ERROR_BACKOFF_S = 1.0
NETWORK_ERROR_BACKOFF_S = 1.0
# upper bound for a server-supplied Retry-After
RETRY_AFTER_CAP_S = 60.0


def next_delay(attempt: int, base_s: float) -> float:
    """Exponential backoff: base, 2*base, 4*base, ... for attempt 1, 2, 3, ..."""
    return base_s * (2 ** (max(1, attempt) - 1))


def _retry_after_seconds(headers: Mapping[str, str]) -> Optional[float]:
    retry_after = headers.get("Retry-After")
    if not retry_after:
        return None
    try:
        return float(retry_after)
    except ValueError:
        return None


def make_session(user_agent: str, accept_language: str) -> aiohttp.ClientSession:
    return aiohttp.ClientSession(
        headers={
            "User-Agent": user_agent,
            "Accept-Language": accept_language,
        }
    )


class HtmlFetcher:
    """GET pages as text; ``None`` means "skip this URL", never an exception.

    429, 5xx, network errors and timeouts are retried ``retries`` times.
    Every URL that is finally given up on counts once in ``stats.http_errors``.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        retries: int,
        timeout_ms: int,
        stats: ScrapeStats,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._session = session
        self._retries = retries
        self._timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)
        self._stats = stats
        self._sleep = sleep

    async def fetch(self, url: str) -> Optional[str]:
        attempts = self._retries + 1
        last_err = ""
        for attempt in range(1, attempts + 1):
            final = attempt == attempts
            try:
                async with self._session.get(url, timeout=self._timeout) as resp:
                    if resp.status == 200:
                        return await resp.text(errors="replace")

                    if resp.status == 429:
                        last_err = "HTTP 429"
                        if final:
                            break
                        backoff = next_delay(attempt, RATE_LIMIT_BACKOFF_S)
                        retry_after = _retry_after_seconds(resp.headers)
                        if retry_after is not None:
                            backoff = max(backoff, min(retry_after, RETRY_AFTER_CAP_S))
                        log.warning("429 Too Many Requests: %s, retry za %.1fs (%d/%d)", url, backoff, attempt, self._retries)
                        await self._sleep(backoff)
                        continue

                    if 500 <= resp.status < 600:
                        last_err = f"HTTP {resp.status}"
                        if final:
                            break
                        backoff = next_delay(attempt, SERVER_ERROR_BACKOFF_S)
                        log.warning("HTTP %d: %s, retry za %.1fs (%d/%d)", resp.status, url, backoff, attempt, self._retries)
                        await self._sleep(backoff)
                        continue

                    log.error("HTTP %d: %s", resp.status, url)
                    self._stats.http_errors += 1
                    return None

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_err = str(e) or type(e).__name__
                if final:
                    break
                backoff = next_delay(attempt, NETWORK_ERROR_BACKOFF_S)
                log.warning("Błąd sieci (%d/%d): %s, retry za %.1fs", attempt, self._retries, last_err, backoff)
                await self._sleep(backoff)

        self._stats.http_errors += 1
        log.error("Nie udało się pobrać %s (%s)", url, last_err or "unknown")
        return None
