import asyncio

import aiohttp
import pytest

from conftest import FakeResponse, FakeSession
from qobuz_label_scraper.fetch import (
    RATE_LIMIT_BACKOFF_S,
    RETRY_AFTER_CAP_S,
    SERVER_ERROR_BACKOFF_S,
    HtmlFetcher,
    next_delay,
)
from qobuz_label_scraper.models import ScrapeStats

URL = "https://www.qobuz.com/us-en/album/x/1"


def _fetch(session, no_sleep, retries=3):
    stats = ScrapeStats()
    fetcher = HtmlFetcher(session, retries=retries, timeout_ms=5000, stats=stats, sleep=no_sleep)
    return asyncio.run(fetcher.fetch(URL)), stats


def test_next_delay_doubles():
    assert [next_delay(a, 2.0) for a in (1, 2, 3, 4)] == [2.0, 4.0, 8.0, 16.0]
    assert next_delay(1, 0.5) == 0.5


def test_ok_body(no_sleep):
    body, stats = _fetch(FakeSession({URL: FakeResponse(200, "<html>ok</html>")}), no_sleep)
    assert body == "<html>ok</html>"
    assert stats.http_errors == 0
    assert no_sleep.waits == []


def test_429_then_ok(no_sleep):
    session = FakeSession({URL: [FakeResponse(429), FakeResponse(429), FakeResponse(200, "ok")]})
    body, stats = _fetch(session, no_sleep)
    assert body == "ok"
    assert len(session.calls) == 3
    assert no_sleep.waits == [RATE_LIMIT_BACKOFF_S, RATE_LIMIT_BACKOFF_S * 2]
    assert stats.http_errors == 0


def test_retry_after_header_extends_wait(no_sleep):
    session = FakeSession({URL: [FakeResponse(429, headers={"Retry-After": "30"}), FakeResponse(200, "ok")]})
    body, _ = _fetch(session, no_sleep)
    assert body == "ok"
    assert no_sleep.waits == [30.0]


def test_retry_after_header_is_capped(no_sleep):
    session = FakeSession({URL: [FakeResponse(429, headers={"Retry-After": "86400"}), FakeResponse(200, "ok")]})
    body, _ = _fetch(session, no_sleep)
    assert body == "ok"
    assert no_sleep.waits == [RETRY_AFTER_CAP_S]


def test_server_errors_exhaust_retries(no_sleep):
    session = FakeSession({URL: FakeResponse(503)})
    body, stats = _fetch(session, no_sleep, retries=2)
    assert body is None
    assert len(session.calls) == 3
    assert no_sleep.waits == [SERVER_ERROR_BACKOFF_S, SERVER_ERROR_BACKOFF_S * 2]
    assert stats.http_errors == 1


def test_other_status_is_not_retried(no_sleep):
    session = FakeSession({URL: FakeResponse(404)})
    body, stats = _fetch(session, no_sleep)
    assert body is None
    assert len(session.calls) == 1
    assert stats.http_errors == 1


@pytest.mark.parametrize("error", [aiohttp.ClientConnectionError("reset"), asyncio.TimeoutError()])
def test_network_errors_are_retried(no_sleep, error):
    session = FakeSession({URL: [error, FakeResponse(200, "ok")]})
    body, stats = _fetch(session, no_sleep)
    assert body == "ok"
    assert len(session.calls) == 2
    assert stats.http_errors == 0


def test_zero_retries_means_single_attempt(no_sleep):
    session = FakeSession({URL: aiohttp.ClientConnectionError("down")})
    body, stats = _fetch(session, no_sleep, retries=0)
    assert body is None
    assert len(session.calls) == 1
    assert no_sleep.waits == []
    assert stats.http_errors == 1
