from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Union

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FakeResponse:
    def __init__(self, status: int = 200, body: str = "", headers: Dict[str, str] = None):
        self.status = status
        self.body = body
        self.headers = headers or {}

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def text(self, errors: str = "strict") -> str:
        return self.body


Route = Union[FakeResponse, BaseException, List[Union[FakeResponse, BaseException]]]


class FakeSession:
    """Minimal stand-in for aiohttp.ClientSession.get(); unknown URLs answer 404.

    A list route is consumed one item per request; its last item repeats.
    """

    def __init__(self, routes: Dict[str, Route] = None):
        self.routes = dict(routes or {})
        self.calls: List[str] = []
        self.closed = False

    def get(self, url: str, **kwargs):
        self.calls.append(url)
        item = self.routes.get(url, FakeResponse(404))
        if isinstance(item, list):
            item = item.pop(0) if len(item) > 1 else item[0]
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self):
        self.closed = True


def html_page(body: str) -> FakeResponse:
    return FakeResponse(200, f"<html><body>{body}</body></html>")


@pytest.fixture
def fake_session_cls():
    return FakeSession


@pytest.fixture
def no_sleep():
    waits: List[float] = []

    async def _sleep(seconds: float) -> None:
        waits.append(seconds)

    _sleep.waits = waits
    return _sleep


@pytest.fixture
def app_root(tmp_path):
    """An app folder with FILES/; write_input() fills the config and labels."""
    files = tmp_path / "FILES"
    files.mkdir()

    def write_input(config_text: str, labels_text: str = None, labels_name: str = "labels_scrapper.txt"):
        (files / "plik_wejsciowy.txt").write_text(config_text, encoding="utf-8")
        if labels_text is not None:
            (files / labels_name).write_text(labels_text, encoding="utf-8")
        return tmp_path

    return write_input
