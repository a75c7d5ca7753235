from __future__ import annotations

import json
from typing import Any, Callable

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from edgar_txt.dispatcher import Dispatcher


def _response(
    status: int = 200,
    body: bytes | str | dict[str, Any] | list[Any] = b"",
    headers: dict[str, str] | None = None,
    url: str = "",
) -> requests.Response:
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
    if isinstance(body, str):
        body = body.encode("utf-8")
    r = requests.Response()
    r.status_code = status
    r._content = body
    r._content_consumed = True
    r.headers = CaseInsensitiveDict(headers or {})
    r.encoding = "utf-8"
    r.url = url
    return r


class FakeSession:
    """Stand-in for `requests.Session` serving canned responses per URL.

    A route value is either a single response (served every time), a list of
    responses (served in order, the last one repeating) or an exception
    instance (raised on every call).
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.headers: CaseInsensitiveDict[str] = CaseInsensitiveDict()
        self.calls: list[str] = []
        self.sent_headers: list[dict[str, str]] = []
        self.closed = False

    def get(self, url: str, timeout: float | None = None) -> requests.Response:
        self.calls.append(url)
        self.sent_headers.append(dict(self.headers))
        if url not in self.routes:
            return _response(404, b"not found", url=url)
        route = self.routes[url]
        if isinstance(route, BaseException):
            raise route
        if isinstance(route, list):
            return route.pop(0) if len(route) > 1 else route[0]
        return route

    def close(self) -> None:
        self.closed = True


class FakeClock:
    """Manual monotonic clock; `sleep` advances it and records the delay."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    return _response


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_dispatcher(fake_clock: FakeClock) -> Callable[..., tuple[Dispatcher, FakeSession]]:
    """Build a Dispatcher over a FakeSession that never really sleeps."""

    def _make(routes: dict[str, Any] | None = None, **kwargs: Any) -> tuple[Dispatcher, FakeSession]:
        session = FakeSession(routes)
        dispatcher = Dispatcher(
            "Test Suite test@example.com",
            session=session,  # type: ignore[arg-type]
            clock=fake_clock,
            sleep=fake_clock.sleep,
            **kwargs,
        )
        return dispatcher, session

    return _make
