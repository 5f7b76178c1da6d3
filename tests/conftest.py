"""Shared fixtures for perch tests."""

from collections.abc import Callable
from typing import Any

import pytest
from kida import DictLoader, Environment

from perch.http.request import Request
from perch.templating.views import KidaViews

PAGE_TEMPLATES = {
    "pages/members.html": "<h1>Members</h1><p>{{ count }}</p>",
    "pages/news-archive.html": "<h1>Archive</h1>",
    "pages/home.html": "<h1>Home {{ title }}</h1>",
    "pages/whoami.html": "<p>{{ page }}</p>",
    "pages/user_profile.html": "<p>profile</p>",
    "custom/board.html": "<h1>Board {{ title }}</h1>",
}


@pytest.fixture
def kida_env() -> Environment:
    """A kida Environment with in-memory page views."""
    return Environment(loader=DictLoader(dict(PAGE_TEMPLATES)))


@pytest.fixture
def views(kida_env: Environment) -> KidaViews:
    return KidaViews(kida_env)


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Build a Request the way the ASGI handler would."""

    def _make(path: str = "/", method: str = "GET", query: str = "") -> Request:
        scope: dict[str, Any] = {
            "type": "http",
            "method": method,
            "path": path,
            "headers": [],
            "query_string": query.encode("latin-1"),
            "http_version": "1.1",
        }

        async def receive() -> dict[str, Any]:
            return {"type": "http.request", "body": b"", "more_body": False}

        return Request.from_asgi(scope, receive)

    return _make
