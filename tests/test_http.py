"""Tests for perch.http — headers, query params, request, and response."""

from typing import Any

from perch.http.headers import Headers, QueryParams
from perch.http.request import Request
from perch.http.response import Response


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers(((b"Content-Type", b"text/html"),))
        assert headers["content-type"] == "text/html"
        assert headers["CONTENT-TYPE"] == "text/html"
        assert "Content-Type" in headers

    def test_multiple_values(self) -> None:
        headers = Headers(((b"accept", b"a"), (b"Accept", b"b")))
        assert headers["accept"] == "a"
        assert headers.get_list("accept") == ["a", "b"]
        assert len(headers) == 1

    def test_missing(self) -> None:
        assert Headers().get("x") is None


class TestQueryParams:
    def test_parse(self) -> None:
        query = QueryParams(b"a=1&b=x&a=2&empty=")
        assert query["a"] == "1"
        assert query.get_list("a") == ["1", "2"]
        assert query["empty"] == ""
        assert query.raw == b"a=1&b=x&a=2&empty="

    def test_get_int(self) -> None:
        query = QueryParams(b"n=5&x=abc")
        assert query.get_int("n") == 5
        assert query.get_int("x", 0) == 0
        assert query.get_int("missing") is None


def _scope(**overrides: Any) -> dict[str, Any]:
    scope: dict[str, Any] = {
        "type": "http",
        "method": "POST",
        "path": "/pages/members",
        "headers": [(b"content-type", b"application/json"), (b"host", b"example.org")],
        "query_string": b"n=1",
        "http_version": "1.1",
        "client": ("10.0.0.1", 5000),
    }
    scope.update(overrides)
    return scope


def _receive(*chunks: bytes):
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive() -> dict[str, Any]:
        return messages.pop(0)

    return receive


class TestRequest:
    def test_from_asgi(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b""))
        assert request.method == "POST"
        assert request.path == "/pages/members"
        assert request.query["n"] == "1"
        assert request.content_type == "application/json"
        assert request.client == ("10.0.0.1", 5000)

    def test_url(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b""))
        assert request.url == "/pages/members?n=1"

    async def test_body_chunks_joined_and_cached(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b'{"a"', b": 1}"))
        assert await request.body() == b'{"a": 1}'
        assert await request.body() == b'{"a": 1}'
        assert await request.json() == {"a": 1}

    async def test_text(self) -> None:
        request = Request.from_asgi(_scope(), _receive("héllo".encode()))
        assert await request.text() == "héllo"


class TestResponse:
    def test_defaults(self) -> None:
        response = Response("hi")
        assert response.status == 200
        assert response.content_type == "text/html; charset=utf-8"

    def test_chaining_is_immutable(self) -> None:
        base = Response("hi")
        changed = base.with_status(201).with_header("X-A", "1").with_headers({"X-B": "2"})
        assert base.status == 200
        assert base.headers == ()
        assert changed.status == 201
        assert changed.header("x-b") == "2"

    def test_redirect(self) -> None:
        response = Response.redirect("/pages/home", status=303)
        assert response.status == 303
        assert response.header("Location") == "/pages/home"

    def test_body_conversions(self) -> None:
        assert Response("é").body_bytes == "é".encode()
        assert Response(b"abc").text == "abc"
        assert Response().with_content_type("text/plain").content_type == "text/plain"
