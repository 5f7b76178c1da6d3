"""Tests for perch.context — request and page ContextVars."""

import asyncio

import pytest

from perch.context import PageContext, current_page, get_request, page_scope, request_var
from perch.pages.response import PageResponse
from perch.pages.types import HandlerDeclaration


class Handler:
    def process(self, request, response):
        return response.view


def _decl(name: str = "members") -> HandlerDeclaration:
    return HandlerDeclaration(name=name, view=f"pages/{name}.html", handler=Handler())


class TestRequestVar:
    def test_get_request_raises_outside_context(self) -> None:
        with pytest.raises(LookupError):
            get_request()

    def test_set_and_get_request(self, make_request) -> None:
        request = make_request("/test")
        token = request_var.set(request)
        try:
            assert get_request() is request
            assert get_request().path == "/test"
        finally:
            request_var.reset(token)


class TestPageScope:
    def test_current_page_inside_scope(self, make_request) -> None:
        request = make_request("/pages/members")
        response = PageResponse("pages/members.html")
        with page_scope(request, response, _decl()) as ctx:
            assert current_page() is ctx
            assert ctx.name == "members"
            assert ctx.view == "pages/members.html"
            assert not ctx.released
        assert ctx.released
        with pytest.raises(LookupError):
            current_page()

    def test_released_on_exception(self, make_request) -> None:
        request = make_request("/pages/members")
        with pytest.raises(KeyError), page_scope(request, PageResponse("v.html"), _decl()) as ctx:
            ctx.state["scratch"] = 1
            raise KeyError("boom")
        assert ctx.released
        assert ctx.state == {}

    def test_released_early_then_raises(self, make_request) -> None:
        request = make_request("/pages/members")
        with pytest.raises(KeyError, match="boom"), page_scope(
            request, PageResponse("v.html"), _decl()
        ) as ctx:
            current_page().release()
            raise KeyError("boom")
        assert ctx.released

    def test_released_early_returns_cleanly(self, make_request) -> None:
        request = make_request("/pages/members")
        with page_scope(request, PageResponse("v.html"), _decl()) as ctx:
            ctx.release()
        assert ctx.released

    def test_nested_scope_restores_outer(self, make_request) -> None:
        request = make_request("/")
        with page_scope(request, PageResponse("a.html"), _decl("outer")) as outer:
            with page_scope(request, PageResponse("b.html"), _decl("inner")):
                assert current_page().name == "inner"
            assert current_page() is outer

    def test_release_twice_raises(self, make_request) -> None:
        ctx = PageContext(
            request=make_request("/"), response=PageResponse("a.html"), declaration=_decl()
        )
        ctx.release()
        with pytest.raises(RuntimeError, match="already released"):
            ctx.release()

    async def test_isolated_between_tasks(self, make_request) -> None:
        names: list[str] = []

        async def run(name: str) -> None:
            decl = _decl(name)
            with page_scope(make_request(f"/pages/{name}"), PageResponse(decl.view), decl):
                await asyncio.sleep(0)
                names.append(current_page().name)

        await asyncio.gather(run("members"), run("news-archive"))
        assert sorted(names) == ["members", "news-archive"]
