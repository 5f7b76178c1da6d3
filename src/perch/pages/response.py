"""Outbound response capability handed to page handlers.

A ``PageResponse`` is created per request by the dispatcher. The handler
either fills ``context`` and returns a view path (the dispatcher renders
it), or finalizes the response itself with ``redirect``, ``error`` or
``send`` and returns nothing.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from perch.http.response import Response


class PageResponse:
    """Mutable response builder for a single page invocation.

    Usage::

        def process(self, request, response):
            if not request.query.get("id"):
                response.redirect("/pages/members")
                return None
            response.context["member"] = find(request.query["id"])
            response.set_header("Cache-Control", "no-store")
            return response.view
    """

    __slots__ = ("_final", "_headers", "context", "status", "view")

    def __init__(self, view: str) -> None:
        self.view = view
        self.context: dict[str, Any] = {}
        self.status = 200
        self._headers: list[tuple[str, str]] = []
        self._final: Response | None = None

    @property
    def finalized(self) -> bool:
        """True once ``redirect``, ``error`` or ``send`` has been called."""
        return self._final is not None

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._headers)

    def set_header(self, name: str, value: str) -> None:
        """Add a header to whatever response is eventually produced."""
        self._headers.append((name, value))

    def redirect(self, url: str, status: int = 302) -> None:
        """Finalize as a redirect to *url*."""
        self._finalize(Response.redirect(url, status))

    def error(self, status: int, detail: str = "") -> None:
        """Finalize as an error status with a plain-text body."""
        self._finalize(
            Response(body=detail, status=status, content_type="text/plain; charset=utf-8")
        )

    def send(
        self,
        body: str | bytes,
        *,
        status: int = 200,
        content_type: str = "text/html; charset=utf-8",
    ) -> None:
        """Finalize with a body produced by the handler itself."""
        self._finalize(Response(body=body, status=status, content_type=content_type))

    def render(self, body: str) -> Response:
        """Build the forwarded page from a rendered view body."""
        return Response(body=body, status=self.status, headers=self.headers)

    def to_response(self) -> Response:
        """The finalized response, or an empty one carrying status and headers.

        Headers set through ``set_header`` apply either way, including
        those added after finalizing.
        """
        if self._final is None:
            return Response(body="", status=self.status, headers=self.headers)
        return replace(self._final, headers=(*self._final.headers, *self._headers))

    def _finalize(self, response: Response) -> None:
        if self._final is not None:
            msg = "Response already finalized; a page handler may finalize it only once."
            raise RuntimeError(msg)
        self._final = response

    def __repr__(self) -> str:
        state = "finalized" if self.finalized else "open"
        return f"<PageResponse {self.view!r} {state} status={self.status}>"
