"""Page handler protocol and registration record."""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from perch.http.request import Request
    from perch.pages.response import PageResponse


@runtime_checkable
class PageHandler(Protocol):
    """The single capability a page handler must provide.

    ``process`` pre-processes the request and returns either a view path
    to render, or ``None``/``""`` when it has already finalized the
    response itself (redirect, error, raw body). It may be ``async``.

    No base class required::

        class MembersPage:
            def process(self, request, response):
                response.context["members"] = load_members()
                return response.view
    """

    def process(
        self, request: Request, response: PageResponse
    ) -> str | None | Awaitable[str | None]: ...


@dataclass(frozen=True, slots=True)
class HandlerDeclaration:
    """A page handler bound to its routing name and view.

    Attributes:
        name: Unique page name, the routing key (``"members"``).
        view: Template path rendered when the handler forwards
            (``"pages/members.html"``).
        handler: The object whose ``process`` is invoked per request.
    """

    name: str
    view: str
    handler: PageHandler

    @property
    def handler_name(self) -> str:
        """Qualified name of the handler, for logs and the CLI."""
        target: Any = getattr(self.handler, "__wrapped__", None)
        if target is None:
            target = type(self.handler)
        return f"{target.__module__}.{target.__qualname__}"


def handler_identity(handler: object) -> int:
    """Identity used for duplicate detection.

    Adapted functions carry the original in ``__wrapped__``, so wrapping
    the same function twice still counts as the same handler.
    """
    return id(getattr(handler, "__wrapped__", handler))
