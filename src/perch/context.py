"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: the current ``Request`` for this task.
- ``page_var``: the current ``PageContext`` while a page handler runs.

The ASGI pipeline sets ``request_var`` per request; the dispatcher enters
``page_scope`` around each handler invocation. Both are reset on every
exit path. Outside those scopes, accessing them raises ``LookupError``.

Thread safety:
    ``ContextVar`` is task-local under asyncio, so concurrent requests
    never see each other's context. No locks needed.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from perch.http.request import Request

if TYPE_CHECKING:
    from perch.pages.response import PageResponse
    from perch.pages.types import HandlerDeclaration

# -- Request context --

request_var: ContextVar[Request] = ContextVar("perch_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


# -- Page context --


@dataclass(slots=True)
class PageContext:
    """Everything a page handler may need during one invocation.

    ``state`` is scratch space for helpers called from the handler;
    it lives exactly as long as the invocation.
    """

    request: Request
    response: PageResponse
    declaration: HandlerDeclaration
    state: dict[str, Any] = field(default_factory=dict)
    released: bool = False

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def view(self) -> str:
        return self.declaration.view

    def release(self) -> None:
        if self.released:
            msg = f"Page context for {self.name!r} was already released"
            raise RuntimeError(msg)
        self.released = True
        self.state.clear()


page_var: ContextVar[PageContext] = ContextVar("perch_page")
"""The page invocation in progress. Set by ``page_scope``."""


def current_page() -> PageContext:
    """Return the page invocation in progress.

    Raises ``LookupError`` outside a page handler.
    """
    return page_var.get()


@contextmanager
def page_scope(
    request: Request,
    response: PageResponse,
    declaration: HandlerDeclaration,
) -> Iterator[PageContext]:
    """Make a ``PageContext`` current for the duration of the block.

    The context is released when the block exits, whether the handler
    returned or raised, so a later request on the same task can never
    observe it. A handler that released it early keeps its own exception.
    """
    ctx = PageContext(request=request, response=response, declaration=declaration)
    token = page_var.set(ctx)
    try:
        yield ctx
    finally:
        page_var.reset(token)
        if not ctx.released:
            ctx.release()
