"""ASGI handler — translates ASGI scope/messages to perch types.

The only component that touches raw HTTP ASGI messages. Converts the
scope to a typed Request, runs it through the middleware pipeline (user
middleware, the page dispatcher, static files), and sends the Response
back through ASGI send().
"""

from collections.abc import Callable
from contextvars import Token
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch.context import request_var
from perch.errors import HTTPError, NotFound
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next
from perch.server.errors import ErrorHandlers, handle_http_error, handle_internal_error
from perch.server.sender import send_response


async def _end_of_pipeline(request: Request) -> Response:
    """Innermost stage: nothing before it produced a response."""
    raise NotFound(f"No page or file matches {request.method} {request.path!r}")


def build_pipeline(middleware: tuple[Callable[..., Any], ...]) -> Next:
    """Compose middleware around the terminal stage, first entry outermost."""
    handler: Next = _end_of_pipeline
    for mw in reversed(middleware):

        async def stage(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = stage
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    pipeline: Next,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    # Set request context var (reset after dispatch)
    token: Token[Request] = request_var.set(request)
    try:
        response = await pipeline(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        request_var.reset(token)

    await send_response(response, send, method=request.method)
