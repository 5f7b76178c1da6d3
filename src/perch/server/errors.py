"""Error responses for the request pipeline.

Anything that escapes the middleware chain ends up here: ``HTTPError``
subclasses (a dispatcher miss under ``MissPolicy.NOT_FOUND``, the terminal
404) and unexpected exceptions, including ones raised by page handlers,
which the dispatcher never swallows. Registered ``@app.error`` handlers
are tried by exception type, then by status code.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from perch._internal.invoke import invoke
from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response

logger = logging.getLogger("perch.server")

ErrorHandlers = Mapping[int | type, Callable[..., Any]]

_PLAIN_TEXT = "text/plain; charset=utf-8"


def _as_response(result: Any) -> Response:
    """Coerce an error handler's return value to a Response."""
    if isinstance(result, Response):
        return result
    if isinstance(result, bytes):
        return Response(body=result, content_type="application/octet-stream")
    return Response(body=str(result))


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Call *handler* with as many of ``(request, exc)`` as it accepts.

    Handlers may take zero, one or two positional arguments and may be
    sync or async.
    """
    arity = len(inspect.signature(handler).parameters)
    result = await invoke(handler, *(request, exc)[: min(arity, 2)])
    return _as_response(result)


async def _from_registered(
    handlers: ErrorHandlers,
    exc: Exception,
    status: int,
    request: Request,
) -> Response | None:
    """Response from the registered handler for *exc*, or None if there is none.

    A handler that leaves the status at 200 gets the error's status.
    """
    handler = handlers.get(type(exc)) or handlers.get(status)
    if handler is None:
        return None
    response = await call_error_handler(handler, request, exc)
    return response.with_status(status) if response.status == 200 else response


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    response = await _from_registered(error_handlers, exc, exc.status, request)
    if response is not None:
        return response

    body = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        body = f"{exc.status}: {exc.detail}"
    return Response(body=body, status=exc.status, content_type=_PLAIN_TEXT, headers=exc.headers)


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Log an unexpected exception and answer 500."""
    logger.exception("500 %s %s", request.method, request.path)

    response = await _from_registered(error_handlers, exc, 500, request)
    if response is not None:
        return response

    body = "Internal Server Error"
    if debug:
        body = f"{body}\n\n{type(exc).__name__}: {exc}"
    return Response(body=body, status=500, content_type=_PLAIN_TEXT)
