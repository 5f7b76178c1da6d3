"""Invoke helpers — call sync or async handlers uniformly.

Page handlers may implement ``process`` as ``def`` or ``async def``, and
error handlers may be either too. This keeps the check in one place.

Usage::

    from perch._internal.invoke import invoke

    view = await invoke(handler.process, request, response)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
