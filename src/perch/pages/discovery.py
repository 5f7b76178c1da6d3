"""Page handler discovery.

Handlers are marked with ``@page("name")`` and found by scanning a
package, the same way an import-time decorator app is assembled, but
without any global state: ``@page`` only attaches metadata, and the
app decides what to register.

Usage::

    # myapp/pages/members.py
    from perch.pages import page

    @page("members")
    class MembersPage:
        def process(self, request, response):
            response.context["members"] = load_members()
            return response.view

    # myapp/app.py
    app.scan("myapp.pages")
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from dataclasses import dataclass
from types import ModuleType
from typing import TYPE_CHECKING, Any

from perch._internal.invoke import invoke
from perch.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from perch.http.request import Request
    from perch.pages.response import PageResponse
    from perch.pages.types import PageHandler

logger = logging.getLogger("perch.pages")

_PAGE_ATTR = "__perch_page__"


@dataclass(frozen=True, slots=True)
class PageMeta:
    """Metadata attached by ``@page``."""

    name: str
    view: str | None = None


@dataclass(frozen=True, slots=True)
class DiscoveredPage:
    """A ``@page`` target found by ``scan_pages``."""

    name: str
    view: str | None
    target: Any
    module: str


def page(name: str, *, view: str | None = None) -> Callable[[Any], Any]:
    """Mark a class or function as the handler for page *name*.

    Args:
        name: Page name (the routing key).
        view: Explicit view path. Defaults to the app's convention,
            ``<view_root>/<name>.<view_ext>``.
    """

    def decorator(target: Any) -> Any:
        setattr(target, _PAGE_ATTR, PageMeta(name, view))
        return target

    return decorator


def page_meta(target: object) -> PageMeta | None:
    """Return the ``@page`` metadata declared on *target* itself, if any.

    Subclasses of a decorated class don't inherit its page.
    """
    meta = getattr(target, "__dict__", {}).get(_PAGE_ATTR)
    return meta if isinstance(meta, PageMeta) else None


class FunctionHandler:
    """Adapts a ``fn(request, response)`` function to the handler protocol."""

    __slots__ = ("__wrapped__",)

    def __init__(self, func: Callable[..., Any]) -> None:
        self.__wrapped__ = func

    async def process(self, request: Request, response: PageResponse) -> str | None:
        return await invoke(self.__wrapped__, request, response)

    def __repr__(self) -> str:
        return f"<FunctionHandler {self.__wrapped__.__qualname__}>"


def as_handler(target: Any) -> PageHandler:
    """Turn a ``@page`` target into a handler object.

    - classes are instantiated with no arguments;
    - plain functions are wrapped in ``FunctionHandler``;
    - objects with a callable ``process`` are used as-is.

    Raises:
        ConfigurationError: If the class can't be instantiated without
            arguments, or *target* is none of the above.
    """
    if inspect.isclass(target):
        if not callable(getattr(target, "process", None)):
            msg = f"Page handler class {target.__qualname__} must define process(request, response)"
            raise ConfigurationError(msg)
        try:
            return target()
        except TypeError as exc:
            msg = (
                f"Problem creating an instance of {target.__module__}.{target.__qualname__}: "
                f"page handler classes must accept a no-argument constructor ({exc})"
            )
            raise ConfigurationError(msg) from exc
    if inspect.isfunction(target) or inspect.ismethod(target):
        return FunctionHandler(target)
    if callable(getattr(target, "process", None)):
        return target
    msg = f"{target!r} is not a page handler: expected a class, function, or object with process()"
    raise ConfigurationError(msg)


def scan_pages(package: str) -> list[DiscoveredPage]:
    """Import *package* and its submodules and collect ``@page`` targets.

    Only objects defined in the module being scanned are collected, so a
    handler re-exported elsewhere is found once. Classes that look like
    handlers (they define ``process``) but lack ``@page`` are skipped with
    a warning.

    Returns:
        Discovered pages sorted by name.

    Raises:
        ModuleNotFoundError: If *package* can't be imported.
    """
    logger.info("Scanning for page handlers in package %r", package)
    root = importlib.import_module(package)

    modules: list[ModuleType] = [root]
    search_path = getattr(root, "__path__", None)
    if search_path is not None:
        for info in pkgutil.walk_packages(search_path, prefix=f"{root.__name__}."):
            modules.append(importlib.import_module(info.name))

    found: list[DiscoveredPage] = []
    for module in modules:
        found.extend(_collect_module(module))

    if not found:
        logger.warning("No page handlers found in package %r", package)
    return sorted(found, key=lambda d: d.name)


def _collect_module(module: ModuleType) -> list[DiscoveredPage]:
    found: list[DiscoveredPage] = []
    for attr, obj in vars(module).items():
        if attr.startswith("_") or getattr(obj, "__module__", None) != module.__name__:
            continue
        meta = page_meta(obj)
        if meta is not None:
            found.append(DiscoveredPage(meta.name, meta.view, obj, module.__name__))
        elif inspect.isclass(obj) and callable(getattr(obj, "process", None)):
            logger.warning(
                "Ignoring handler class %s.%s because it's not decorated with @page",
                module.__name__,
                obj.__qualname__,
            )
    return found
