"""Perch application class.

Mutable during setup (page registration, package scans, middleware,
error handlers). Frozen when the ASGI lifespan starts or on the first
request: handlers are registered and validated, the registry is sealed,
and the middleware pipeline is compiled.
"""

import inspect
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kida import Environment

from perch._internal.asgi import Receive, Scope, Send
from perch.config import AppConfig
from perch.errors import ConfigurationError
from perch.middleware.protocol import Middleware, Next
from perch.middleware.static import StaticFiles
from perch.pages.discovery import as_handler, scan_pages
from perch.pages.dispatch import PageDispatcher
from perch.pages.naming import default_view_path
from perch.pages.registry import HandlerRegistry
from perch.pages.types import HandlerDeclaration, PageHandler
from perch.server.handler import build_pipeline, handle_request
from perch.templating.integration import create_environment
from perch.templating.views import KidaViews

logger = logging.getLogger("perch.pages")

ErrorHandler = Callable[..., Any]


@dataclass(slots=True)
class _PendingPage:
    """A page waiting to be registered at freeze time."""

    name: str
    target: Any
    view: str | None
    source: str


class App:
    """The perch application — an ASGI 3.0 callable.

    Usage::

        app = App(AppConfig(uri_prefix="/pages/"))

        @app.page("members")
        def members(request, response):
            response.context["members"] = ["ada", "grace"]
            return response.view

        app.scan("myapp.pages")

    Thread safety:
        Setup is single-threaded (decorators at import time). The freeze
        transition uses a Lock + double-check so exactly one thread builds
        the registry, even if several workers hit ``__call__`` at once.
    """

    __slots__ = (
        "_custom_kida_env",
        "_dispatcher",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware_list",
        "_pending_pages",
        "_pipeline",
        "_registry",
        "_scan_packages",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        kida_env: Environment | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_pages: list[_PendingPage] = []
        self._scan_packages: list[str] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._custom_kida_env: Environment | None = kida_env

        # Compiled state, set during _freeze()
        self._registry: HandlerRegistry | None = None
        self._dispatcher: PageDispatcher | None = None
        self._pipeline: Next | None = None

    # -- Page registration --

    def page(self, name: str, *, view: str | None = None) -> Callable[[Any], Any]:
        """Register a page handler via decorator.

        Decorates a class (instantiated with no arguments at startup), a
        ``fn(request, response)`` function, or any object with ``process``.

        Args:
            name: Page name, served at ``<uri_prefix><name>``.
            view: Explicit view path; defaults to
                ``<view_root>/<name>.<view_ext>``.
        """

        def decorator(target: Any) -> Any:
            self.register(target, name, view=view)
            return target

        return decorator

    def register(self, handler: Any, name: str, *, view: str | None = None) -> None:
        """Queue *handler* for registration under *name*.

        Validation happens at freeze time, against the app's templates.
        """
        self._check_not_frozen()
        self._pending_pages.append(_PendingPage(name, handler, view, source="register"))

    def scan(self, package: str) -> None:
        """Register every ``@page`` handler found in *package* at freeze time."""
        self._check_not_frozen()
        self._scan_packages.append(package)

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware in front of the page dispatcher."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Compiled state --

    @property
    def registry(self) -> HandlerRegistry:
        """The frozen handler registry. Freezes the app if needed."""
        self._ensure_frozen()
        assert self._registry is not None
        return self._registry

    @property
    def dispatcher(self) -> PageDispatcher:
        """The page dispatcher. Freezes the app if needed."""
        self._ensure_frozen()
        assert self._dispatcher is not None
        return self._dispatcher

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._pipeline is not None

        await handle_request(
            scope,
            receive,
            send,
            pipeline=self._pipeline,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        The app freezes on startup, so configuration and registration
        errors are reported as ``lifespan.startup.failed`` and the server
        never begins serving with a partial registry.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    logger.error("Startup failed: %s", exc)
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock. Any error leaves
        the app unfrozen with no partially built state published.
        """
        config = self.config

        # 1. Templates and the view resolver
        env = self._custom_kida_env or create_environment(config)
        views = KidaViews(env)

        # 2. Register every page; the first failure aborts startup.
        # One instance per handler class, so wiring a class twice is a duplicate.
        registry = HandlerRegistry(views, view_root=config.view_root, view_ext=config.view_ext)
        instances: dict[type, PageHandler] = {}
        for pending in self._collect_pages():
            registry.register(self._declare(pending, instances))
        registry.freeze()

        if len(registry) == 0:
            logger.warning("No page handlers registered with the dispatcher")
        else:
            logger.info("Registered %d page handlers under %s", len(registry), config.uri_prefix)

        # 3. Dispatcher (validates prefix and miss policy)
        dispatcher = PageDispatcher(
            registry,
            views,
            uri_prefix=config.uri_prefix,
            index_page=config.index_page,
            on_miss=config.on_miss,
            miss_redirect=config.miss_redirect,
        )
        if config.index_page is not None and config.index_page not in registry:
            msg = f"index_page {config.index_page!r} is not a registered page"
            raise ConfigurationError(msg)

        # 4. Pipeline: user middleware -> pages -> static files -> 404
        middleware: list[Callable[..., Any]] = [*self._middleware_list, dispatcher]
        if config.static_dir is not None and Path(config.static_dir).is_dir():
            middleware.append(StaticFiles(config.static_dir, prefix=config.static_url))

        self._registry = registry
        self._dispatcher = dispatcher
        self._pipeline = build_pipeline(tuple(middleware))
        self._frozen = True

    def _collect_pages(self) -> list[_PendingPage]:
        """Explicit registrations first, then scanned packages in order."""
        pages = list(self._pending_pages)
        for package in self._scan_packages:
            pages.extend(
                _PendingPage(found.name, found.target, found.view, source=found.module)
                for found in scan_pages(package)
            )
        return pages

    def _declare(
        self, pending: _PendingPage, instances: dict[type, PageHandler]
    ) -> HandlerDeclaration:
        logger.debug("Declaring page %r from %s", pending.name, pending.source)
        view = pending.view
        if view is None:
            view = default_view_path(
                pending.name, view_root=self.config.view_root, view_ext=self.config.view_ext
            )
        target = pending.target
        if inspect.isclass(target):
            if target not in instances:
                instances[target] = as_handler(target)
            handler = instances[target]
        else:
            handler = as_handler(target)
        return HandlerDeclaration(name=pending.name, view=view, handler=handler)

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register pages, middleware, and error handlers before startup."
            )
            raise RuntimeError(msg)
