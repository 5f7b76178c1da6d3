"""Page handler registry.

Single source of truth for which page names are servable and by what
handler. Every registration is validated up front so a mis-wired handler
fails at startup, not on its first request.

Lifecycle:
    Populated once during startup (``register`` calls are serialized by a
    lock), then frozen. Freezing publishes a read-only snapshot; lookups
    read it without locking and further registration is rejected.
"""

import logging
import threading
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from perch.errors import (
    DuplicateHandler,
    DuplicateName,
    InvalidName,
    InvalidViewPath,
    ViewResourceMissing,
)
from perch.pages.naming import default_view_path, is_valid_page_name, is_valid_view_path
from perch.pages.types import HandlerDeclaration, PageHandler, handler_identity
from perch.templating.views import ViewResolver

logger = logging.getLogger("perch.pages")


def _invalid_name(name: str) -> InvalidName:
    msg = f"Invalid page name {name!r}: use letters and digits, joined by single '-' or '_'"
    return InvalidName(msg, name=name)


class HandlerRegistry:
    """Maps page names to handler declarations.

    Usage::

        registry = HandlerRegistry(KidaViews(env))
        registry.declare("members", MembersPage())
        registry.freeze()
        registry.lookup("members")   # -> HandlerDeclaration
        registry.lookup("unknown")   # -> None

    Thread safety:
        ``register`` holds a lock across validation and insertion, so the
        uniqueness checks hold even if discovery runs in parallel.
        After ``freeze()`` the mapping is an immutable snapshot.
    """

    __slots__ = (
        "_by_name",
        "_frozen",
        "_handlers",
        "_lock",
        "_snapshot",
        "_view_ext",
        "_view_root",
        "_views",
    )

    def __init__(
        self,
        views: ViewResolver,
        *,
        view_root: str = "pages",
        view_ext: str = "html",
    ) -> None:
        self._views = views
        self._view_root = view_root
        self._view_ext = view_ext
        self._lock = threading.Lock()
        self._by_name: dict[str, HandlerDeclaration] = {}
        # handler identity -> page name, for duplicate detection and messages
        self._handlers: dict[int, str] = {}
        self._snapshot: Mapping[str, HandlerDeclaration] = MappingProxyType(self._by_name)
        self._frozen = False

    # -- Registration --

    def register(self, declaration: HandlerDeclaration) -> None:
        """Validate and install a declaration.

        Checks run in a fixed order: name grammar, view-path grammar,
        handler identity, name uniqueness, view existence. The first
        failing check raises and the registry is left untouched.

        Raises:
            InvalidName: Name empty or outside the page-name grammar.
            InvalidViewPath: View path empty or malformed.
            DuplicateHandler: This handler object is already registered.
            DuplicateName: The name is already taken.
            ViewResourceMissing: The view resolver cannot find the view.
            RuntimeError: The registry is frozen.
        """
        name = declaration.name
        if not is_valid_page_name(name):
            raise _invalid_name(name)
        if not is_valid_view_path(declaration.view):
            msg = f"Invalid view path {declaration.view!r} for page {name!r}"
            raise InvalidViewPath(msg, name=name)

        identity = handler_identity(declaration.handler)
        with self._lock:
            if self._frozen:
                msg = (
                    "Cannot register page handlers after the registry is frozen. "
                    "Register every page before the app starts serving requests."
                )
                raise RuntimeError(msg)
            if identity in self._handlers:
                msg = (
                    f"Handler {declaration.handler_name} is already registered "
                    f"under page name {self._handlers[identity]!r}"
                )
                raise DuplicateHandler(msg, name=name)
            if name in self._by_name:
                existing = self._by_name[name]
                msg = f"Page name {name!r} is already registered to {existing.handler_name}"
                raise DuplicateName(msg, name=name)
            if not self._views.exists(declaration.view):
                msg = f"View {declaration.view!r} for page {name!r} was not found"
                raise ViewResourceMissing(msg, name=name)

            self._by_name[name] = declaration
            self._handlers[identity] = name

        logger.info("Registered page %r: %s", name, declaration.handler_name)

    def declare(
        self,
        name: str,
        handler: PageHandler,
        *,
        view: str | None = None,
    ) -> HandlerDeclaration:
        """Register *handler* under *name*, defaulting the view by convention.

        Without an explicit *view*, the view is ``<view_root>/<name>.<view_ext>``.
        """
        if view is None:
            if not is_valid_page_name(name):
                raise _invalid_name(name)
            view = default_view_path(name, view_root=self._view_root, view_ext=self._view_ext)
        declaration = HandlerDeclaration(name=name, view=view, handler=handler)
        self.register(declaration)
        return declaration

    def freeze(self) -> None:
        """Stop accepting registrations. Idempotent."""
        with self._lock:
            if self._frozen:
                return
            self._snapshot = MappingProxyType(dict(self._by_name))
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- Lookup --

    def lookup(self, name: str) -> HandlerDeclaration | None:
        """Return the declaration registered under *name*, or None.

        A miss is the common case (unknown pages) and never raises.

        Raises:
            InvalidName: If *name* is empty.
        """
        if not name:
            msg = "Page name can't be empty"
            raise InvalidName(msg)
        return self._snapshot.get(name)

    def names(self) -> list[str]:
        """Registered page names, sorted."""
        return sorted(self._snapshot)

    def __contains__(self, name: object) -> bool:
        return name in self._snapshot

    def __iter__(self) -> Iterator[HandlerDeclaration]:
        return iter([self._snapshot[name] for name in sorted(self._snapshot)])

    def __len__(self) -> int:
        return len(self._snapshot)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"<HandlerRegistry {state} pages={self.names()!r}>"
