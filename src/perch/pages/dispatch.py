"""Page dispatcher — routes ``<prefix><page-name>`` requests to page handlers.

Runs as a middleware. For each request it:

1. extracts a candidate page name from the path (prefix + page-name grammar);
2. looks the name up in the frozen registry;
3. invokes the handler inside a page scope that is released on every exit;
4. forwards to the returned view, or returns the response the handler
   finalized itself.

Requests outside the routed name space go to ``next`` untouched, without
a registry lookup.
"""

import logging

from perch._internal.invoke import invoke
from perch.config import MissPolicy
from perch.context import page_scope
from perch.errors import ConfigurationError, NotFound
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next
from perch.pages.naming import is_valid_page_name
from perch.pages.registry import HandlerRegistry
from perch.pages.response import PageResponse
from perch.pages.types import HandlerDeclaration
from perch.templating.views import ViewResolver

logger = logging.getLogger("perch.pages")


def check_uri_prefix(uri_prefix: str) -> str:
    """Return *uri_prefix* if it is usable, else raise ``ConfigurationError``."""
    if not uri_prefix:
        msg = "uri_prefix must be set (e.g. '/pages/')"
        raise ConfigurationError(msg)
    if not uri_prefix.startswith("/") or not uri_prefix.endswith("/"):
        msg = f"uri_prefix {uri_prefix!r} must begin and end with '/'"
        raise ConfigurationError(msg)
    return uri_prefix


class PageDispatcher:
    """Middleware that dispatches routed page requests to registered handlers.

    Usage::

        dispatcher = PageDispatcher(registry, views, uri_prefix="/pages/")
        app.add_middleware(dispatcher)

    Args:
        registry: Populated handler registry; frozen by the app at startup.
        views: Resolver used to render forwarded views.
        uri_prefix: Path prefix under which pages live; must begin and
            end with ``/``.
        index_page: Page served for the bare prefix. ``None`` passes the
            bare prefix through.
        on_miss: What to do when a well-formed name is not registered.
        miss_redirect: Redirect target for ``MissPolicy.REDIRECT``.

    Raises:
        ConfigurationError: If the prefix, index page, or miss policy
            settings are invalid.
    """

    __slots__ = ("_index_page", "_miss_redirect", "_on_miss", "_prefix", "_registry", "_views")

    def __init__(
        self,
        registry: HandlerRegistry,
        views: ViewResolver,
        *,
        uri_prefix: str,
        index_page: str | None = None,
        on_miss: MissPolicy = MissPolicy.PASS_THROUGH,
        miss_redirect: str = "/",
    ) -> None:
        self._prefix = check_uri_prefix(uri_prefix)
        if index_page is not None and not is_valid_page_name(index_page):
            msg = f"index_page {index_page!r} is not a valid page name"
            raise ConfigurationError(msg)
        try:
            on_miss = MissPolicy(on_miss)
        except ValueError:
            choices = [p.value for p in MissPolicy]
            msg = f"Unknown on_miss policy {on_miss!r}; expected one of {choices}"
            raise ConfigurationError(msg) from None
        if on_miss is MissPolicy.REDIRECT and not miss_redirect:
            msg = "miss_redirect must be set when on_miss is 'redirect'"
            raise ConfigurationError(msg)

        self._registry = registry
        self._views = views
        self._index_page = index_page
        self._on_miss = on_miss
        self._miss_redirect = miss_redirect

    @property
    def uri_prefix(self) -> str:
        return self._prefix

    @property
    def index_page(self) -> str | None:
        return self._index_page

    def url_for(self, name: str) -> str:
        """The URL a page is served at."""
        if name == self._index_page:
            return self._prefix
        return self._prefix + name

    def match(self, path: str) -> str | None:
        """Extract the candidate page name from *path*, or None to pass through.

        The bare prefix resolves to ``index_page`` (None when unset). Any
        other path must be the prefix followed by a single valid page name;
        trailing slashes, nested segments, and stray characters don't match.
        """
        if path == self._prefix:
            return self._index_page
        if not path.startswith(self._prefix):
            return None
        name = path[len(self._prefix) :]
        if not is_valid_page_name(name):
            return None
        return name

    async def __call__(self, request: Request, next: Next) -> Response:
        name = self.match(request.path)
        if name is None:
            return await next(request)

        declaration = self._registry.lookup(name)
        if declaration is None:
            return await self._handle_miss(request, next, name)

        return await self._dispatch(declaration, request)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _dispatch(self, declaration: HandlerDeclaration, request: Request) -> Response:
        """Run one handler invocation and turn its outcome into a Response."""
        response = PageResponse(declaration.view)

        with page_scope(request, response, declaration):
            view = await invoke(declaration.handler.process, request, response)

        if response.finalized:
            if view:
                logger.warning(
                    "Page %r finalized its response and also returned view %r; "
                    "the finalized response is sent",
                    declaration.name,
                    view,
                )
            return response.to_response()

        if not view:
            logger.debug("Page %r returned no view; sending response as built", declaration.name)
            return response.to_response()

        context = dict(response.context)
        context.setdefault("page", declaration.name)
        context.setdefault("request", request)
        body = self._views.render(view, context)
        return response.render(body)

    async def _handle_miss(self, request: Request, next: Next, name: str) -> Response:
        logger.debug("No page registered for %r (%s)", name, self._on_miss.value)
        if self._on_miss is MissPolicy.NOT_FOUND:
            raise NotFound(f"Page {name!r} not found")
        if self._on_miss is MissPolicy.REDIRECT:
            return Response.redirect(self._miss_redirect)
        return await next(request)
