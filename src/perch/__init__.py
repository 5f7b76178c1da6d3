"""Perch — page-controller routing for ASGI apps.

Each page is a name, a handler, and a view template. Requests under the
configured URI prefix are dispatched by name to their handler, which fills
a response and picks the view to render.

Basic usage::

    from perch import App, AppConfig

    app = App(AppConfig(uri_prefix="/pages/", index_page="home"))

    @app.page("home")
    def home(request, response):
        response.context["title"] = "Welcome"
        return response.view

Serve ``app`` with any ASGI 3.0 server.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "HTTPError",
    "Middleware",
    "MissPolicy",
    "Next",
    "NotFound",
    "PageResponse",
    "PerchError",
    "RegistrationError",
    "Request",
    "Response",
    "current_page",
    "get_request",
    "page",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name in ("AppConfig", "MissPolicy"):
        from perch import config as _config

        return getattr(_config, name)

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name in ("PageResponse", "page"):
        from perch import pages as _pages

        return getattr(_pages, name)

    if name in ("Middleware", "Next"):
        from perch.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("current_page", "get_request"):
        from perch import context as _ctx

        return getattr(_ctx, name)

    if name in ("ConfigurationError", "HTTPError", "NotFound", "PerchError", "RegistrationError"):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
