"""Perch exception hierarchy.

Shared across the registry, dispatcher, app, and server pipeline so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when app or dispatcher configuration is invalid.

    Typically raised during ``App._freeze()`` at startup, which makes the
    ASGI lifespan report ``startup.failed`` instead of serving traffic.
    """


class RegistrationError(PerchError):
    """A page handler declaration was rejected by the registry.

    Registration errors are fatal for startup: the caller driving
    population should abort rather than serve a partial registry.
    """

    def __init__(self, message: str, *, name: str = "") -> None:
        super().__init__(message)
        self.name = name


class InvalidName(RegistrationError):  # noqa: N818
    """Page name is empty or does not match the page-name grammar."""


class InvalidViewPath(RegistrationError):  # noqa: N818
    """View path is empty or not a valid template location."""


class DuplicateHandler(RegistrationError):  # noqa: N818
    """The same handler object is already registered (under any name)."""


class DuplicateName(RegistrationError):  # noqa: N818
    """Another handler is already registered under this page name."""


class ViewResourceMissing(RegistrationError):  # noqa: N818
    """The view resolver could not locate the declared view."""


@dataclass(slots=True, eq=False)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher, middleware, or the terminal pipeline stage.
    The ASGI handler catches these and dispatches to the matching
    ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — nothing in the pipeline handled the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
