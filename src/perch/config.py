"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. Values are checked when the app freezes, not here,
so a config can be built before the templates or handlers exist.
"""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class MissPolicy(StrEnum):
    """What the dispatcher does when a well-formed page name is not registered."""

    PASS_THROUGH = "pass"
    """Hand the request to the next pipeline stage (static files, 404)."""

    NOT_FOUND = "not_found"
    """Raise ``NotFound`` so the app's 404 handling renders the response."""

    REDIRECT = "redirect"
    """Redirect the client to ``miss_redirect``."""


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    Every field but ``uri_prefix`` has a sensible default::

        config = AppConfig(uri_prefix="/pages/", index_page="home")
    """

    # Debugging
    debug: bool = False

    # Templates
    template_dir: str | Path = "templates"
    component_dirs: tuple[str | Path, ...] = ()  # Extra template roots (layouts, partials)
    autoescape: bool = True

    # Page views: <template_dir>/<view_root>/<page>.<view_ext>
    view_root: str = "pages"
    view_ext: str = "html"

    # Page routing
    uri_prefix: str = ""  # Required: begins and ends with "/", e.g. "/pages/"
    index_page: str | None = None  # Page served for the bare prefix; None passes through
    on_miss: MissPolicy = MissPolicy.PASS_THROUGH
    miss_redirect: str = "/"

    # Static files (pass-through stage behind the dispatcher)
    static_dir: str | Path | None = "static"
    static_url: str = "/static"

    # Logging (applied by the ``perch`` CLI)
    log_level: str = "info"
