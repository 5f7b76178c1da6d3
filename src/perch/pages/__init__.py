"""Page-controller routing: one name, one handler, one view.

A page is a handler object paired with a view template, served at
``<uri_prefix><name>``::

    @app.page("members")
    class MembersPage:
        def process(self, request, response):
            response.context["members"] = load_members()
            return response.view     # render pages/members.html

Conventions:

    templates/
      pages/
        members.html       # view for /pages/members (default convention)
        news-archive.html  # view for /pages/news-archive

Handlers return a view path to render it, or finalize the response
themselves (``response.redirect(...)``, ``response.error(...)``) and
return ``None``. Paths outside the prefix, or that aren't a single valid
page name, pass through to the rest of the pipeline.
"""

from perch.pages.discovery import DiscoveredPage, FunctionHandler, as_handler, page, scan_pages
from perch.pages.dispatch import PageDispatcher
from perch.pages.naming import default_view_path, is_valid_page_name, is_valid_view_path
from perch.pages.registry import HandlerRegistry
from perch.pages.response import PageResponse
from perch.pages.types import HandlerDeclaration, PageHandler

__all__ = [
    "DiscoveredPage",
    "FunctionHandler",
    "HandlerDeclaration",
    "HandlerRegistry",
    "PageDispatcher",
    "PageHandler",
    "PageResponse",
    "as_handler",
    "default_view_path",
    "is_valid_page_name",
    "is_valid_view_path",
    "page",
    "scan_pages",
]
