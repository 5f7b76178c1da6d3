"""Page-name and view-path grammar.

A page name is one or more alphanumeric runs joined by single ``-`` or
``_`` separators: ``members``, ``news-archive`` and ``user_profile`` are
valid; ``-members``, ``members-``, ``a--b`` and ``mem bers`` are not.

The same grammar is used when registering handlers and when matching
request paths, so a registered name is always reachable by URL.
"""

import re

PAGE_NAME_PATTERN = r"[A-Za-z0-9]+(?:[-_][A-Za-z0-9]+)*"

_PAGE_NAME_RE = re.compile(PAGE_NAME_PATTERN)


def is_valid_page_name(name: str) -> bool:
    """Return True if *name* matches the page-name grammar."""
    if not name:
        return False
    return _PAGE_NAME_RE.fullmatch(name) is not None


def is_valid_view_path(path: str) -> bool:
    """Return True if *path* is a usable template name.

    View paths are relative to the template root: no leading ``/``, no
    backslashes, no empty, ``.`` or ``..`` segments, and the final
    segment carries a file extension (``pages/members.html``).
    """
    if not path or path.startswith("/") or "\\" in path:
        return False
    segments = path.split("/")
    if any(seg in ("", ".", "..") for seg in segments):
        return False
    stem, dot, ext = segments[-1].rpartition(".")
    return bool(dot and stem and ext)


def default_view_path(name: str, *, view_root: str = "pages", view_ext: str = "html") -> str:
    """Build the conventional view path for a page: ``<root>/<name>.<ext>``.

    The view root lives under the template directory, which is never
    served as static files, so views are only reachable through their page.
    """
    root = view_root.strip("/")
    ext = view_ext.lstrip(".")
    if root:
        return f"{root}/{name}.{ext}"
    return f"{name}.{ext}"
