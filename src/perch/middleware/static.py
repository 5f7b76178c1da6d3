"""Static file serving middleware.

Sits behind the page dispatcher: requests the dispatcher passes through
(stylesheets, scripts, images under the static URL) are served from a
directory. Anything else falls through to the next stage.
"""

import logging
import mimetypes
from pathlib import Path

from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next

logger = logging.getLogger("perch.server")


class StaticFiles:
    """Serve files from *directory* for GET/HEAD requests under *prefix*.

    Resolves symlinks and refuses paths that escape the directory.
    Directories and missing files fall through to ``next``.

    Usage::

        app.add_middleware(StaticFiles("./static", prefix="/static"))
    """

    __slots__ = ("_cache_control", "_directory", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/static",
        *,
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._prefix = "/" + prefix.strip("/")
        self._cache_control = cache_control

    async def __call__(self, request: Request, next: Next) -> Response:
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        relative = self._relative_path(request.path)
        if not relative:
            return await next(request)

        file_path = (self._directory / relative).resolve()
        if not file_path.is_relative_to(self._directory):
            logger.debug("Refusing static path outside %s: %s", self._directory, request.path)
            return Response(body="Forbidden", status=403, content_type="text/plain; charset=utf-8")
        if not file_path.is_file():
            return await next(request)

        content_type, _ = mimetypes.guess_type(file_path.name)
        body = file_path.read_bytes()
        return Response(
            body=body,
            content_type=content_type or "application/octet-stream",
        ).with_header("Cache-Control", self._cache_control)

    def _relative_path(self, path: str) -> str | None:
        """Path below the prefix, or None if *path* isn't under it."""
        if self._prefix == "/":
            return path.lstrip("/") or None
        if not path.startswith(self._prefix + "/"):
            return None
        return path[len(self._prefix) + 1 :] or None
