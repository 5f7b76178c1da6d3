"""``perch pages`` — list registered pages.

Resolves an import string to a perch App, freezes it, and prints every
page with its URL, view, and handler.
"""

import argparse
import sys

from perch.cli._resolve import configure_logging, resolve_app
from perch.errors import PerchError


def run_pages(args: argparse.Namespace) -> None:
    """Print a table of NAME, URL, VIEW, and HANDLER for each page."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    configure_logging(app, args.log_level)

    try:
        registry = app.registry
        dispatcher = app.dispatcher
    except PerchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if len(registry) == 0:
        print("No pages registered.")
        return

    rows: list[tuple[str, str, str, str]] = []
    for decl in registry:
        name = decl.name
        if name == dispatcher.index_page:
            name = f"{name} (index)"
        rows.append((name, dispatcher.url_for(decl.name), decl.view, decl.handler_name))

    headers = ("NAME", "URL", "VIEW", "HANDLER")
    widths = [max(len(headers[i]), *(len(r[i]) for r in rows)) for i in range(3)]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"
    print(fmt.format(*headers))
    sep_len = sum(widths) + 6 + max(len(r[3]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
