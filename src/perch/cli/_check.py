"""``perch check`` — validate page registrations.

Freezes the app exactly as startup would: every declaration is checked
(names, view paths, duplicates, view templates) along with the dispatcher
configuration. Exits with code 1 on the first failure.
"""

import argparse
import sys

from perch.cli._resolve import configure_logging, resolve_app
from perch.errors import PerchError


def run_check(args: argparse.Namespace) -> None:
    """Freeze ``args.app`` and report the outcome."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    configure_logging(app, args.log_level)

    try:
        registry = app.registry
    except PerchError as exc:
        print(f"FAILED: {type(exc).__name__}: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"OK: {len(registry)} page(s) registered under {app.config.uri_prefix}")
