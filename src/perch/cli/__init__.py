"""Perch CLI — inspect and validate page registrations.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — page-controller routing for ASGI apps.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["debug", "info", "warning", "error"],
        help="Logging level for perch loggers (default: the app's config.log_level)",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch pages ------------------------------------------------------
    pages_parser = subparsers.add_parser("pages", help="List registered pages")
    pages_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- perch check ------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check", help="Validate page registrations and configuration"
    )
    check_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "pages":
        from perch.cli._pages import run_pages

        run_pages(args)
    elif args.command == "check":
        from perch.cli._check import run_check

        run_check(args)
