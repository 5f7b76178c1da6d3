"""App import resolution — resolves ``"module:attribute"`` strings to App instances.

Shared by ``perch pages`` and ``perch check``.
"""

import importlib
import logging

from perch.app import App


def resolve_app(import_string: str) -> App:
    """Resolve an import string to a perch App instance.

    Accepts ``"module:attribute"`` format. When the attribute portion is
    omitted, defaults to ``"app"`` (``"myapp"`` resolves to ``myapp.app``).
    A callable that is not an App is treated as a factory and called.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a perch ``App``.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "app"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a perch.App instance"
        raise TypeError(msg)

    return obj


def configure_logging(app: App, level: str | None) -> None:
    """Route ``perch.*`` log records to stderr at *level* or the app's ``log_level``."""
    logging.basicConfig(
        level=(level or app.config.log_level).upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
