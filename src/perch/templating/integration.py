"""Kida environment setup.

Creates a kida Environment from perch's AppConfig. The environment is
created once during ``App._freeze()`` and shared by the view resolver
used for registration checks and for rendering forwarded pages.
"""

from kida import ChoiceLoader, Environment, FileSystemLoader

from perch.config import AppConfig


def create_environment(config: AppConfig) -> Environment:
    """Create a kida Environment from app configuration.

    ``config.template_dir`` is searched first, then each of
    ``config.component_dirs`` in order.
    """
    loaders = [FileSystemLoader(str(config.template_dir))]
    loaders.extend(FileSystemLoader(str(d)) for d in config.component_dirs)

    return Environment(
        loader=ChoiceLoader(loaders),
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )
