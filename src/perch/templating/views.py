"""View resolution — the collaborator behind registration checks and forwards.

The registry asks "does this view exist?" when a handler is registered,
and the dispatcher asks "render this view" when a handler forwards. Both
questions go to the same resolver so a view that passed registration is
the one that gets rendered.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from kida import Environment, TemplateNotFoundError


class ViewResolver(Protocol):
    """Anything that can locate and render view templates by path."""

    def exists(self, view: str) -> bool: ...

    def render(self, view: str, context: Mapping[str, Any]) -> str: ...


class KidaViews:
    """ViewResolver backed by a kida Environment.

    Existence is checked by loading the template through the environment's
    loader chain, so component directories and custom loaders count.
    """

    __slots__ = ("_env",)

    def __init__(self, env: Environment) -> None:
        self._env = env

    @property
    def env(self) -> Environment:
        return self._env

    def exists(self, view: str) -> bool:
        try:
            self._env.get_template(view)
        except TemplateNotFoundError:
            return False
        return True

    def render(self, view: str, context: Mapping[str, Any]) -> str:
        template = self._env.get_template(view)
        return template.render(dict(context))
