"""Rendering collaborator backed by kida.

Handler operations call ``render(template, values)``; the dispatcher
never renders anything itself. The kida environment is created once
while the app bootstraps and is shared read-only afterwards.
"""

from collections.abc import Mapping
from typing import Any

from kida import Environment, FileSystemLoader

from roost.config import AppConfig


def create_environment(config: AppConfig) -> Environment:
    """Create a kida Environment from app configuration."""
    return Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )


class Renderer:
    """Render named templates or inline sources with a mapping of values.

    Usage::

        html = renderer.render("index.html", {"title": "Mortgage calculator"})
    """

    __slots__ = ("_env",)

    def __init__(self, env: Environment) -> None:
        self._env = env

    @property
    def env(self) -> Environment:
        return self._env

    def render(self, template: str, values: Mapping[str, Any] | None = None) -> str:
        """Render the template named *template*."""
        return self._env.get_template(template).render(dict(values or {}))

    def render_string(self, source: str, values: Mapping[str, Any] | None = None) -> str:
        """Render an inline template *source*."""
        return self._env.from_string(source).render(dict(values or {}))
