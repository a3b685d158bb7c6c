"""Runtime context — the collaborators a running app shares.

Built once by the bootstrap sequence and passed explicitly: the registry
pre-registers it as a service, so any component can declare
``context: RuntimeContext = inject(RuntimeContext)``. Nothing in roost
is a process-wide singleton.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from roost.config import AppConfig, ConfigurationService
from roost.resources import ResourceLoader
from roost.static import StaticAssets

if TYPE_CHECKING:
    from roost.templating import Renderer


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Configuration, resources, rendering, and static assets for one app."""

    config: AppConfig
    settings: ConfigurationService
    resources: ResourceLoader
    renderer: Renderer | None = None
    static: StaticAssets | None = None

    @classmethod
    def build(
        cls,
        config: AppConfig,
        settings: ConfigurationService | None = None,
    ) -> RuntimeContext:
        """Assemble the default collaborators for *config*.

        The renderer is only created when the template directory exists,
        and static assets only when the static directory exists.
        """
        from roost.templating import Renderer, create_environment

        template_dir = Path(config.template_dir)
        renderer = Renderer(create_environment(config)) if template_dir.is_dir() else None

        static = None
        if config.static_dir is not None and Path(config.static_dir).is_dir():
            static = StaticAssets(config.static_dir, prefix=config.static_prefix)

        roots = [template_dir]
        if config.static_dir is not None:
            roots.append(Path(config.static_dir))
        return cls(
            config=config,
            settings=settings or ConfigurationService(),
            resources=ResourceLoader(*roots),
            renderer=renderer,
            static=static,
        )

    def render(self, template: str, values: dict[str, object] | None = None) -> str:
        """Render *template* with the configured renderer.

        Raises ``RuntimeError`` when no template directory was configured.
        """
        if self.renderer is None:
            msg = f"No template directory configured; cannot render {template!r}"
            raise RuntimeError(msg)
        return self.renderer.render(template, values)
