"""Application configuration.

Two layers:

- ``ConfigurationService`` — the configuration provider. Loads
  ``application.yaml``, flattens nested keys to dotted names
  (``server.port``), overlays ``~/.application.yaml`` when present, and
  expands ``{ENV_VAR:default}`` placeholders from the environment.
- ``AppConfig`` — a frozen dataclass the runtime reads. Build it directly
  or from a provider with ``AppConfig.from_provider()``.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from roost.errors import ConfigurationError

logger = logging.getLogger("roost.config")

CONFIG_FILE = "application.yaml"
USER_CONFIG_FILE = ".application.yaml"

# {NAME} or {NAME:default}
ENV_VAR_RE = re.compile(r"\{([^:{}]+)(?::([^{}]*))?\}")


def expand_env(value: str, environ: Mapping[str, str] | None = None) -> str:
    """Replace ``{NAME:default}`` placeholders with environment values.

    An unset or empty variable falls back to the default, or ``""``.
    """
    env = os.environ if environ is None else environ

    def substitute(found: re.Match[str]) -> str:
        env_value = env.get(found.group(1).strip())
        if env_value:
            return env_value
        return found.group(2) if found.group(2) is not None else ""

    return ENV_VAR_RE.sub(substitute, value)


def flatten(data: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten nested mappings into ``{"a.b.c": "value"}``.

    Scalars are stored as strings; YAML booleans become ``"true"``/``"false"``.
    ``None`` values are skipped.
    """
    flat: dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(flatten(value, prefix=f"{full_key}."))
        elif value is None:
            continue
        elif isinstance(value, bool):
            flat[full_key] = "true" if value else "false"
        else:
            flat[full_key] = str(value)
    return flat


class ConfigurationService:
    """Flat, dotted-key configuration provider.

    Usage::

        config = ConfigurationService.load("config/application.yaml")
        port = config.get_int("server.port")
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    # -- Loading --

    @classmethod
    def load(
        cls,
        source: str | Path | None = None,
        *,
        user_file: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> ConfigurationService:
        """Load defaults from *source*, then overlay the user file.

        *source* is a filesystem path or a package resource
        (``"package:application.yaml"``). When omitted, ``application.yaml``
        in the working directory is used if it exists.

        *user_file* defaults to ``~/.application.yaml``. A user file that
        cannot be read is logged and ignored.

        Raises ``ConfigurationError`` if *source* is given but cannot be
        read or parsed.
        """
        service = cls()
        if source is not None:
            service.update(_read_source(source), environ=environ)
        elif Path(CONFIG_FILE).is_file():
            service.update(_read_source(CONFIG_FILE), environ=environ)

        user_path = Path(user_file) if user_file is not None else Path.home() / USER_CONFIG_FILE
        if user_path.is_file():
            try:
                service.update(user_path.read_text(encoding="utf-8"), environ=environ)
            except (OSError, ConfigurationError) as exc:
                logger.warning("Could not load user configuration %s: %s", user_path, exc)
        return service

    def update(self, text: str, *, environ: Mapping[str, str] | None = None) -> None:
        """Parse YAML *text* and merge it over the current values."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            msg = f"Invalid configuration: {exc}"
            raise ConfigurationError(msg) from exc
        if data is None:
            return
        if not isinstance(data, Mapping):
            msg = "Configuration root must be a mapping"
            raise ConfigurationError(msg)
        for key, value in flatten(data).items():
            self._values[key] = expand_env(value, environ)

    # -- Lookup --

    def get_value(self, key: str) -> str:
        """The value for *key*, or ``""`` when missing."""
        return self._values.get(key, "")

    def get_int(self, key: str) -> int:
        """The value for *key* as an int, or ``0`` when missing or not numeric."""
        value = self._values.get(key)
        if value is None:
            return 0
        try:
            return int(value)
        except ValueError:
            return 0

    def get_bool(self, key: str) -> bool:
        """The value for *key* as a bool; only ``true`` (any case) is true."""
        return self._values.get(key, "").strip().lower() == "true"

    def all(self) -> dict[str, str]:
        """A copy of every key/value pair."""
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __repr__(self) -> str:
        return f"ConfigurationService({len(self._values)} keys)"


def _read_source(source: str | Path) -> str:
    try:
        if isinstance(source, str) and ":" in source and not Path(source).exists():
            package, _, resource = source.partition(":")
            return resources.files(package).joinpath(resource).read_text(encoding="utf-8")
        return Path(source).read_text(encoding="utf-8")
    except (OSError, ImportError) as exc:
        msg = f"Cannot read configuration {source!s}: {exc}"
        raise ConfigurationError(msg) from exc


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=3000, static_dir="public")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Discovery
    manifest: str | None = None

    # Static assets
    static_dir: str | Path | None = "static"
    static_prefix: str = "/static"

    # Templates
    template_dir: str | Path = "templates"
    autoescape: bool = True

    # Include the failure text in 500 bodies
    expose_errors: bool = True

    @classmethod
    def from_provider(cls, provider: ConfigurationService) -> AppConfig:
        """Build an AppConfig from dotted provider keys, keeping defaults for gaps.

        Keys read: ``server.host``, ``server.port``, ``server.isProduction``,
        ``server.exposeErrors``, ``app.manifest``, ``static.dir``,
        ``static.prefix``, ``templates.dir``.
        """
        defaults = cls()
        production = provider.get_bool("server.isProduction")
        expose = (
            provider.get_bool("server.exposeErrors")
            if "server.exposeErrors" in provider
            else defaults.expose_errors
        )
        return cls(
            host=provider.get_value("server.host") or defaults.host,
            port=provider.get_int("server.port") or defaults.port,
            debug=not production if "server.isProduction" in provider else defaults.debug,
            manifest=provider.get_value("app.manifest") or defaults.manifest,
            static_dir=provider.get_value("static.dir") or defaults.static_dir,
            static_prefix=provider.get_value("static.prefix") or defaults.static_prefix,
            template_dir=provider.get_value("templates.dir") or defaults.template_dir,
            expose_errors=expose,
        )
