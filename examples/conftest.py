"""Shared pytest configuration for roost examples.

Each example directory holds an ``app.py`` exposing ``build_app(settings)``
next to its ``application.yaml``. The fixtures here load that YAML with
no user overlay and an empty environment, so ``~/.application.yaml`` and
variables like ``PORT`` on the test machine cannot change the outcome.
"""

import importlib.util
from pathlib import Path

import pytest

from roost import App, ConfigurationService


@pytest.fixture
def example_dir(request: pytest.FixtureRequest) -> Path:
    return Path(request.path).parent


@pytest.fixture
def example_settings(example_dir: Path, tmp_path: Path) -> ConfigurationService:
    """The example's own application.yaml, placeholders at their defaults."""
    return ConfigurationService.load(
        example_dir / "application.yaml",
        user_file=tmp_path / "no-user-config.yaml",
        environ={},
    )


@pytest.fixture
def example_app(example_dir: Path, example_settings: ConfigurationService) -> App:
    """A fresh App built by the sibling app.py from *example_settings*."""
    app_path = example_dir / "app.py"
    spec = importlib.util.spec_from_file_location(f"example_{example_dir.name}", app_path)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.build_app(example_settings)
