"""Capability scanners — produce the ordered descriptor list.

Three strategies share one interface (``scan() -> list[ComponentDescriptor]``):

- ``ManifestScanner`` reads a precomputed manifest, avoiding a walk of the
  whole namespace at startup.
- ``PackageScanner`` walks root packages (directories or zip archives)
  and describes every marked top-level class.
- ``StaticScanner`` takes an explicit list of classes.

Scanners never raise: an unreadable manifest or an unwalkable root logs
a warning and contributes no descriptors, and a single entry that fails
to load is skipped.
"""

from __future__ import annotations

import importlib
import importlib.resources
import logging
import pkgutil
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType
from typing import Protocol, runtime_checkable

from roost.discovery.descriptor import ComponentDescriptor, describe, resolve
from roost.discovery.manifest import parse_manifest
from roost.errors import DiscoveryError
from roost.markers import CONTROLLER_ATTR, SERVICE_ATTR

logger = logging.getLogger("roost.discovery")


@runtime_checkable
class Scanner(Protocol):
    """Anything that can produce an ordered list of descriptors."""

    def scan(self) -> list[ComponentDescriptor]: ...


def is_component(obj: object) -> bool:
    """True if *obj* is a class carrying a service or controller marker."""
    if not isinstance(obj, type):
        return False
    namespace = vars(obj)
    return SERVICE_ATTR in namespace or CONTROLLER_ATTR in namespace


class StaticScanner:
    """Describe an explicit, ordered list of component classes."""

    __slots__ = ("_components",)

    def __init__(self, *components: type) -> None:
        self._components = components

    def scan(self) -> list[ComponentDescriptor]:
        return [describe(cls) for cls in self._components]


class ManifestScanner:
    """Read descriptors from a manifest and resolve them to loaded types.

    *source* may be:

    - a ``Path`` or a filesystem path string,
    - a package resource ``"package:relative/path.json"``,
    - the manifest text itself (anything starting with ``[``).
    """

    __slots__ = ("_source",)

    def __init__(self, source: str | Path) -> None:
        self._source = source

    def scan(self) -> list[ComponentDescriptor]:
        try:
            text = self.read()
        except DiscoveryError as exc:
            logger.warning("%s; starting with no components", exc)
            return []

        descriptors: list[ComponentDescriptor] = []
        for entry in parse_manifest(text):
            try:
                descriptors.append(resolve(entry))
            except Exception as exc:
                logger.warning("Skipping %s: cannot load type (%s)", entry.name, exc)
        logger.info("Manifest declared %d component(s)", len(descriptors))
        return descriptors

    def read(self) -> str:
        """Return the manifest text.

        Raises ``DiscoveryError`` if the source cannot be read.
        """
        source = self._source
        if isinstance(source, str) and source.lstrip().startswith("["):
            return source

        try:
            if isinstance(source, str) and ":" in source and not Path(source).exists():
                package, _, resource = source.partition(":")
                return importlib.resources.files(package).joinpath(resource).read_text(
                    encoding="utf-8"
                )
            return Path(source).read_text(encoding="utf-8")
        except (OSError, ImportError, ValueError) as exc:
            msg = f"Cannot read manifest {source!s}: {exc}"
            raise DiscoveryError(msg) from exc


class PackageScanner:
    """Walk root packages and describe every marked top-level class.

    Classes are taken only from the module that defines them (re-exports
    are ignored) and nested classes are excluded. Order follows the roots
    as given, then ``pkgutil`` module order, then definition order.
    """

    __slots__ = ("_roots",)

    def __init__(self, *roots: str) -> None:
        self._roots = roots

    def scan(self) -> list[ComponentDescriptor]:
        descriptors: list[ComponentDescriptor] = []
        seen: set[str] = set()
        for root in self._roots:
            try:
                modules = list(self.walk(root))
            except DiscoveryError as exc:
                logger.warning("%s", exc)
                continue
            for module in modules:
                for cls in self.components_in(module):
                    descriptor = describe(cls)
                    if descriptor.name in seen:
                        continue
                    seen.add(descriptor.name)
                    descriptors.append(descriptor)
        logger.info(
            "Scanned %s: %d component(s)", ", ".join(self._roots) or "<none>", len(descriptors)
        )
        return descriptors

    def walk(self, root: str) -> Iterator[ModuleType]:
        """Import *root* and every module beneath it.

        Raises ``DiscoveryError`` if *root* itself cannot be imported.
        Submodules that fail to import are logged and skipped.
        """
        try:
            package = importlib.import_module(root)
        except Exception as exc:
            msg = f"Cannot walk {root!r}: {exc}"
            raise DiscoveryError(msg) from exc

        yield package
        search_path = getattr(package, "__path__", None)
        if search_path is None:
            return

        failed: set[str] = set()

        def on_error(name: str) -> None:
            # walk_packages re-imports subpackages to recurse into them
            if name not in failed:
                logger.warning("Skipping %s: package failed to import", name)

        for info in pkgutil.walk_packages(search_path, prefix=f"{root}.", onerror=on_error):
            try:
                yield importlib.import_module(info.name)
            except Exception as exc:
                failed.add(info.name)
                logger.warning("Skipping %s: %s", info.name, exc)

    @staticmethod
    def components_in(module: ModuleType) -> list[type]:
        """Marked classes defined at the top level of *module*."""
        return [
            obj
            for obj in list(vars(module).values())
            if is_component(obj)
            and obj.__module__ == module.__name__
            and "." not in obj.__qualname__
        ]
