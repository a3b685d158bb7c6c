"""Roost application class.

Collects discovery sources during setup. Frozen at runtime when
``app.run()`` or ``__call__()`` is first invoked: components are
scanned, the registry bootstraps, and the route table is sealed.
"""

import logging
import threading
import time
from collections.abc import Sequence
from pathlib import Path

from roost._internal.asgi import Receive, Scope, Send
from roost.config import AppConfig, ConfigurationService
from roost.context import RuntimeContext
from roost.discovery.descriptor import ComponentDescriptor
from roost.discovery.scanner import ManifestScanner, PackageScanner, Scanner, StaticScanner
from roost.registry import ComponentRegistry
from roost.routing.route import Route
from roost.routing.table import RouteTable
from roost.server.dispatcher import Dispatcher
from roost.server.handler import handle_request

logger = logging.getLogger("roost.server")


class App:
    """The roost application.

    Usage::

        app = App(packages=["mortgage"])
        app.run()

    Components come from any mix of *packages* (import-time scanning),
    a *manifest* (JSON descriptor list, falling back to
    ``config.manifest``), explicit *components*, or a custom *scanner*.
    Descriptors are merged in that order; the first descriptor for a
    given name wins.

    Thread safety:
        The freeze transition uses a Lock + double-check so exactly one
        thread bootstraps the app, even when several ASGI workers see
        their first request at the same time.
    """

    __slots__ = (
        "_components",
        "_context",
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_manifest",
        "_packages",
        "_registry",
        "_scanner",
        "config",
        "settings",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        packages: Sequence[str] = (),
        manifest: str | Path | None = None,
        components: Sequence[type] = (),
        scanner: Scanner | None = None,
        settings: ConfigurationService | None = None,
    ) -> None:
        self.settings: ConfigurationService = settings or ConfigurationService()
        if config is None:
            config = AppConfig.from_provider(self.settings) if settings is not None else AppConfig()
        self.config: AppConfig = config
        self._packages: tuple[str, ...] = tuple(packages)
        self._manifest: str | Path | None = manifest if manifest is not None else config.manifest
        self._components: tuple[type, ...] = tuple(components)
        self._scanner: Scanner | None = scanner
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._context: RuntimeContext | None = None
        self._registry: ComponentRegistry | None = None
        self._dispatcher: Dispatcher | None = None

    @classmethod
    def from_settings(
        cls,
        source: str | Path | None = None,
        *,
        packages: Sequence[str] = (),
        manifest: str | Path | None = None,
    ) -> App:
        """Load ``application.yaml`` (or *source*) and build an app from it."""
        settings = ConfigurationService.load(source)
        return cls(
            AppConfig.from_provider(settings),
            packages=packages,
            manifest=manifest,
            settings=settings,
        )

    # -- Introspection --

    @property
    def routes(self) -> tuple[Route, ...]:
        """The compiled route table, in match order. Freezes the app."""
        self._ensure_frozen()
        assert self._registry is not None
        return self._registry.route_table.routes

    @property
    def registry(self) -> ComponentRegistry:
        self._ensure_frozen()
        assert self._registry is not None
        return self._registry

    @property
    def context(self) -> RuntimeContext:
        self._ensure_frozen()
        assert self._context is not None
        return self._context

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Bootstrap the app and serve it with pounce.

        Args:
            host: Override bind host.
            port: Override bind port (defaults to ``config.port``).
        """
        self._ensure_frozen()

        from roost.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes
        to the dispatcher.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        assert self._dispatcher is not None

        await handle_request(scope, receive, send, dispatcher=self._dispatcher)

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Bootstraps at startup, before the first HTTP request arrives.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def scanners(self) -> list[Scanner]:
        """The discovery strategies this app was configured with, in merge order."""
        scanners: list[Scanner] = []
        if self._packages:
            scanners.append(PackageScanner(*self._packages))
        if self._manifest is not None:
            scanners.append(ManifestScanner(self._manifest))
        if self._components:
            scanners.append(StaticScanner(*self._components))
        if self._scanner is not None:
            scanners.append(self._scanner)
        return scanners

    def scan(self) -> list[ComponentDescriptor]:
        seen: set[str] = set()
        descriptors: list[ComponentDescriptor] = []
        for scanner in self.scanners():
            for descriptor in scanner.scan():
                if descriptor.name in seen:
                    continue
                seen.add(descriptor.name)
                descriptors.append(descriptor)
        return descriptors

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Scan, bootstrap, and build the dispatcher.

        MUST only be called while holding _freeze_lock.
        """
        started = time.perf_counter()

        context = RuntimeContext.build(self.config, self.settings)
        registry = ComponentRegistry(RouteTable(), provided=[context])
        registry.bootstrap(self.scan())

        self._context = context
        self._registry = registry
        self._dispatcher = Dispatcher(
            registry.route_table,
            static=context.static,
            expose_errors=self.config.expose_errors,
        )
        self._frozen = True

        logger.info(
            "Started application in %.1f ms (%d route(s))",
            (time.perf_counter() - started) * 1000,
            len(registry.route_table),
        )
