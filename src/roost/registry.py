"""Component registry — services, injection, controllers, routes.

Bootstrap runs three phases over the descriptor list, single-threaded
and in order:

1. Instantiate every service (one instance per type identity).
2. Bind declared injection slots on every service.
3. Instantiate every controller, bind its slots, and compile one route
   per declared operation into the route table.

Every service exists and is wired before the first controller is
constructed. Failures are isolated per descriptor and logged; nothing
in bootstrap is fatal. A slot whose service is not registered is left
unset (``None``) and recorded in ``injection_misses``.

Once bootstrap completes the route table is frozen and neither it nor
the service map changes again.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from roost.discovery.descriptor import ComponentDescriptor, InjectionPoint, load_type
from roost.errors import InjectionMiss, InstantiationError
from roost.markers import type_identity
from roost.routing.compiler import compile_route
from roost.routing.route import Route
from roost.routing.table import RouteTable

logger = logging.getLogger("roost.registry")


class ComponentRegistry:
    """Owns singleton services and controllers; fills the route table.

    Usage::

        registry = ComponentRegistry(RouteTable(), provided=[context])
        registry.bootstrap(scanner.scan())
        layout = registry.get(LayoutService)

    *provided* instances are registered as services before phase 1,
    keyed by their own type.
    """

    __slots__ = (
        "_bootstrapped",
        "_controllers",
        "_injected",
        "_route_table",
        "_services",
        "injection_misses",
    )

    def __init__(self, route_table: RouteTable | None = None, *, provided: Iterable[object] = ()) -> None:
        self._route_table = route_table if route_table is not None else RouteTable()
        self._services: dict[str, Any] = {}
        self._controllers: list[Any] = []
        # Identities of services that went through phase 2 (provided ones don't)
        self._injected: set[str] = set()
        self._bootstrapped = False
        self.injection_misses: list[InjectionMiss] = []
        for instance in provided:
            self._services[type_identity(type(instance))] = instance

    # -- Bootstrap --

    def bootstrap(self, descriptors: Sequence[ComponentDescriptor]) -> None:
        """Run all three phases, then freeze the route table.

        Raises ``RuntimeError`` if called twice.
        """
        if self._bootstrapped:
            msg = "Registry is already bootstrapped."
            raise RuntimeError(msg)

        services = [d for d in descriptors if d.is_service]
        controllers = [d for d in descriptors if d.is_controller]

        for descriptor in services:
            self.instantiate_service(descriptor)
        for descriptor in services:
            instance = self._services.get(descriptor.name)
            if instance is not None and descriptor.name not in self._injected:
                self._injected.add(descriptor.name)
                self.inject(instance, descriptor.injection_points, owner=descriptor.name)
        for descriptor in controllers:
            self.register_controller(descriptor)

        self._route_table.freeze()
        self._bootstrapped = True
        logger.info(
            "Registered %d service(s), %d controller(s), %d route(s)",
            len(self._services),
            len(self._controllers),
            len(self._route_table),
        )

    def instantiate_service(self, descriptor: ComponentDescriptor) -> Any | None:
        """Phase 1 for one descriptor. Returns the instance, or ``None`` on failure."""
        existing = self._services.get(descriptor.name)
        if existing is not None:
            return existing
        try:
            instance = self.construct(descriptor)
        except InstantiationError as exc:
            logger.error("%s", exc)
            return None
        self._services[descriptor.name] = instance
        logger.info("Registering service: %s", descriptor.name)
        return instance

    def inject(
        self,
        instance: Any,
        injection_points: Iterable[InjectionPoint],
        *,
        owner: str,
    ) -> None:
        """Phase 2: bind each slot to the registered service of its capability.

        Misses are logged, recorded, and leave the slot unset.
        """
        for point in injection_points:
            service = self._services.get(point.capability)
            if service is None:
                miss = InjectionMiss(owner, point.slot, point.capability)
                self.injection_misses.append(miss)
                logger.warning("%s; slot left unset", miss)
                continue
            try:
                setattr(instance, point.slot, service)
            except (AttributeError, TypeError) as exc:
                logger.error("Cannot bind %s.%s: %s", owner, point.slot, exc)
                continue
            logger.debug("Injected %s into %s.%s", point.capability, owner, point.slot)

    def register_controller(self, descriptor: ComponentDescriptor) -> list[Route]:
        """Phase 3 for one descriptor: construct, inject, compile routes.

        Routes are only added once every operation has compiled, so a
        controller contributes all of its routes or none.
        """
        try:
            controller = self.construct(descriptor)
        except InstantiationError as exc:
            logger.error("%s", exc)
            return []
        logger.info("Registering controller: %s", descriptor.name)
        self.inject(controller, descriptor.injection_points, owner=descriptor.name)

        base_path = descriptor.base_path or ""
        try:
            routes = [compile_route(base_path, op, controller) for op in descriptor.operations]
        except Exception:
            logger.exception("Cannot compile routes for %s", descriptor.name)
            return []

        self._controllers.append(controller)
        for route in routes:
            self._route_table.add(route)
            logger.info(
                "Registering route: %s %s -> %s.%s()",
                route.method,
                route.path,
                descriptor.name,
                route.operation.attr,
            )
        return routes

    @staticmethod
    def construct(descriptor: ComponentDescriptor) -> Any:
        """Load the descriptor's type if needed and call its no-argument constructor.

        Raises ``InstantiationError`` on any failure.
        """
        try:
            cls = descriptor.type or load_type(descriptor.name)
            return cls()
        except Exception as exc:
            raise InstantiationError(descriptor.name, f"{type(exc).__name__}: {exc}") from exc

    # -- Lookup --

    def get(self, capability: type | str) -> Any | None:
        """The registered service for *capability*, or ``None``."""
        return self._services.get(type_identity(capability))

    def __contains__(self, capability: object) -> bool:
        if not isinstance(capability, (type, str)):
            return False
        return type_identity(capability) in self._services

    @property
    def services(self) -> dict[str, Any]:
        """A copy of the service map, keyed by type identity."""
        return dict(self._services)

    @property
    def controllers(self) -> tuple[Any, ...]:
        return tuple(self._controllers)

    @property
    def route_table(self) -> RouteTable:
        return self._route_table

    @property
    def bootstrapped(self) -> bool:
        return self._bootstrapped
