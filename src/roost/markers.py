"""Capability markers — declarative tags read by discovery.

Markers are plain decorators. They attach a frozen record to the class
or function at import time and return it unchanged, so discovery only
needs to import a module to read them; nothing is instantiated.

Usage::

    from roost import controller, get, inject, service

    @service
    class LayoutService:
        def home(self) -> str: ...

    @controller("/pages")
    class PageController:
        layout: LayoutService = inject(LayoutService)

        @get("/{slug}")
        def page(self, params: dict[str, str]) -> str:
            return self.layout.home()
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, overload

SERVICE_ATTR = "__roost_service__"
CONTROLLER_ATTR = "__roost_controller__"
ROUTE_ATTR = "__roost_route__"


@dataclass(frozen=True, slots=True)
class ServiceMarker:
    """Marks a class as a singleton service."""


@dataclass(frozen=True, slots=True)
class ControllerMarker:
    """Marks a class as a controller mounted under *base_path*."""

    base_path: str = ""


@dataclass(frozen=True, slots=True)
class RouteMarker:
    """Marks a method as an operation answering *method* on *path*."""

    method: str = "GET"
    path: str = "/"


def type_identity(capability: type | str) -> str:
    """Return the qualified type identity used as the registry key.

    Strings are taken as already-qualified names (``"pkg.mod.Type"``),
    which lets a slot reference a service without importing it.
    """
    if isinstance(capability, str):
        return capability
    return f"{capability.__module__}.{capability.__qualname__}"


class Slot:
    """An injection point declared as a class attribute.

    Reading an unbound slot from an instance gives ``None``. The registry
    binds a slot by setting the attribute on the instance, which shadows
    this (non-data) descriptor.
    """

    __slots__ = ("capability", "name")

    def __init__(self, capability: type | str) -> None:
        self.capability = capability
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: object, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return None

    def __repr__(self) -> str:
        return f"Slot({self.name!r}, {type_identity(self.capability)!r})"


def inject(capability: type | str) -> Any:
    """Declare an injection slot for the service *capability*.

    Typed as ``Any`` so ``layout: LayoutService = inject(LayoutService)``
    keeps its annotation for type checkers.
    """
    return Slot(capability)


def service[T: type](cls: T) -> T:
    """Class decorator: register *cls* as a singleton service."""
    setattr(cls, SERVICE_ATTR, ServiceMarker())
    return cls


@overload
def controller[T: type](base_path: T, /) -> T: ...
@overload
def controller[T: type](base_path: str = "", /) -> Callable[[T], T]: ...
def controller(base_path: Any = "", /) -> Any:
    """Class decorator: register a controller under *base_path*.

    Works bare (``@controller``) or with a base path
    (``@controller("/api")``).
    """
    if isinstance(base_path, type):
        setattr(base_path, CONTROLLER_ATTR, ControllerMarker())
        return base_path

    def decorator(cls: type) -> type:
        setattr(cls, CONTROLLER_ATTR, ControllerMarker(base_path=base_path))
        return cls

    return decorator


def route(method: str = "GET", path: str = "/") -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Method decorator: declare an operation for *method* and *path*."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        setattr(func, ROUTE_ATTR, RouteMarker(method=method.upper(), path=path))
        return func

    return decorator


def get(path: str = "/") -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Shorthand for ``@route("GET", path)``."""
    return route("GET", path)


def post(path: str = "/") -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Shorthand for ``@route("POST", path)``."""
    return route("POST", path)


def put(path: str = "/") -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Shorthand for ``@route("PUT", path)``."""
    return route("PUT", path)


def delete(path: str = "/") -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Shorthand for ``@route("DELETE", path)``."""
    return route("DELETE", path)
