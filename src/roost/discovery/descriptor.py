"""Component descriptors.

A ``ComponentDescriptor`` is the parsed record of one discoverable type:
its identity, its capability flags, its injection points, and its
declared operations. Descriptors are frozen; resolving one against its
loaded type returns a new descriptor.
"""

from __future__ import annotations

import enum
import importlib
import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, get_origin

from roost.http.request import Request
from roost.markers import (
    CONTROLLER_ATTR,
    ROUTE_ATTR,
    SERVICE_ATTR,
    ControllerMarker,
    RouteMarker,
    Slot,
    type_identity,
)


class ParamShape(enum.Enum):
    """What an operation parameter asks the dispatcher for."""

    EXCHANGE = "exchange"
    PARAMS = "params"
    TEXT = "text"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ReflectionFlags:
    """Constructor/method visibility flags carried by manifest entries."""

    all_declared_constructors: bool = False
    all_public_constructors: bool = False
    all_declared_methods: bool = False
    all_public_methods: bool = False
    all_private_methods: bool = False


@dataclass(frozen=True, slots=True)
class InjectionPoint:
    """A declared dependency: bind the service *capability* into *slot*."""

    slot: str
    capability: str


@dataclass(frozen=True, slots=True)
class Operation:
    """A declared route operation on a controller.

    ``attr`` is the method name on the controller; ``params`` lists each
    parameter (after ``self``) with the shape the dispatcher supplies.
    """

    method: str
    path: str
    attr: str
    params: tuple[tuple[str, ParamShape], ...] = ()


@dataclass(frozen=True, slots=True)
class ComponentDescriptor:
    """One discovered component.

    ``base_path`` is ``None`` for anything that is not a controller.
    ``type`` is ``None`` until the descriptor is resolved.
    """

    name: str
    type: type | None = None
    is_service: bool = False
    base_path: str | None = None
    injection_points: tuple[InjectionPoint, ...] = ()
    operations: tuple[Operation, ...] = ()
    flags: ReflectionFlags = field(default_factory=ReflectionFlags)
    fields: tuple[str, ...] = ()

    @property
    def is_controller(self) -> bool:
        return self.base_path is not None

    @property
    def is_resolved(self) -> bool:
        return self.type is not None


def param_shape(param: inspect.Parameter) -> ParamShape:
    """Classify one operation parameter by annotation, then by name."""
    annotation = param.annotation
    if annotation is inspect.Parameter.empty:
        if param.name in ("request", "exchange"):
            return ParamShape.EXCHANGE
        if param.name == "params":
            return ParamShape.PARAMS
        return ParamShape.UNKNOWN

    if annotation is Request:
        return ParamShape.EXCHANGE
    origin = get_origin(annotation) or annotation
    if isinstance(origin, type) and issubclass(origin, Mapping):
        return ParamShape.PARAMS
    if annotation is str:
        return ParamShape.TEXT
    return ParamShape.UNKNOWN


def _signature(func: Callable[..., Any]) -> inspect.Signature:
    try:
        return inspect.signature(func, eval_str=True)
    except NameError:
        # Unresolvable forward reference: classify by name only
        return inspect.signature(func)


def operation_for(attr: str, func: Callable[..., Any], marker: RouteMarker) -> Operation:
    """Build an ``Operation`` from a marked function."""
    params = list(_signature(func).parameters.values())[1:]  # drop self
    shapes = tuple(
        (p.name, param_shape(p))
        for p in params
        if p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    )
    return Operation(method=marker.method, path=marker.path, attr=attr, params=shapes)


def describe(cls: type) -> ComponentDescriptor:
    """Read the capability markers declared directly on *cls*.

    Only the class's own namespace is inspected, so markers are not
    inherited by subclasses. Operations and slots keep definition order.
    """
    namespace = vars(cls)
    controller_marker: ControllerMarker | None = namespace.get(CONTROLLER_ATTR)

    slots: list[InjectionPoint] = []
    operations: list[Operation] = []
    for attr, value in namespace.items():
        if isinstance(value, Slot):
            slots.append(InjectionPoint(slot=attr, capability=type_identity(value.capability)))
            continue
        marker = getattr(value, ROUTE_ATTR, None)
        if isinstance(marker, RouteMarker) and callable(value):
            operations.append(operation_for(attr, value, marker))

    return ComponentDescriptor(
        name=type_identity(cls),
        type=cls,
        is_service=SERVICE_ATTR in namespace,
        base_path=controller_marker.base_path if controller_marker is not None else None,
        injection_points=tuple(slots),
        operations=tuple(operations) if controller_marker is not None else (),
        fields=tuple(slot.slot for slot in slots),
    )


def load_type(name: str) -> type:
    """Import a type from its qualified identity (``pkg.module.Outer.Inner``).

    Tries the longest importable module prefix first, then walks the
    remaining attributes.

    Raises ``ImportError`` if no prefix imports, ``AttributeError`` if the
    attribute path does not exist, ``TypeError`` if it is not a class.
    """
    parts = name.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            obj: Any = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            # Only keep searching if the missing module is the one we asked for
            if exc.name is not None and not module_name.startswith(exc.name):
                raise
            continue
        for attr in parts[split:]:
            obj = getattr(obj, attr)
        if not isinstance(obj, type):
            msg = f"{name} is not a class"
            raise TypeError(msg)
        return obj

    msg = f"No module found for {name!r}"
    raise ImportError(msg)


def resolve(descriptor: ComponentDescriptor) -> ComponentDescriptor:
    """Load the descriptor's type and fill in its capabilities.

    Manifest metadata (flags, declared fields) is kept. When the manifest
    lists fields, only slots named there are wired.
    """
    cls = descriptor.type or load_type(descriptor.name)
    described = describe(cls)
    injection_points = described.injection_points
    if descriptor.fields:
        wanted = set(descriptor.fields)
        injection_points = tuple(p for p in injection_points if p.slot in wanted)
    return replace(
        described,
        injection_points=injection_points,
        flags=descriptor.flags,
        fields=descriptor.fields or described.fields,
    )
