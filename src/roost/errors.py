"""Roost exception hierarchy.

Shared across discovery, the registry, the router, and the dispatcher so
every module raises and catches the same types.

Bootstrap errors (discovery, parsing, instantiation, injection) are never
fatal: the pipeline logs them and moves on to the next descriptor.
Dispatch errors are converted into responses at the dispatcher boundary.
"""

from dataclasses import dataclass


class RoostError(Exception):
    """Base for all roost-specific errors."""


class ConfigurationError(RoostError):
    """Raised when app configuration is invalid."""


class DiscoveryError(RoostError):
    """A manifest could not be read or a root namespace could not be walked.

    Logged by the scanner, which then yields an empty descriptor list.
    """


class DescriptorParseError(RoostError):
    """A manifest object is malformed. The object is skipped."""


class InstantiationError(RoostError):
    """A component could not be loaded or constructed. The component is skipped."""

    def __init__(self, name: str, reason: str = "") -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot instantiate {name}" + (f": {reason}" if reason else ""))


class InjectionMiss(RoostError):  # noqa: N818
    """No registered service matches a declared injection slot.

    Never raised by the registry itself: misses are logged and recorded on
    ``ComponentRegistry.injection_misses``, and the slot stays ``None``.
    """

    def __init__(self, owner: str, slot: str, capability: str) -> None:
        self.owner = owner
        self.slot = slot
        self.capability = capability
        super().__init__(f"No service {capability} for {owner}.{slot}")


@dataclass(frozen=True, slots=True)
class HTTPError(RoostError):
    """An error that maps directly to an HTTP status code."""

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class DispatchInvocationFailure(RoostError):  # noqa: N818
    """A bound operation raised while being invoked.

    Wraps the original exception (``__cause__``) together with the route
    that was being served. The dispatcher turns it into a 500 response.
    """

    def __init__(self, method: str, path: str, cause: BaseException) -> None:
        self.method = method
        self.path = path
        super().__init__(str(cause) or type(cause).__name__)
