"""Route and RouteMatch frozen dataclasses."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from roost.discovery.descriptor import Operation


@dataclass(frozen=True, slots=True)
class Route:
    """A compiled route bound to one operation on one controller instance.

    ``pattern`` is anchored at both ends; ``param_names`` lists the
    placeholders in the order their capture groups appear.
    """

    method: str
    path: str
    pattern: re.Pattern[str]
    param_names: tuple[str, ...]
    controller: Any
    operation: Operation

    @property
    def handler(self) -> Callable[..., Any]:
        """The bound operation method."""
        return getattr(self.controller, self.operation.attr)

    @property
    def handler_name(self) -> str:
        return f"{type(self.controller).__qualname__}.{self.operation.attr}"

    def match(self, path: str) -> dict[str, str] | None:
        """Return extracted parameters if *path* matches in full, else ``None``."""
        found = self.pattern.fullmatch(path)
        if found is None:
            return None
        return dict(zip(self.param_names, found.groups(), strict=True))


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
