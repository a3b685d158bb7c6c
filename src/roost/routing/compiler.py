"""Route compiler — turn a declared path into an anchored matcher.

Examples::

    compile_path("/users/{id}")        -> r"/users/([^/]+)", ("id",)
    compile_path("/files/{name}.txt")  -> r"/files/([^/]+)\.txt", ("name",)

Literal text is escaped so characters such as ``.`` match themselves.
Each ``{name}`` placeholder captures exactly one non-empty path segment.
"""

import re
from typing import Any

from roost.discovery.descriptor import Operation
from roost.routing.route import Route

# {name} placeholders; anything up to the closing brace is the name
PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")

# One or more non-slash characters
SEGMENT_PATTERN = "([^/]+)"


def normalize_base_path(base_path: str) -> str:
    """Single leading slash, no trailing slash. Root normalizes to ``""``."""
    stripped = "/" + base_path.strip("/")
    return stripped if stripped != "/" else ""


def normalize_operation_path(path: str) -> str:
    """Ensure a leading slash."""
    return path if path.startswith("/") else "/" + path


def join_paths(base_path: str, path: str) -> str:
    """Full route path for an operation under a controller base path."""
    return normalize_base_path(base_path) + normalize_operation_path(path)


def compile_path(full_path: str) -> tuple[re.Pattern[str], tuple[str, ...]]:
    """Compile *full_path* into an anchored pattern and its parameter names."""
    names: list[str] = []
    pieces: list[str] = []
    position = 0
    for found in PLACEHOLDER_RE.finditer(full_path):
        pieces.append(re.escape(full_path[position : found.start()]))
        pieces.append(SEGMENT_PATTERN)
        names.append(found.group(1).strip())
        position = found.end()
    pieces.append(re.escape(full_path[position:]))
    return re.compile(r"\A" + "".join(pieces) + r"\Z"), tuple(names)


def compile_route(base_path: str, operation: Operation, controller: Any) -> Route:
    """Compile one declared operation of *controller* into a ``Route``."""
    full_path = join_paths(base_path, operation.path)
    pattern, names = compile_path(full_path)
    return Route(
        method=operation.method.upper(),
        path=full_path,
        pattern=pattern,
        param_names=names,
        controller=controller,
        operation=operation,
    )
