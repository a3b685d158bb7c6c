"""Static-asset collaborator.

Given a resource path, returns the file's bytes and content type, or
``None`` when there is no such file. Paths that resolve outside the
configured directory are treated as missing.
"""

import mimetypes
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Asset:
    """A static file ready to be sent."""

    content: bytes
    content_type: str


class StaticAssets:
    """Serve files from *directory* for request paths under *prefix*.

    Usage::

        assets = StaticAssets("./static", prefix="/static")
        asset = assets.lookup("/static/css/site.css")
    """

    __slots__ = ("_directory", "_index", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/static",
        *,
        index: str = "index.html",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._index = index
        # Normalize prefix: ensure leading slash, strip trailing.
        stripped = "/" + prefix.strip("/")
        self._prefix = stripped if stripped != "/" else ""

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def directory(self) -> Path:
        return self._directory

    def handles(self, path: str) -> bool:
        """True if *path* falls under the reserved prefix.

        An empty (root) prefix reserves nothing, so routes stay reachable;
        only the ``/robots.txt`` alias is served from the directory.
        """
        if not self._prefix:
            return False
        return path == self._prefix or path.startswith(self._prefix + "/")

    def lookup(self, path: str) -> Asset | None:
        """Return the asset for request *path*, or ``None`` if not found."""
        relative = path[len(self._prefix) :].lstrip("/") if self.handles(path) else path.lstrip("/")

        file_path = (self._directory / relative).resolve() if relative else self._directory
        if not file_path.is_relative_to(self._directory):
            return None
        if file_path.is_dir():
            file_path = file_path / self._index
        if not file_path.is_file():
            return None

        content_type, _ = mimetypes.guess_type(str(file_path))
        return Asset(
            content=file_path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )
