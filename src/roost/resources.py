"""Resource loader with a per-instance text cache.

Reads UTF-8 text files relative to one or more search roots. The cache
belongs to the loader instance, which the runtime context owns; there
is no process-wide cache.
"""

from pathlib import Path


class ResourceLoader:
    """Read and cache text resources.

    Usage::

        loader = ResourceLoader("templates", "static")
        html = loader.get("views/index.html")
    """

    __slots__ = ("_cache", "_roots")

    def __init__(self, *roots: str | Path) -> None:
        self._roots = tuple(Path(root).resolve() for root in roots)
        self._cache: dict[str, str] = {}

    def get(self, path: str) -> str:
        """Return the content of *path*, reading it on first use.

        Raises ``FileNotFoundError`` if no root contains *path*.
        """
        cached = self._cache.get(path)
        if cached is not None:
            return cached

        file_path = self.find(path)
        if file_path is None:
            msg = f"Resource not found: {path}"
            raise FileNotFoundError(msg)

        content = file_path.read_text(encoding="utf-8")
        self._cache[path] = content
        return content

    def find(self, path: str) -> Path | None:
        """The first existing file for *path* under the roots, if any."""
        relative = path.lstrip("/")
        for root in self._roots:
            candidate = (root / relative).resolve()
            if candidate.is_relative_to(root) and candidate.is_file():
                return candidate
        return None

    def remove(self, path: str) -> None:
        """Drop *path* from the cache."""
        self._cache.pop(path, None)

    def clear(self) -> None:
        """Drop every cached resource."""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, path: object) -> bool:
        return path in self._cache
