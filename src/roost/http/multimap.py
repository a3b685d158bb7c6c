"""Read-only multi-valued string mapping shared by Headers and QueryParams."""

from collections.abc import Iterable, Iterator, Mapping


class MultiValueMap(Mapping[str, str]):
    """Keys map to one or more values; indexing returns the first.

    Subclasses choose how keys are normalized by overriding ``_key``.
    Values are decoded once, at construction.
    """

    __slots__ = ("_values",)

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        values: dict[str, list[str]] = {}
        for key, value in pairs:
            values.setdefault(self._key(key), []).append(value)
        self._values = values

    @staticmethod
    def _key(key: str) -> str:
        return key

    def __getitem__(self, key: str) -> str:
        return self._values[self._key(key)][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._key(key) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._values.get(self._key(key))
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        """Every value for *key*, in arrival order."""
        return list(self._values.get(self._key(key), ()))
