"""Query string parameters."""

from urllib.parse import parse_qsl

from roost.http.multimap import MultiValueMap


class QueryParams(MultiValueMap):
    """Parsed query string. Blank values are kept (``?flag=`` gives ``""``)."""

    __slots__ = ("_raw",)

    def __init__(self, query_string: bytes = b"") -> None:
        super().__init__(parse_qsl(query_string.decode("latin-1"), keep_blank_values=True))
        self._raw = query_string

    @property
    def raw(self) -> bytes:
        return self._raw

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """The first value for *key* as an int, or *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default
