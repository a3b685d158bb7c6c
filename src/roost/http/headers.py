"""Case-insensitive request headers, decoded from ASGI byte pairs."""

from roost.http.multimap import MultiValueMap


class Headers(MultiValueMap):
    """Request headers. Names are compared case-insensitively.

    ``raw`` keeps the byte pairs exactly as the server delivered them.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        super().__init__((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)
        self._raw = raw

    @staticmethod
    def _key(key: str) -> str:
        return key.lower()

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        return self._raw
