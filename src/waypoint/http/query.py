"""Immutable query string parameters.

Kept as the ordered ``(name, value)`` pairs of the query string, so
repeated keys (``?status=new&status=won``) survive intact.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl

_TRUTHY = frozenset({"true", "1", "yes", "on"})


class QueryParams(Mapping[str, str]):
    """Read-only view over a parsed query string.

    Indexing and ``get`` see the first value sent for a name; ``get_list``
    sees all of them. Blank values (``?q=``) are kept as ``""``.
    """

    __slots__ = ("_pairs", "_raw")

    _pairs: tuple[tuple[str, str], ...]
    _raw: str

    def __init__(self, query_string: bytes | str = b"") -> None:
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        object.__setattr__(self, "_raw", query_string)
        object.__setattr__(
            self, "_pairs", tuple(parse_qsl(query_string, keep_blank_values=True))
        )

    def __getitem__(self, key: str) -> str:
        for name, value in self._pairs:
            if name == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        return f"QueryParams({self._raw!r})"

    @property
    def raw(self) -> str:
        """The undecoded query string, without the leading ``?``."""
        return self._raw

    def get_list(self, key: str) -> list[str]:
        """Every value sent for *key*, in order."""
        return [value for name, value in self._pairs if name == key]

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """First value for *key* as an int; *default* when absent or not numeric.

        Listing endpoints read ``?page=2&limit=20`` this way.
        """
        try:
            return int(self[key])
        except (KeyError, ValueError):
            return default

    def get_bool(self, key: str, default: bool | None = None) -> bool | None:
        """First value for *key* as a flag (``true``, ``1``, ``yes``, ``on``)."""
        if key not in self:
            return default
        return self[key].lower() in _TRUTHY
