"""Immutable multi-valued parameter bags.

Used for query strings and url-encoded bodies. Implements
``Mapping[str, str]``: ``__getitem__`` returns the first value for a key
and ``get_list`` returns all of them.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from urllib.parse import parse_qs


class Params(Mapping[str, str]):
    """Immutable string parameters where keys may repeat.

    Build from a query string or from a plain mapping::

        Params.from_query_string("tag=a&tag=b&page=2")
        Params({"page": "2", "tag": ["a", "b"]})
    """

    _data: dict[str, list[str]]

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, str | Iterable[str]] | None = None) -> None:
        parsed: dict[str, list[str]] = {}
        for key, value in (data or {}).items():
            parsed[key] = [value] if isinstance(value, str) else [str(v) for v in value]
        object.__setattr__(self, "_data", parsed)

    @classmethod
    def from_query_string(cls, query_string: str | bytes) -> Params:
        """Parse ``a=1&b=2`` (blank values kept)."""
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        return cls(parse_qs(query_string, keep_blank_values=True))

    def __setattr__(self, name: str, value: object) -> None:
        msg = "Params is immutable"
        raise AttributeError(msg)

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Params({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return value as int, or *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def valid(self, key: str) -> bool:
        """True if *key* is present with a non-empty first value."""
        return bool(self.get(key))
