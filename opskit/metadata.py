"""Read-only key/value metadata attached to a metric."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Union

_Entries = Union[Mapping[str, str], Iterable[tuple[str, str]], None]


class Metadata(Mapping[str, str]):
    """An immutable mapping of string keys to string values.

    Metrics can carry arbitrary key/value pairs which formatters may use to
    label them, for example as Prometheus labels.
    """

    __slots__ = ("_map",)

    def __init__(self, entries: _Entries = None) -> None:
        self._map: dict[str, str] = dict(entries) if entries is not None else {}

    def __getitem__(self, key: str) -> str:
        return self._map[key]

    def __len__(self) -> int:
        return len(self._map)

    def __contains__(self, key: object) -> bool:
        return key in self._map

    def __iter__(self) -> Iterator[str]:
        return iter(self._map)

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the value stored under `key`, or `default` if absent."""
        return self._map.get(key, default)

    def items(self):
        """Return a view of the (key, value) pairs."""
        return self._map.items()

    def is_empty(self) -> bool:
        """Return True when there are no entries."""
        return not self._map

    def __repr__(self) -> str:
        return f"Metadata({self._map!r})"