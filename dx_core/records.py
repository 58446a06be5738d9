"""
records.py — Record type shared by the parser and the aggregation views
"""

from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Dict, Iterator


class Record(Mapping):
    """One parsed data row: an immutable field-name -> value mapping.

    The field set is open. Use `field(name, default)` for lookups so that a
    missing or blank field degrades to the caller's default instead of
    raising.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Dict[str, Any] | None = None, **fields: Any):
        merged = dict(data or {})
        merged.update(fields)
        self._data = merged

    def __getitem__(self, name: str) -> Any:
        return self._data[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Record({self._data!r})"

    def __hash__(self) -> int:
        return hash(tuple(self._data.items()))

    def field(self, name: str, default: Any = "") -> Any:
        """Return the value for `name`, or `default` when missing or blank."""
        value = self._data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        return value

    def replace(self, **changes: Any) -> "Record":
        """Return a new Record with `changes` applied."""
        data = dict(self._data)
        data.update(changes)
        return Record(data)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)
