"""
ExecutionContext -- host-owned key/value carrier for restart state.

The host persists the context between execution attempts; readers only read
their restart count from it on open() and write the current count back on
update(). ZERO I/O: persistence format is the host's business.
"""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping
from typing import Any


class ExecutionContext(MutableMapping[str, Any]):
    """String-keyed mapping with typed integer accessors and a dirty flag."""

    def __init__(self, values: dict[str, Any] | None = None):
        self._values: dict[str, Any] = dict(values or {})
        self._dirty = False

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if self._values.get(key, _MISSING) != value:
            self._dirty = True
        self._values[key] = value

    def __delitem__(self, key: str) -> None:
        del self._values[key]
        self._dirty = True

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ExecutionContext({self._values!r})"

    @property
    def dirty(self) -> bool:
        """True if any value changed since construction or the last clear_dirty()."""
        return self._dirty

    def clear_dirty(self) -> None:
        self._dirty = False

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return the value at ``key`` as an int.

        Raises:
            TypeError: if the stored value is not an integer (bools rejected).
        """
        if key not in self._values:
            return default
        value = self._values[key]
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(
                f"Execution context value for '{key}' is not an integer: {value!r}"
            )
        return value

    def put_int(self, key: str, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Expected an integer for '{key}', got {value!r}")
        self[key] = value

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict snapshot for the host to persist."""
        return dict(self._values)


_MISSING = object()
