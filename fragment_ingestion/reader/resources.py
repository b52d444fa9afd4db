"""
Input resources: opaque handles to a byte source.

The reader only asks a resource whether it exists, whether it is readable,
for a description (for logs and errors) and for a fresh binary stream.
"""

from __future__ import annotations

import io
import os
from pathlib import Path
from typing import IO, Protocol, runtime_checkable


@runtime_checkable
class Resource(Protocol):
    """Protocol for a readable byte source."""

    @property
    def description(self) -> str: ...

    def exists(self) -> bool: ...

    def is_readable(self) -> bool: ...

    def open(self) -> IO[bytes]:
        """Return a new binary stream positioned at the start."""
        ...


class FileResource:
    """A file on the local filesystem."""

    def __init__(self, path: str | os.PathLike[str]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def description(self) -> str:
        return f"file [{self._path}]"

    def exists(self) -> bool:
        return self._path.exists()

    def is_readable(self) -> bool:
        return self._path.is_file() and os.access(self._path, os.R_OK)

    def open(self) -> IO[bytes]:
        return self._path.open("rb")

    def __repr__(self) -> str:
        return f"FileResource({str(self._path)!r})"


class BytesResource:
    """An in-memory document."""

    def __init__(self, data: bytes, description: str = "in-memory bytes"):
        self._data = data
        self._description = description

    @property
    def description(self) -> str:
        return self._description

    def exists(self) -> bool:
        return True

    def is_readable(self) -> bool:
        return True

    def open(self) -> IO[bytes]:
        return io.BytesIO(self._data)


def as_resource(value: Resource | str | os.PathLike[str] | bytes) -> Resource:
    """Coerce a path, bytes or resource into a Resource."""
    if isinstance(value, bytes):
        return BytesResource(value)
    if isinstance(value, (str, os.PathLike)):
        return FileResource(value)
    if isinstance(value, Resource):
        return value
    raise TypeError(f"Cannot use {type(value).__name__} as an input resource")
