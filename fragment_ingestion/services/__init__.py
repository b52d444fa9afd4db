"""Services that wire fragment readers from configuration."""

from fragment_ingestion.services.reader_service import (
    build_reader_from_def,
    build_reader_registry_from_defs,
    resolve_mapper,
)

__all__ = [
    "build_reader_from_def",
    "build_reader_registry_from_defs",
    "resolve_mapper",
]
