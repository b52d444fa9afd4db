"""
XML fragment source adapter.

Streams one dict per fragment through FragmentItemReader. Configurable:
fragment_root (required, '{namespace}local' form allowed), strict,
read_count (resume offset), normalize_keys, max_items.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

from fragment_kernel.exceptions import ReaderConfigurationError
from fragment_kernel.logging_config import LogContext, get_logger
from fragment_ingestion.adapters.base import SourceProbe
from fragment_ingestion.reader.item_reader import FragmentItemReader, ReaderState
from fragment_ingestion.reader.mappers import ElementDictMapper
from fragment_ingestion.reader.names import FragmentRootName
from fragment_ingestion.reader.resources import FileResource
from fragment_ingestion.reader.skipper import RestartSkipper
from fragment_ingestion.reader.tokens import TokenStream

logger = get_logger("ingestion.xml_adapter")

_SAMPLE_SIZE = 5


def _get_fragment_root(options: dict[str, Any]) -> str:
    root = options.get("fragment_root")
    if not root:
        raise ReaderConfigurationError("fragment_root", "option is required")
    return str(root)


def _all_keys(rows: list[dict[str, Any]]) -> tuple[str, ...]:
    """Union of keys from sample rows for column list."""
    seen: set[str] = set()
    for row in rows:
        seen.update(row.keys())
    return tuple(sorted(seen))


def _build_reader(
    source_path: Path,
    options: dict[str, Any],
    max_items: int | None,
) -> FragmentItemReader:
    reader = FragmentItemReader(
        FileResource(source_path),
        _get_fragment_root(options),
        ElementDictMapper(normalize_keys=bool(options.get("normalize_keys", False))),
        strict=bool(options.get("strict", True)),
        name=str(options.get("reader_name", "xml_adapter")),
        max_item_count=max_items,
        logger=logger,
    )
    reader.current_item_count = int(options.get("read_count", 0))
    return reader


class XmlFragmentSourceAdapter:
    """Read XML documents as one dict per fragment. Streams; does not load entire file."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        max_items = options.get("max_items")
        reader = _build_reader(
            source_path, options, int(max_items) if max_items is not None else None
        )
        with reader:
            yield from reader

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        root = FragmentRootName.parse(_get_fragment_root(options))
        resource = FileResource(source_path)

        with LogContext.bind(resource=resource.description):
            with _build_reader(source_path, {**options, "read_count": 0}, _SAMPLE_SIZE) as reader:
                no_input = reader.state is ReaderState.NO_INPUT
                sample = list(reader)

            if no_input:
                count = 0
            else:
                with resource.open() as f:
                    tokens = TokenStream(f, resource.description)
                    try:
                        count = RestartSkipper(root).count_remaining(tokens)
                    finally:
                        tokens.close()

            logger.info(
                "Probed XML source",
                extra={"fragment_count": count, "fragment_root": str(root)},
            )

        return SourceProbe(
            row_count=count,
            columns=_all_keys(sample),
            sample_rows=tuple(sample),
            fragment_root=str(root),
        )
