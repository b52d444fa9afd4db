"""
Pytest fixtures for the fragment reader test suite.

Provides:
- XML document builders (plain and namespaced record files)
- A file writer fixture backed by tmp_path
- Logging state reset between tests
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from fragment_kernel.logging_config import LogContext, reset_logging

NS = "urn:example"


def make_document(
    count: int,
    *,
    root: str = "records",
    item: str = "item",
    namespace: str | None = None,
    header: str = "<header><item-count>{count}</item-count></header>",
) -> bytes:
    """Build a document with ``count`` <item id="i"><name>item-i</name></item> fragments."""
    xmlns = f' xmlns="{namespace}"' if namespace else ""
    parts = [f"<?xml version='1.0' encoding='UTF-8'?>\n<{root}{xmlns}>"]
    if header:
        parts.append(header.format(count=count))
    for i in range(count):
        parts.append(
            f'<{item} id="{i}"><name>{item}-{i}</name><qty>{i * 10}</qty></{item}>'
        )
    parts.append(f"</{root}>")
    return "\n".join(parts).encode("utf-8")


@pytest.fixture
def write_xml(tmp_path: Path) -> Callable[..., Path]:
    """Write bytes (or text) to a file under tmp_path and return its path."""

    def _write(content: bytes | str, name: str = "input.xml") -> Path:
        path = tmp_path / name
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        return path

    return _write


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
