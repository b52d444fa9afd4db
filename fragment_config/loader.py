"""
Configuration Loader (``fragment_config.loader``).

Responsibility
--------------
Loads YAML reader definition files and parses them into typed
``fragment_config.schema`` dataclass instances.

Expected shape::

    readers:
      - name: trades
        resource: data/trades.xml
        fragment_root: "{urn:example:trades}trade"
        mapper: dict
        strict: true
        max_item_count: 1000

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
* Wrongly typed values or duplicate names  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from fragment_config.schema import FragmentReaderDef, ReaderConfigSet


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _parse_bool(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be true or false, got {value!r}")
    return value


def _parse_optional_count(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"'{key}' must be a non-negative integer, got {value!r}")
    return value


def parse_reader_def(data: dict[str, Any]) -> FragmentReaderDef:
    """Parse a FragmentReaderDef from a dict.

    Raises:
        KeyError: if name, resource or fragment_root is missing.
        ValueError: if a value has the wrong type.
    """
    name = data["name"]
    resource = data["resource"]
    fragment_root = data["fragment_root"]
    for key, value in (("name", name), ("resource", resource), ("fragment_root", fragment_root)):
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"'{key}' must be a non-empty string, got {value!r}")
    return FragmentReaderDef(
        name=name,
        resource=resource,
        fragment_root=fragment_root,
        mapper=str(data.get("mapper", "dict")),
        strict=_parse_bool(data, "strict", True),
        save_state=_parse_bool(data, "save_state", True),
        max_item_count=_parse_optional_count(data, "max_item_count"),
        normalize_keys=_parse_bool(data, "normalize_keys", False),
    )


def parse_reader_config(data: dict[str, Any]) -> ReaderConfigSet:
    """Parse the top-level ``readers`` list into a ReaderConfigSet."""
    entries = data.get("readers") or []
    if not isinstance(entries, list):
        raise ValueError("'readers' must be a list")
    readers = tuple(parse_reader_def(entry) for entry in entries)
    seen: set[str] = set()
    for reader_def in readers:
        if reader_def.name in seen:
            raise ValueError(f"Duplicate reader name: {reader_def.name}")
        seen.add(reader_def.name)
    return ReaderConfigSet(readers=readers, checksum=compute_checksum(data))


def load_reader_defs(path: Path) -> ReaderConfigSet:
    """Load and parse a reader definition YAML file."""
    return parse_reader_config(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums (deterministic).
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
