"""
Configuration schema (``fragment_config.schema``).

Frozen dataclasses parsed from YAML by ``fragment_config.loader``. ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FragmentReaderDef:
    """Declarative fragment reader: input, fragment root, mapper, restart behaviour."""

    name: str
    resource: str  # Path; relative paths resolve against the config's base dir
    fragment_root: str  # 'local' or '{namespace}local'
    mapper: str = "dict"  # Stock mapper name or 'package.module:attr'
    strict: bool = True
    save_state: bool = True
    max_item_count: int | None = None
    normalize_keys: bool = False


@dataclass(frozen=True)
class ReaderConfigSet:
    """All reader definitions loaded from one YAML file."""

    readers: tuple[FragmentReaderDef, ...] = ()
    checksum: str = ""

    def get(self, name: str) -> FragmentReaderDef | None:
        for reader_def in self.readers:
            if reader_def.name == name:
                return reader_def
        return None
