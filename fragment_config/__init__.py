"""
fragment_config -- Declarative reader definitions loaded from YAML.

No dependency on fragment_ingestion; readers are built from these
definitions by ``fragment_ingestion.services.reader_service``.
"""

from fragment_config.loader import (
    compute_checksum,
    load_reader_defs,
    load_yaml_file,
    parse_reader_config,
    parse_reader_def,
)
from fragment_config.schema import FragmentReaderDef, ReaderConfigSet

__all__ = [
    "FragmentReaderDef",
    "ReaderConfigSet",
    "compute_checksum",
    "load_reader_defs",
    "load_yaml_file",
    "parse_reader_config",
    "parse_reader_def",
]
