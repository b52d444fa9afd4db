"""Source adapters for fragment ingestion (file I/O only, no config)."""

from fragment_ingestion.adapters.base import SourceAdapter, SourceProbe
from fragment_ingestion.adapters.xml_adapter import XmlFragmentSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourceProbe",
    "XmlFragmentSourceAdapter",
]
