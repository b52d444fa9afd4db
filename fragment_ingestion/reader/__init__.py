"""Fragment cursor reader: locate, extract, map and restart-skip XML fragments."""

from fragment_ingestion.reader.extractor import Fragment, FragmentExtractor
from fragment_ingestion.reader.item_reader import (
    READ_COUNT,
    READ_COUNT_MAX,
    FragmentItemReader,
    ReaderState,
)
from fragment_ingestion.reader.locator import FragmentLocator
from fragment_ingestion.reader.mappers import (
    MAPPERS,
    CallableMapper,
    ElementDictMapper,
    ElementMapper,
    FragmentMapper,
    ObjectMapper,
    element_to_dict,
    mapper_for,
)
from fragment_ingestion.reader.names import FragmentRootName
from fragment_ingestion.reader.resources import (
    BytesResource,
    FileResource,
    Resource,
    as_resource,
)
from fragment_ingestion.reader.skipper import RestartSkipper
from fragment_ingestion.reader.tokens import Token, TokenKind, TokenStream

__all__ = [
    "READ_COUNT",
    "READ_COUNT_MAX",
    "MAPPERS",
    "BytesResource",
    "CallableMapper",
    "ElementDictMapper",
    "ElementMapper",
    "FileResource",
    "Fragment",
    "FragmentExtractor",
    "FragmentItemReader",
    "FragmentLocator",
    "FragmentMapper",
    "FragmentRootName",
    "ObjectMapper",
    "ReaderState",
    "Resource",
    "RestartSkipper",
    "Token",
    "TokenKind",
    "TokenStream",
    "as_resource",
    "element_to_dict",
    "mapper_for",
]
