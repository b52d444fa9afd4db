"""
Reader service: build FragmentItemReaders from config definitions.

Mapper names resolve in this order:
    1. stock mapper names in MAPPERS ("dict", "element")
    2. 'package.module:attr' import paths:
         - an object or class with unmarshal(fragment) -> used as the mapper
         - any other class -> ObjectMapper(cls)
         - a plain function -> CallableMapper(func)
"""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any

from fragment_config.schema import FragmentReaderDef, ReaderConfigSet
from fragment_kernel.exceptions import ReaderConfigurationError
from fragment_kernel.logging_config import get_logger
from fragment_ingestion.reader.item_reader import FragmentItemReader
from fragment_ingestion.reader.mappers import (
    MAPPERS,
    CallableMapper,
    FragmentMapper,
    ObjectMapper,
    mapper_for,
)

logger = get_logger("ingestion.reader_service")


def _import_attr(path: str) -> Any:
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise ReaderConfigurationError(
            "mapper", f"expected 'package.module:attr', got {path!r}"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ReaderConfigurationError("mapper", f"cannot import {module_name!r}") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ReaderConfigurationError(
            "mapper", f"{module_name!r} has no attribute {attr!r}"
        ) from exc


def resolve_mapper(name: str, *, normalize_keys: bool = False) -> FragmentMapper:
    """Resolve a configured mapper name to a mapper instance."""
    if name in MAPPERS:
        return mapper_for(name, normalize_keys=normalize_keys)
    target = _import_attr(name)
    if isinstance(target, type):
        if hasattr(target, "unmarshal"):
            return target()
        return ObjectMapper(target, normalize_keys=True)
    if isinstance(target, FragmentMapper):
        return target
    if callable(target):
        return CallableMapper(target)
    raise ReaderConfigurationError("mapper", f"{name!r} is not a mapper or callable")


def build_reader_from_def(
    def_: FragmentReaderDef,
    *,
    base_dir: Path | None = None,
    logger: logging.Logger | None = None,
) -> FragmentItemReader:
    """Build an unopened reader from a FragmentReaderDef."""
    if not isinstance(def_, FragmentReaderDef):
        raise TypeError("Expected FragmentReaderDef")
    resource_path = Path(def_.resource)
    if not resource_path.is_absolute() and base_dir is not None:
        resource_path = base_dir / resource_path
    return FragmentItemReader(
        resource_path,
        def_.fragment_root,
        resolve_mapper(def_.mapper, normalize_keys=def_.normalize_keys),
        strict=def_.strict,
        name=def_.name,
        save_state=def_.save_state,
        max_item_count=def_.max_item_count,
        logger=logger or get_logger(f"ingestion.reader.{def_.name}"),
    )


def build_reader_registry_from_defs(
    config: ReaderConfigSet,
    *,
    base_dir: Path | None = None,
) -> dict[str, FragmentItemReader]:
    """Build a reader name -> FragmentItemReader registry.

    Every reader is validated (after_properties_set) so configuration errors
    surface at build time, not on first open().
    """
    registry: dict[str, FragmentItemReader] = {}
    for def_ in config.readers:
        reader = build_reader_from_def(def_, base_dir=base_dir)
        reader.after_properties_set()
        registry[def_.name] = reader
    logger.info(
        "Built reader registry",
        extra={"reader_count": len(registry), "config_checksum": config.checksum},
    )
    return registry
