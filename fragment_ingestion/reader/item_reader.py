"""
FragmentItemReader -- streaming XML item reader with restart support.

Reads a large XML document fragment by fragment: the locator finds the next
fragment root start-tag, the extractor isolates the fragment, the mapper
turns it into an item. On restart the skipper re-skips the fragments already
consumed in earlier attempts without mapping them.

Lifecycle:

    UNOPENED --open()--> OPENED   --read()*--> --close()--> CLOSED
        |
        +--open()--> NO_INPUT (resource missing/unreadable, strict=False)

Host contract:
    open(execution_context)  restart count from '<name>.read.count'
    read()                   next item, or None at end of input
    update(execution_context) writes the current count back
    close()                  idempotent; releases stream and tokenizer

Usage:
    reader = FragmentItemReader(
        "trades.xml", "{urn:example}trade", ElementDictMapper()
    )
    with reader:
        for record in reader:
            ...
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from enum import Enum
from typing import IO, Any

from fragment_kernel.context import ExecutionContext
from fragment_kernel.exceptions import (
    FragmentMappingError,
    ReaderConfigurationError,
    ReaderStateError,
    ResourceNotFoundError,
    ResourceNotReadableError,
)
from fragment_kernel.logging_config import get_logger
from fragment_ingestion.reader.extractor import FragmentExtractor
from fragment_ingestion.reader.locator import FragmentLocator
from fragment_ingestion.reader.mappers import FragmentMapper
from fragment_ingestion.reader.names import FragmentRootName
from fragment_ingestion.reader.resources import Resource, as_resource
from fragment_ingestion.reader.skipper import RestartSkipper
from fragment_ingestion.reader.tokens import TokenStream

READ_COUNT = "read.count"
READ_COUNT_MAX = "read.count.max"


class ReaderState(str, Enum):
    """Reader lifecycle state."""

    UNOPENED = "unopened"
    OPENED = "opened"
    NO_INPUT = "no_input"  # Non-strict mode, resource missing or unreadable
    CLOSED = "closed"


class FragmentItemReader:
    """Reads one mapped item per XML fragment; resumable by fragment count."""

    def __init__(
        self,
        resource: Resource | str | os.PathLike[str] | bytes | None = None,
        fragment_root_name: str | None = None,
        mapper: FragmentMapper | None = None,
        *,
        strict: bool = True,
        name: str = "FragmentItemReader",
        save_state: bool = True,
        max_item_count: int | None = None,
        logger: logging.Logger | None = None,
    ):
        self._resource = as_resource(resource) if resource is not None else None
        self._fragment_root_name = fragment_root_name
        self._mapper = mapper
        self.strict = strict
        self.save_state = save_state
        self._name = name
        self._max_item_count: int | None = None
        self.max_item_count = max_item_count
        self._logger = logger or get_logger("ingestion.reader")

        self._state = ReaderState.UNOPENED
        self._current_item_count = 0
        self._end_reported = False
        self._root_name: FragmentRootName | None = None
        self._locator: FragmentLocator | None = None
        self._extractor: FragmentExtractor | None = None
        self._skipper: RestartSkipper | None = None
        self._input: IO[bytes] | None = None
        self._tokens: TokenStream | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def resource(self) -> Resource | None:
        return self._resource

    @resource.setter
    def resource(self, value: Resource | str | os.PathLike[str] | bytes) -> None:
        self._require_unopened("set resource on")
        self._resource = as_resource(value)

    @property
    def fragment_root_name(self) -> str | None:
        return self._fragment_root_name

    @fragment_root_name.setter
    def fragment_root_name(self, value: str) -> None:
        self._require_unopened("set fragment_root_name on")
        self._fragment_root_name = value
        self._root_name = None

    @property
    def mapper(self) -> FragmentMapper | None:
        return self._mapper

    @mapper.setter
    def mapper(self, value: FragmentMapper) -> None:
        self._require_unopened("set mapper on")
        self._mapper = value

    @property
    def max_item_count(self) -> int | None:
        """Ceiling on items returned by read(); None means unlimited."""
        return self._max_item_count

    @max_item_count.setter
    def max_item_count(self, value: int | None) -> None:
        if value is not None and value < 0:
            raise ReaderConfigurationError("max_item_count", "must be non-negative")
        self._max_item_count = value

    @property
    def current_item_count(self) -> int:
        """Fragments consumed so far, including those of earlier attempts."""
        return self._current_item_count

    @current_item_count.setter
    def current_item_count(self, value: int) -> None:
        """Supply the restart count directly instead of via an execution context."""
        self._require_unopened("set current_item_count on")
        if value < 0:
            raise ReaderConfigurationError("current_item_count", "must be non-negative")
        self._current_item_count = value

    def after_properties_set(self) -> None:
        """Validate mapper and fragment root name; split the root name.

        Raises:
            ReaderConfigurationError: if the mapper is missing or the fragment
                root name is empty or malformed.
        """
        if self._mapper is None:
            raise ReaderConfigurationError("mapper", "must not be None")
        if not isinstance(self._mapper, FragmentMapper):
            raise ReaderConfigurationError(
                "mapper", f"{type(self._mapper).__name__} has no unmarshal(fragment)"
            )
        root_name = FragmentRootName.parse(self._fragment_root_name)
        self._root_name = root_name
        self._locator = FragmentLocator(root_name)
        self._extractor = FragmentExtractor(root_name)
        self._skipper = RestartSkipper(root_name)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, execution_context: ExecutionContext | None = None) -> None:
        """Acquire the input and skip fragments consumed by earlier attempts.

        Raises:
            ReaderStateError: if the reader was already opened or closed.
            ReaderConfigurationError: on missing resource, mapper or root name.
            ResourceNotFoundError / ResourceNotReadableError: strict mode only.
            StreamReadError: if the tokenizer fails during the restart skip.
            RestartConsistencyError: if the input holds fewer fragments than
                the restart count.
        """
        self._require_unopened("open()")
        self.after_properties_set()
        if self._resource is None:
            raise ReaderConfigurationError("resource", "must not be None")
        if execution_context is not None and self.save_state:
            self._restore(execution_context)

        try:
            self._do_open()
            restart_count = self._current_item_count
            if (
                self._state is ReaderState.OPENED
                and restart_count > 0
                and not self._limit_reached()
            ):
                self._jump_to_item(restart_count)
        except BaseException:
            self._release()
            self._state = ReaderState.UNOPENED
            raise

        self._logger.info(
            "Reader opened",
            extra=self._log_fields(restart_count=self._current_item_count),
        )

    def read(self) -> Any | None:
        """Return the next mapped item, or None at end of input.

        Mapper exceptions propagate unchanged; the fragment is still consumed
        so the cursor stays on a fragment boundary. If draining the rest of
        that fragment fails, the StreamReadError wins and the mapper's
        exception is kept as its ``__context__``. After a StreamReadError
        every further read() raises it again.
        """
        if self._state not in (ReaderState.OPENED, ReaderState.NO_INPUT):
            raise ReaderStateError(self._state.value, "read()")
        if self._state is ReaderState.NO_INPUT or self._limit_reached():
            return self._end_of_input()

        assert self._tokens is not None and self._locator is not None
        assert self._extractor is not None and self._mapper is not None
        if not self._locator.locate_next(self._tokens):
            return self._end_of_input()

        fragment = self._extractor.start_fragment(self._tokens, self._current_item_count)
        self._current_item_count += 1
        try:
            item = self._mapper.unmarshal(fragment)
        finally:
            self._extractor.mark_processed(self._tokens, fragment)
        if item is None:
            raise FragmentMappingError(fragment.index, "mapper returned None")
        return item

    def update(self, execution_context: ExecutionContext) -> None:
        """Record the current count for a later restart (when save_state)."""
        if not self.save_state:
            return
        execution_context.put_int(self._key(READ_COUNT), self._current_item_count)
        if self._max_item_count is not None:
            execution_context.put_int(self._key(READ_COUNT_MAX), self._max_item_count)

    def close(self) -> None:
        """Release the tokenizer and input stream. Safe to call repeatedly."""
        if self._state is ReaderState.CLOSED:
            return
        try:
            self._release()
        finally:
            self._state = ReaderState.CLOSED
            self._logger.info(
                "Reader closed",
                extra=self._log_fields(items_read=self._current_item_count),
            )

    def __enter__(self) -> FragmentItemReader:
        if self._state is ReaderState.UNOPENED:
            self.open()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __iter__(self) -> Iterator[Any]:
        while True:
            item = self.read()
            if item is None:
                return
            yield item

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _key(self, suffix: str) -> str:
        return f"{self._name}.{suffix}"

    def _require_unopened(self, operation: str) -> None:
        if self._state is not ReaderState.UNOPENED:
            raise ReaderStateError(self._state.value, operation)

    def _limit_reached(self) -> bool:
        return (
            self._max_item_count is not None
            and self._current_item_count >= self._max_item_count
        )

    def _restore(self, execution_context: ExecutionContext) -> None:
        max_count = execution_context.get_int(self._key(READ_COUNT_MAX))
        if max_count is not None:
            self.max_item_count = max_count
        count = execution_context.get_int(self._key(READ_COUNT))
        if count is not None:
            if count < 0:
                raise ReaderConfigurationError(
                    self._key(READ_COUNT), f"restart count must be non-negative, got {count}"
                )
            self._current_item_count = count

    def _do_open(self) -> None:
        resource = self._resource
        assert resource is not None
        self._end_reported = False

        if not resource.exists():
            if self.strict:
                raise ResourceNotFoundError(resource.description)
            self._enter_no_input("Input resource does not exist")
            return
        if not resource.is_readable():
            if self.strict:
                raise ResourceNotReadableError(resource.description)
            self._enter_no_input("Input resource is not readable")
            return

        try:
            self._input = resource.open()
        except OSError as exc:
            if self.strict:
                raise ResourceNotReadableError(resource.description) from exc
            self._enter_no_input("Input resource could not be opened")
            return
        self._tokens = TokenStream(self._input, resource.description)
        self._state = ReaderState.OPENED

    def _enter_no_input(self, message: str) -> None:
        self._logger.warning(
            message,
            extra=self._log_fields(reader_state=ReaderState.NO_INPUT.value),
        )
        self._state = ReaderState.NO_INPUT

    def _jump_to_item(self, item_index: int) -> None:
        assert self._skipper is not None and self._tokens is not None
        self._logger.info(
            "Skipping fragments consumed by a previous run",
            extra=self._log_fields(restart_count=item_index),
        )
        self._skipper.skip(self._tokens, item_index)

    def _end_of_input(self) -> None:
        if not self._end_reported:
            self._end_reported = True
            self._logger.info(
                "End of input",
                extra=self._log_fields(items_read=self._current_item_count),
            )
        return None

    def _log_fields(self, **fields: Any) -> dict[str, Any]:
        base: dict[str, Any] = {
            "reader_name": self._name,
            "reader_state": self._state.value,
        }
        if self._resource is not None:
            base["resource"] = self._resource.description
        base.update(fields)
        return base

    def _release(self) -> None:
        tokens, stream = self._tokens, self._input
        self._tokens = None
        self._input = None
        try:
            if tokens is not None:
                tokens.close()
        finally:
            if stream is not None:
                stream.close()
