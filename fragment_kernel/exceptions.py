"""
Typed Exception Hierarchy for the Fragment Reader.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A batch host has to decide what to do with a failed read: abort the step,
skip the record, or flag the persisted restart state as corrupt. Parsing
message strings for that decision is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, log-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        reader.open(execution_context)
    except RestartConsistencyError as e:
        log.error("restart state does not match input",
                  extra={"requested": e.requested, "skipped": e.skipped})
        mark_execution_abandoned()

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from FragmentReaderError:

    FragmentReaderError (base)
    |
    +-- ReaderConfigurationError
    +-- ReaderStateError
    |
    +-- ResourceError
    |   +-- ResourceNotFoundError
    |   +-- ResourceNotReadableError
    |
    +-- StreamReadError
    +-- RestartConsistencyError
    +-- FragmentMappingError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | READER_CONFIGURATION        | Missing mapper, bad fragment root name
State           | READER_STATE                | read() before open(), open() twice
----------------|-----------------------------|-----------------------------------------
Resource        | RESOURCE_NOT_FOUND          | Input missing (strict mode)
                | RESOURCE_NOT_READABLE       | Input unreadable (strict mode)
----------------|-----------------------------|-----------------------------------------
Stream          | STREAM_READ_FAILURE         | Tokenizer I/O or parse error
Restart         | RESTART_CONSISTENCY         | Input ended before restart skip finished
Mapping         | FRAGMENT_MAPPING_FAILED     | Stock mapper could not build an item

===============================================================================
HANDLING PATTERNS
===============================================================================

1. RESOURCE ERRORS only happen at open() and only in strict mode. A
   non-strict reader logs a warning and behaves as an empty input.

2. STREAM and RESTART errors are never retried by the reader. A
   RestartConsistencyError means the persisted read count and the input
   resource disagree; re-running with the same state fails the same way.

3. MAPPING errors from custom mappers are NOT wrapped. The reader lets the
   mapper's own exception propagate; only the stock mappers raise
   FragmentMappingError.
"""


class FragmentReaderError(Exception):
    """
    Base exception for all fragment reader errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "FRAGMENT_READER_ERROR"


class ReaderConfigurationError(FragmentReaderError):
    """A required reader setting is missing or invalid."""

    code: str = "READER_CONFIGURATION"

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid reader configuration for '{setting}': {reason}")


class ReaderStateError(FragmentReaderError):
    """Operation not allowed in the reader's current lifecycle state."""

    code: str = "READER_STATE"

    def __init__(self, state: str, operation: str):
        self.state = state
        self.operation = operation
        super().__init__(f"Cannot {operation} a reader in state '{state}'")


# Resource access


class ResourceError(FragmentReaderError):
    """Base exception for input resource access failures."""

    code: str = "RESOURCE_ERROR"


class ResourceNotFoundError(ResourceError):
    """Input resource does not exist (strict mode)."""

    code: str = "RESOURCE_NOT_FOUND"

    def __init__(self, description: str):
        self.description = description
        super().__init__(
            f"Input resource must exist (reader is in 'strict' mode): {description}"
        )


class ResourceNotReadableError(ResourceError):
    """Input resource exists but cannot be read (strict mode)."""

    code: str = "RESOURCE_NOT_READABLE"

    def __init__(self, description: str):
        self.description = description
        super().__init__(
            f"Input resource must be readable (reader is in 'strict' mode): {description}"
        )


# Stream and restart


class StreamReadError(FragmentReaderError):
    """The underlying tokenizer failed while scanning or extracting."""

    code: str = "STREAM_READ_FAILURE"

    def __init__(self, description: str, detail: str):
        self.description = description
        self.detail = detail
        super().__init__(f"Error while reading from {description}: {detail}")


class RestartConsistencyError(FragmentReaderError):
    """Input ended before the restart skip reached the persisted read count."""

    code: str = "RESTART_CONSISTENCY"

    def __init__(self, requested: int, skipped: int, description: str):
        self.requested = requested
        self.skipped = skipped
        self.description = description
        super().__init__(
            f"Cannot restart after {requested} fragments: {description} "
            f"only contains {skipped}"
        )


class FragmentMappingError(FragmentReaderError):
    """A stock mapper could not convert a fragment into an item."""

    code: str = "FRAGMENT_MAPPING_FAILED"

    def __init__(self, fragment_index: int, reason: str):
        self.fragment_index = fragment_index
        self.reason = reason
        super().__init__(f"Cannot map fragment #{fragment_index}: {reason}")
