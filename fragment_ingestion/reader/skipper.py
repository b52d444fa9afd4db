"""
Restart skipper: re-skips already processed fragments on resume.

Reading in and binding an entire fragment is unacceptable in a restart
scenario: it may raise errors that were already skipped in previous runs, or
repeat mapper side effects. The skipper only finds boundaries:

    1. next start-tag matching the fragment root name (locator rule: shallow,
       namespace checked when configured)
    2. next end-tag with the same local name (namespace and depth ignored)

A same-named element nested inside a fragment therefore ends the skip early.
"""

from __future__ import annotations

from fragment_kernel.exceptions import RestartConsistencyError
from fragment_ingestion.reader.names import FragmentRootName
from fragment_ingestion.reader.tokens import TokenStream


class RestartSkipper:
    """Advance the cursor past ``count`` fragments without mapping them."""

    def __init__(self, root_name: FragmentRootName):
        self._root_name = root_name

    def skip(self, stream: TokenStream, count: int) -> None:
        """Skip ``count`` fragments.

        Raises:
            ValueError: if ``count`` is negative.
            RestartConsistencyError: if the input ends first.
        """
        if count < 0:
            raise ValueError(f"Skip count must be non-negative, got {count}")
        for skipped in range(count):
            if not self._read_to_start_fragment(stream) or not self._read_to_end_fragment(stream):
                raise RestartConsistencyError(
                    requested=count,
                    skipped=skipped,
                    description=stream.description,
                )

    def count_remaining(self, stream: TokenStream) -> int:
        """Skip every remaining fragment and return how many there were."""
        count = 0
        while self._read_to_start_fragment(stream) and self._read_to_end_fragment(stream):
            count += 1
        return count

    def _read_to_start_fragment(self, stream: TokenStream) -> bool:
        while True:
            token = stream.next_token()
            if token is None:
                return False
            if token.is_start and self._root_name.matches(token.qname):
                return True

    def _read_to_end_fragment(self, stream: TokenStream) -> bool:
        while True:
            token = stream.next_token()
            if token is None:
                return False
            if token.is_end and self._root_name.matches_local(token.qname):
                stream.release(token.element)
                return True
