"""
Fragment extractor: carves one fragment out of the token stream.

The locator leaves the cursor on a matching start-tag. The extractor hands
the mapper a Fragment: a bounded sub-stream that starts at that start-tag
and stops at the balanced end-tag (depth counted relative to the fragment
root, unlike the locator's shallow scan). The mapper cannot read past the
end-tag.

After mapping, mark_processed() drains whatever the mapper left unread so
the cursor always rests on a fragment boundary, then frees the subtree.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from fragment_kernel.exceptions import StreamReadError
from fragment_ingestion.reader.names import FragmentRootName
from fragment_ingestion.reader.tokens import Token, TokenKind, TokenStream


class Fragment:
    """Isolated token sub-stream for one fragment.

    Iterating yields the fragment's tokens from its start-tag through its
    end-tag, then stops. ``element`` drains the sub-stream and returns the
    completed subtree.
    """

    def __init__(
        self,
        stream: TokenStream,
        root_name: FragmentRootName,
        index: int,
    ):
        self._stream = stream
        self._root_name = root_name
        self._index = index
        self._depth = 0
        self._done = False
        start = stream.peek()
        if start is None or not start.is_start:
            raise ValueError("Fragment must begin at a start-tag")
        self._root = start.element

    @property
    def index(self) -> int:
        """0-based position of this fragment among all fragments of the input."""
        return self._index

    @property
    def root_name(self) -> FragmentRootName:
        return self._root_name

    @property
    def exhausted(self) -> bool:
        return self._done

    @property
    def element(self) -> Any:
        self.drain()
        return self._root

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        if self._done:
            raise StopIteration
        token = self._stream.next_token()
        if token is None:
            raise StreamReadError(
                self._stream.description,
                f"document ended inside fragment #{self._index}",
            )
        if token.kind is TokenKind.START:
            self._depth += 1
        elif token.kind is TokenKind.END:
            self._depth -= 1
            if self._depth == 0:
                self._done = True
        return token

    def drain(self) -> None:
        for _ in self:
            pass

    def __repr__(self) -> str:
        return f"Fragment(index={self._index}, root={self._root_name})"


class FragmentExtractor:
    """Opens and completes fragment sub-streams."""

    def __init__(self, root_name: FragmentRootName):
        self._root_name = root_name

    def start_fragment(self, stream: TokenStream, index: int) -> Fragment:
        """Mark the start of capture at the current (matched) start-tag."""
        return Fragment(stream, self._root_name, index)

    def mark_processed(self, stream: TokenStream, fragment: Fragment) -> None:
        """Read through the fragment's end-tag and free its subtree."""
        stream.release(fragment.element)
