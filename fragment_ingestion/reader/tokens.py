"""
Token stream: a forward-only cursor over structural XML events.

Wraps ``lxml.etree.iterparse`` (the leaf tokenizer) with one token of
lookahead. Character data is not a separate token; it stays on the element
nodes (``text`` / ``tail``) as lxml delivers it.

Contract:
    peek()        -> next token without consuming it, None when exhausted
    next_token()  -> consume and return the next token, None when exhausted
    position      -> number of tokens consumed so far (monotonic)
    release(elem) -> drop a fully processed subtree from memory

Any tokenizer failure surfaces as StreamReadError. Never retried: once a
stream has failed, every later peek()/next_token() raises the same error
(lxml's iterator reports plain exhaustion after a syntax error).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import IO, Any

from lxml import etree

from fragment_kernel.exceptions import StreamReadError


class TokenKind(str, Enum):
    """Structural XML event kinds delivered by the tokenizer."""

    START = "start"
    END = "end"
    COMMENT = "comment"
    PI = "pi"


_EVENTS = tuple(kind.value for kind in TokenKind)


@dataclass(frozen=True)
class Token:
    """One structural event. ``qname`` is set for START/END tokens only."""

    kind: TokenKind
    element: Any  # lxml node; subtree is complete only after its END token
    qname: etree.QName | None = None

    @property
    def is_start(self) -> bool:
        return self.kind is TokenKind.START

    @property
    def is_end(self) -> bool:
        return self.kind is TokenKind.END


class TokenStream:
    """Forward-only token cursor over a binary XML stream."""

    def __init__(self, source: IO[bytes], description: str):
        self._description = description
        self._events = etree.iterparse(
            source,
            events=_EVENTS,
            resolve_entities=False,
            no_network=True,
            load_dtd=False,
            huge_tree=True,
        )
        self._lookahead: Token | None = None
        self._exhausted = False
        self._error: StreamReadError | None = None
        self._position = 0

    @property
    def description(self) -> str:
        return self._description

    @property
    def position(self) -> int:
        return self._position

    @property
    def closed(self) -> bool:
        return self._events is None

    @property
    def failed(self) -> bool:
        return self._error is not None

    def peek(self) -> Token | None:
        if self._error is not None:
            raise self._error
        if self._lookahead is None and not self._exhausted:
            self._lookahead = self._pull()
        return self._lookahead

    def next_token(self) -> Token | None:
        token = self.peek()
        if token is not None:
            self._lookahead = None
            self._position += 1
        return token

    def release(self, element: Any) -> None:
        """Clear a processed subtree and the siblings parsed before it."""
        element.clear(keep_tail=True)
        parent = element.getparent()
        if parent is None:
            return
        while element.getprevious() is not None:
            del parent[0]

    def close(self) -> None:
        self._events = None
        self._lookahead = None
        self._exhausted = True

    def _pull(self) -> Token | None:
        try:
            event, node = next(self._events)
        except StopIteration:
            self._exhausted = True
            return None
        except (etree.LxmlError, OSError) as exc:
            self._error = StreamReadError(self._description, str(exc))
            self._error.__cause__ = exc
        if self._error is not None:
            # Outside the handler: an exception already in flight stays __context__
            raise self._error
        kind = TokenKind(event)
        if kind is TokenKind.START or kind is TokenKind.END:
            return Token(kind, node, etree.QName(node))
        return Token(kind, node)
