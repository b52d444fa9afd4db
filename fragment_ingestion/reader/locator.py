"""
Fragment locator: moves the cursor to the next fragment root start-tag.

This implementation simply looks for the next start-tag with the configured
name. It does not care about element nesting: a same-named element inside
another element still matches. Composite fragments need a different locator.
"""

from __future__ import annotations

from fragment_ingestion.reader.names import FragmentRootName
from fragment_ingestion.reader.tokens import TokenStream


class FragmentLocator:
    """Shallow scan for the next start-tag matching the fragment root name."""

    def __init__(self, root_name: FragmentRootName):
        self._root_name = root_name

    def locate_next(self, stream: TokenStream) -> bool:
        """Discard tokens until a matching start-tag is next.

        Returns True with the start-tag still unconsumed, or False once the
        stream is exhausted. Tokenizer failures raise StreamReadError.
        """
        while True:
            token = stream.peek()
            if token is None:
                return False
            if token.is_start and self._root_name.matches(token.qname):
                return True
            stream.next_token()
