"""
Fragment root name: the qualified name that marks one record in the document.

Accepted text forms:
    item                  -> local part "item", any namespace
    {urn:example}item     -> local part "item", namespace "urn:example" only
    {}item                -> local part "item", no namespace only
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from lxml import etree

from fragment_kernel.exceptions import ReaderConfigurationError

_CLARK = re.compile(r"^\{(?P<namespace>[^{}]*)\}(?P<local>[^{}]*)$")


@dataclass(frozen=True)
class FragmentRootName:
    """Qualified name of the fragment root element.

    ``namespace`` is None when no namespace was configured; matching then
    compares the local part only.
    """

    local_part: str
    namespace: str | None = None

    @classmethod
    def parse(cls, text: str | None) -> FragmentRootName:
        """Split ``{namespace}local`` text into namespace and local part.

        Raises:
            ReaderConfigurationError: if the text is empty, the braces are
                malformed, or the local part is empty.
        """
        if not text or not text.strip():
            raise ReaderConfigurationError(
                "fragment_root_name", "must not be empty"
            )
        text = text.strip()
        if "{" not in text and "}" not in text:
            return cls(local_part=text)
        match = _CLARK.match(text)
        if match is None:
            raise ReaderConfigurationError(
                "fragment_root_name",
                f"expected '{{namespace}}localPart', got {text!r}",
            )
        local = match.group("local")
        if not local:
            raise ReaderConfigurationError(
                "fragment_root_name", f"local part is empty in {text!r}"
            )
        return cls(local_part=local, namespace=match.group("namespace"))

    def matches(self, qname: etree.QName) -> bool:
        """Local part equality, plus namespace equality if one was configured."""
        if qname.localname != self.local_part:
            return False
        if self.namespace is None:
            return True
        return (qname.namespace or "") == self.namespace

    def matches_local(self, qname: etree.QName) -> bool:
        return qname.localname == self.local_part

    def __str__(self) -> str:
        if self.namespace is None:
            return self.local_part
        return f"{{{self.namespace}}}{self.local_part}"
