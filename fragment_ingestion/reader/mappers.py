"""
Fragment mappers: turn one isolated fragment into one item.

The reader depends only on the FragmentMapper protocol (a single
``unmarshal`` operation). Stock mappers:

    ElementDictMapper  -> dict (attributes as '@name', leaves as text)
    ElementMapper      -> detached copy of the fragment element
    CallableMapper     -> plain function of the element
    ObjectMapper       -> factory(**record), e.g. a dataclass

Mappers must not keep references to ``fragment.element`` past unmarshal():
the reader frees the subtree once the fragment is processed. Copy what you
need (ElementMapper does).
"""

from __future__ import annotations

import copy
import re
from typing import Any, Callable, Protocol, runtime_checkable

from lxml import etree

from fragment_kernel.exceptions import FragmentMappingError, ReaderConfigurationError
from fragment_ingestion.reader.extractor import Fragment

TEXT_KEY = "#text"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


@runtime_checkable
class FragmentMapper(Protocol):
    """Protocol for mapping a fragment sub-stream to a domain object."""

    def unmarshal(self, fragment: Fragment) -> Any:
        """Consume the fragment and return the item. Must not return None."""
        ...


def normalize_key(name: str) -> str:
    """'unitPrice' / 'Unit-Price' -> 'unit_price'."""
    return _CAMEL_BOUNDARY.sub(r"_\1", name.strip()).replace("-", "_").lower()


def _is_element(node: Any) -> bool:
    # Comments and PIs carry a callable tag
    return isinstance(node.tag, str)


def element_to_dict(
    element: Any,
    *,
    normalize_keys: bool = False,
    attribute_prefix: str = "@",
) -> dict[str, Any]:
    """Convert an element subtree to nested dicts.

    Leaf children become stripped text (None when empty), complex children
    become dicts, repeated children become lists. Namespaces are dropped from
    keys.
    """

    def key(name: Any) -> str:
        local = etree.QName(name).localname
        return normalize_key(local) if normalize_keys else local

    record: dict[str, Any] = {}
    for name, value in element.attrib.items():
        record[f"{attribute_prefix}{key(name)}"] = value

    repeated: set[str] = set()
    children = [child for child in element if _is_element(child)]
    for child in children:
        child_key = key(child)
        value = _child_value(child, normalize_keys, attribute_prefix)
        if child_key not in record:
            record[child_key] = value
        elif child_key in repeated:
            record[child_key].append(value)
        else:
            record[child_key] = [record[child_key], value]
            repeated.add(child_key)

    text = (element.text or "").strip()
    if text:
        record[TEXT_KEY] = text
    return record


def _child_value(child: Any, normalize_keys: bool, attribute_prefix: str) -> Any:
    has_children = any(_is_element(grandchild) for grandchild in child)
    if not has_children and not child.attrib:
        text = (child.text or "").strip()
        return text or None
    return element_to_dict(
        child, normalize_keys=normalize_keys, attribute_prefix=attribute_prefix
    )


class ElementDictMapper:
    """Map each fragment to a dict record."""

    def __init__(self, normalize_keys: bool = False):
        self._normalize_keys = normalize_keys

    def unmarshal(self, fragment: Fragment) -> dict[str, Any]:
        return element_to_dict(fragment.element, normalize_keys=self._normalize_keys)


def _detach(element: Any) -> Any:
    detached = copy.deepcopy(element)
    detached.tail = None
    return detached


class ElementMapper:
    """Map each fragment to a detached copy of its element."""

    def unmarshal(self, fragment: Fragment) -> Any:
        return _detach(fragment.element)


class CallableMapper:
    """Adapt a plain ``element -> item`` function to the mapper protocol.

    An lxml element returned by the function (the fragment root or any node
    inside it) is copied, since the reader clears the subtree afterwards.
    """

    def __init__(self, func: Callable[[Any], Any]):
        self._func = func

    def unmarshal(self, fragment: Fragment) -> Any:
        result = self._func(fragment.element)
        if etree.iselement(result):
            return _detach(result)
        return result


class ObjectMapper:
    """Build a domain object from the fragment's dict form.

    Attributes and children become keyword arguments (attribute names
    without a prefix; children override attributes of the same name).
    """

    def __init__(self, factory: Callable[..., Any], normalize_keys: bool = True):
        self._factory = factory
        self._normalize_keys = normalize_keys

    def unmarshal(self, fragment: Fragment) -> Any:
        record = element_to_dict(
            fragment.element,
            normalize_keys=self._normalize_keys,
            attribute_prefix="",
        )
        record.pop(TEXT_KEY, None)
        try:
            return self._factory(**record)
        except (TypeError, ValueError) as exc:
            raise FragmentMappingError(fragment.index, str(exc)) from exc


def _dict_mapper(normalize_keys: bool) -> FragmentMapper:
    return ElementDictMapper(normalize_keys=normalize_keys)


def _element_mapper(normalize_keys: bool) -> FragmentMapper:
    return ElementMapper()


MAPPERS: dict[str, Callable[[bool], FragmentMapper]] = {
    "dict": _dict_mapper,
    "element": _element_mapper,
}


def mapper_for(name: str, *, normalize_keys: bool = False) -> FragmentMapper:
    """Look up a stock mapper by its configuration name."""
    factory = MAPPERS.get(name)
    if factory is None:
        raise ReaderConfigurationError(
            "mapper", f"unknown mapper {name!r}; expected one of {sorted(MAPPERS)}"
        )
    return factory(normalize_keys)
