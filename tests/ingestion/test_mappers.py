"""Tests for stock fragment mappers and fragment root names."""

from dataclasses import dataclass

import pytest
from lxml import etree

from fragment_kernel.exceptions import FragmentMappingError, ReaderConfigurationError
from fragment_ingestion.reader import (
    BytesResource,
    CallableMapper,
    ElementDictMapper,
    ElementMapper,
    FragmentItemReader,
    FragmentMapper,
    FragmentRootName,
    ObjectMapper,
    element_to_dict,
    mapper_for,
)
from fragment_ingestion.reader.mappers import normalize_key


def _read(doc: bytes, mapper, root: str = "product") -> list:
    with FragmentItemReader(BytesResource(doc), root, mapper) as reader:
        return list(reader)


PRODUCTS = b"""<catalog xmlns:p="urn:products">
  <product id="p1" status="active">
    <name>Pen</name>
    <unitPrice>1.50</unitPrice>
    <tag>office</tag>
    <tag>cheap</tag>
    <supplier code="S1"><name>Acme</name></supplier>
    <p:note>  spaced  </p:note>
    <empty/>
  </product>
  <product id="p2"><name>Ink</name><unitPrice>9.00</unitPrice></product>
</catalog>"""


@dataclass
class Product:
    id: str
    name: str
    unit_price: str


class TestElementToDict:
    def test_attributes_children_and_repeats(self):
        element = etree.fromstring(PRODUCTS)[0]
        assert element_to_dict(element) == {
            "@id": "p1",
            "@status": "active",
            "name": "Pen",
            "unitPrice": "1.50",
            "tag": ["office", "cheap"],
            "supplier": {"@code": "S1", "name": "Acme"},
            "note": "spaced",
            "empty": None,
        }

    def test_normalized_keys(self):
        element = etree.fromstring(b"<r ItemCode='1'><unitPrice>2</unitPrice><Unit-Name>x</Unit-Name></r>")
        assert element_to_dict(element, normalize_keys=True) == {
            "@item_code": "1",
            "unit_price": "2",
            "unit_name": "x",
        }

    def test_mixed_text_is_kept(self):
        element = etree.fromstring(b"<r lang='en'>hello</r>")
        assert element_to_dict(element) == {"@lang": "en", "#text": "hello"}

    @pytest.mark.parametrize(
        "raw, expected",
        [("unitPrice", "unit_price"), ("Unit-Price", "unit_price"), ("id", "id"), ("SKU2Code", "sku2_code")],
    )
    def test_normalize_key(self, raw, expected):
        assert normalize_key(raw) == expected


class TestStockMappers:
    def test_dict_mapper_reads_records(self):
        items = _read(PRODUCTS, ElementDictMapper())
        assert [item["@id"] for item in items] == ["p1", "p2"]
        assert items[1] == {"@id": "p2", "name": "Ink", "unitPrice": "9.00"}

    def test_element_mapper_returns_detached_copies(self):
        items = _read(PRODUCTS, ElementMapper())
        assert [item.get("id") for item in items] == ["p1", "p2"]
        assert items[0].getparent() is None
        assert items[0].findtext("name") == "Pen"
        assert items[0].tail is None

    def test_callable_mapper(self):
        items = _read(PRODUCTS, CallableMapper(lambda element: element.findtext("name")))
        assert items == ["Pen", "Ink"]

    def test_callable_mapper_returning_the_fragment_element_keeps_its_content(self):
        items = _read(PRODUCTS, CallableMapper(lambda element: element))
        assert [item.get("id") for item in items] == ["p1", "p2"]
        assert items[0].findtext("name") == "Pen"
        assert len(items[0]) == 7
        assert items[0].getparent() is None
        assert items[1].findtext("unitPrice") == "9.00"

    def test_callable_mapper_returning_a_child_element_keeps_its_content(self):
        doc = (
            b"<c><product><supplier code='S1'><name>Acme</name></supplier></product>"
            b"<product><supplier code='S2'><name>Bolt</name></supplier></product></c>"
        )
        items = _read(doc, CallableMapper(lambda element: element.find("supplier")))
        assert [item.get("code") for item in items] == ["S1", "S2"]
        assert [item.findtext("name") for item in items] == ["Acme", "Bolt"]

    def test_object_mapper_builds_domain_objects(self):
        doc = b"<c><product id='p1'><name>Pen</name><unitPrice>1.50</unitPrice></product></c>"
        assert _read(doc, ObjectMapper(Product)) == [Product(id="p1", name="Pen", unit_price="1.50")]

    def test_object_mapper_wraps_construction_errors(self):
        doc = (
            b"<c><product id='p1'><name>Pen</name><unitPrice>1</unitPrice></product>"
            b"<product id='p2'><name>Ink</name></product></c>"
        )
        with FragmentItemReader(BytesResource(doc), "product", ObjectMapper(Product)) as reader:
            assert reader.read().id == "p1"
            with pytest.raises(FragmentMappingError) as exc_info:
                reader.read()
        assert exc_info.value.fragment_index == 1
        assert "unit_price" in exc_info.value.reason

    @pytest.mark.parametrize("mapper", [ElementDictMapper(), ElementMapper(), CallableMapper(len), ObjectMapper(dict)])
    def test_stock_mappers_implement_protocol(self, mapper):
        assert isinstance(mapper, FragmentMapper)

    def test_mapper_for_known_names(self):
        assert isinstance(mapper_for("dict"), ElementDictMapper)
        assert isinstance(mapper_for("element"), ElementMapper)

    def test_mapper_for_unknown_name(self):
        with pytest.raises(ReaderConfigurationError) as exc_info:
            mapper_for("jaxb")
        assert exc_info.value.setting == "mapper"


class TestFragmentRootName:
    def test_plain_name(self):
        name = FragmentRootName.parse("item")
        assert name == FragmentRootName(local_part="item")
        assert str(name) == "item"

    def test_clark_notation_splits_namespace(self):
        name = FragmentRootName.parse("{urn:example}item")
        assert name.namespace == "urn:example"
        assert name.local_part == "item"
        assert str(name) == "{urn:example}item"

    def test_empty_braces_mean_no_namespace(self):
        name = FragmentRootName.parse("{}item")
        assert name.namespace == ""
        assert name.matches(etree.QName("item"))
        assert not name.matches(etree.QName("urn:example", "item"))

    def test_matching(self):
        qualified = FragmentRootName.parse("{urn:example}item")
        assert qualified.matches(etree.QName("urn:example", "item"))
        assert not qualified.matches(etree.QName("urn:other", "item"))
        assert not qualified.matches(etree.QName("item"))
        assert not qualified.matches(etree.QName("urn:example", "items"))
        assert qualified.matches_local(etree.QName("urn:other", "item"))

        unqualified = FragmentRootName.parse("item")
        assert unqualified.matches(etree.QName("urn:other", "item"))
        assert unqualified.matches(etree.QName("item"))

    @pytest.mark.parametrize("text", ["", " ", "{urn:example}", "{urn:example item", "urn}item", "{a}{b}item"])
    def test_invalid_names(self, text):
        with pytest.raises(ReaderConfigurationError):
            FragmentRootName.parse(text)
