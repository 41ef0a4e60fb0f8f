from enum import IntEnum
from typing import Dict, List

import pytest
from bs4 import Tag
from pydantic import BaseModel
from sample_models import (
    Author,
    Byline,
    Color,
    Headline,
    Link,
    Listing,
    Page,
    Post,
    Product,
    Row,
    Swatch,
    Untagged,
    WithCallback,
)

from structscrape.api import parse_document
from structscrape.config import ExtractionSettings
from structscrape.engine import TagExtractor, extract_by_tags, map_from_tags
from structscrape.errors import (
    AttributeNotFoundError,
    CoercionError,
    MarkupExtractionError,
    NestedExtractionError,
    SelectionFindError,
    UnsupportedFieldKindError,
)
from structscrape.fields import css

LISTING_HTML = """
<ul>
  <li data-id="1"><a href="/a">A</a></li>
  <li><a href="/b">B</a></li>
  <li data-id="3"><a>C</a></li>
</ul>
"""

PRODUCT_HTML = """
<div class="product">
  <span class="name"> Widget </span>
  <span class="price"> 9.50 </span>
  <span class="stock" data-available="yes">12</span>
  <div class="desc"><p>Nice <b>thing</b></p></div>
</div>
"""


def test_text_and_attribute_fields():
    root = parse_document('<div><h1>Title</h1><a href="/x">link</a></div>')
    page = extract_by_tags(root, Page)
    assert page.title == "Title"
    assert page.href == "/x"


def test_missing_attribute_on_scalar_field_is_fatal():
    root = parse_document("<div><h1>Title</h1><a>link</a></div>")
    with pytest.raises(AttributeNotFoundError) as info:
        extract_by_tags(root, Page)
    assert info.value.attr_name == "href"


def test_scalar_sequence_skips_elements_missing_the_attribute():
    listing = extract_by_tags(parse_document(LISTING_HTML), Listing)
    assert listing.ids == ["1", "3"]


def test_record_sequence_skips_elements_that_fail():
    listing = extract_by_tags(parse_document(LISTING_HTML), Listing)
    assert listing.links == [Link(text="A", href="/a"), Link(text="B", href="/b")]


def test_nested_record():
    root = parse_document('<div class="author"><span>Name</span></div>')
    post = extract_by_tags(root, Post)
    assert post.author == Author(name="Name")


def test_nested_failure_is_wrapped_with_field_path():
    root = parse_document('<div class="author"><span>no link</span></div>')
    with pytest.raises(NestedExtractionError) as info:
        extract_by_tags(root, Byline)
    assert info.value.path == "author"
    assert isinstance(info.value.root_cause, AttributeNotFoundError)


def test_extraction_is_idempotent():
    root = parse_document(LISTING_HTML)
    assert extract_by_tags(root, Listing) == extract_by_tags(root, Listing)
    assert map_from_tags(root, Listing) == map_from_tags(root, Listing)


def test_unsupported_field_kind_aborts_whole_record():
    root = parse_document("<h1>Title</h1>")
    extractor = TagExtractor(WithCallback)
    with pytest.raises(UnsupportedFieldKindError) as info:
        extractor.collect(root)
    assert info.value.field == "callback"
    with pytest.raises(UnsupportedFieldKindError):
        extract_by_tags(root, WithCallback)


def test_scalar_coercion_is_lenient():
    product = extract_by_tags(parse_document(PRODUCT_HTML), Product)
    assert product.name == " Widget "
    assert product.price == 9.5
    assert product.stock == 12
    assert product.in_stock is True
    assert product.description == "<p>Nice <b>thing</b></p>"
    assert product.sku is None


def test_strip_text_setting():
    settings = ExtractionSettings(strip_text=True)
    product = extract_by_tags(parse_document(PRODUCT_HTML), Product, settings)
    assert product.name == "Widget"


def test_empty_numeric_text_becomes_zero():
    html = PRODUCT_HTML.replace(" 9.50 ", "").replace(">12<", "><")
    product = extract_by_tags(parse_document(html), Product)
    assert product.price == 0.0
    assert product.stock == 0


def test_empty_numeric_text_fails_without_weak_decode():
    html = PRODUCT_HTML.replace(" 9.50 ", "")
    with pytest.raises(CoercionError) as info:
        extract_by_tags(parse_document(html), Product, ExtractionSettings(weak_decode=False))
    assert info.value.details[0]["loc"] == ("price",)


def test_non_numeric_text_fails_coercion():
    html = PRODUCT_HTML.replace(">12<", ">lots<")
    with pytest.raises(CoercionError):
        extract_by_tags(parse_document(html), Product)


def test_enum_and_dataclass_destinations():
    swatch = extract_by_tags(parse_document('<i class="swatch" data-color="blue"></i>'), Swatch)
    assert swatch.color is Color.BLUE

    row = extract_by_tags(parse_document("<table><tr><th>Total</th><td> 1</td><td>2 </td></tr></table>"), Row)
    assert row == Row(label="Total", cells=[1, 2])


def test_existing_instance_is_updated_in_place():
    headline = Headline(source="wire")
    result = extract_by_tags(parse_document("<h1>Breaking</h1>"), headline)
    assert result is headline
    assert headline.title == "Breaking"
    assert headline.source == "wire"


def test_type_without_tagged_fields():
    root = parse_document("<p>nothing to see</p>")
    assert map_from_tags(root, Untagged) == {}
    assert extract_by_tags(root, Untagged) == Untagged()


def test_map_from_tags_returns_loose_values():
    values = map_from_tags(parse_document(LISTING_HTML), Listing)
    assert values == {
        "links": [{"text": "A", "href": "/a"}, {"text": "B", "href": "/b"}],
        "ids": ["1", "3"],
    }


def test_invalid_selector_is_fatal():
    class Broken(BaseModel):
        link: str = css("a[href;text")

    with pytest.raises(SelectionFindError):
        extract_by_tags(parse_document("<a href='/'>x</a>"), Broken)


def test_custom_tag_key():
    class Custom(BaseModel):
        title: str = css("h1;text", key="sel")

    settings = ExtractionSettings(tag_key="sel")
    assert extract_by_tags(parse_document("<h1>Hi</h1>"), Custom, settings).title == "Hi"
    assert map_from_tags(parse_document("<h1>Hi</h1>"), Custom) == {}


FRAGMENTS_HTML = """
<ul>
  <li id="first">a</li>
  <li id="bad">b</li>
  <li id="last">c</li>
</ul>
"""


@pytest.fixture
def unrenderable_bad_node(monkeypatch):
    render = Tag.decode_contents

    def decode_contents(self, *args, **kwargs):
        if self.get("id") == "bad":
            raise RecursionError("maximum recursion depth exceeded")
        return render(self, *args, **kwargs)

    monkeypatch.setattr(Tag, "decode_contents", decode_contents)


def test_markup_failure_on_scalar_field_is_fatal(unrenderable_bad_node):
    class Fragment(BaseModel):
        body: str = css("#bad;html")

    with pytest.raises(MarkupExtractionError):
        extract_by_tags(parse_document(FRAGMENTS_HTML), Fragment)


def test_markup_failure_inside_sequence_drops_the_element(unrenderable_bad_node):
    class Fragments(BaseModel):
        parts: List[str] = css("li;html")

    assert extract_by_tags(parse_document(FRAGMENTS_HTML), Fragments).parts == ["a", "c"]


def test_schema_errors_inside_record_sequence_elements_are_skipped():
    class BadTag(BaseModel):
        name: str = css("span;bogus")

    class BadKind(BaseModel):
        meta: Dict[str, str] = css("span;text")

    class Holder(BaseModel):
        tagged: List[BadTag] = css("li;obj")
        kinded: List[BadKind] = css("li;obj")

    holder = extract_by_tags(parse_document(FRAGMENTS_HTML), Holder)
    assert holder.tagged == []
    assert holder.kinded == []


def test_empty_text_on_int_enum_field_reports_coercion_error():
    class Level(IntEnum):
        LOW = 1
        HIGH = 2

    class Rating(BaseModel):
        level: Level = css(".level;text")

    with pytest.raises(CoercionError) as info:
        extract_by_tags(parse_document('<span class="level"></span>'), Rating)
    assert info.value.details[0]["loc"] == ("level",)
