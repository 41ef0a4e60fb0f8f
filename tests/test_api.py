import io

import pytest
from sample_models import Listing, Page

from structscrape import extract_html_reader, extract_html_string, map_html_string, parse_document
from structscrape.config import ExtractionSettings
from structscrape.errors import DocumentParseError

DOC = '<html><body><div><h1>Title</h1><a href="/x">link</a></div></body></html>'


def test_extract_from_string_and_bytes():
    assert extract_html_string(DOC, Page) == Page(title="Title", href="/x")
    assert extract_html_string(DOC.encode("utf-8"), Page) == Page(title="Title", href="/x")


def test_extract_from_binary_and_text_readers():
    assert extract_html_reader(io.BytesIO(DOC.encode("utf-8")), Page).href == "/x"
    assert extract_html_reader(io.StringIO(DOC), Page).title == "Title"


def test_html_parser_builder():
    settings = ExtractionSettings(parser="html.parser")
    assert extract_html_string(DOC, Page, settings).title == "Title"


def test_declared_encoding_for_bytes():
    settings = ExtractionSettings(encoding="latin-1")
    page = extract_html_string('<h1>Caf\xe9</h1><a href="/c">c</a>'.encode("latin-1"), Page, settings)
    assert page.title == "Caf\xe9"


def test_map_html_string():
    values = map_html_string('<ul><li data-id="9"><a href="/z">Z</a></li></ul>', Listing)
    assert values == {"links": [{"text": "Z", "href": "/z"}], "ids": ["9"]}


def test_rejects_non_document_input():
    with pytest.raises(DocumentParseError):
        parse_document(12345)


def test_unknown_tree_builder():
    with pytest.raises(DocumentParseError, match="no-such-builder"):
        parse_document(DOC, ExtractionSettings(parser="no-such-builder"))


def test_unreadable_stream():
    class BrokenReader:
        def read(self):
            raise OSError("disk on fire")

    with pytest.raises(DocumentParseError, match="disk on fire"):
        extract_html_reader(BrokenReader(), Page)


def test_undecodable_bytes_for_declared_encoding():
    with pytest.raises(DocumentParseError, match="utf-8"):
        parse_document("<h1>Caf\xe9</h1>".encode("latin-1"), ExtractionSettings(encoding="utf-8"))
    with pytest.raises(DocumentParseError, match="no-such-codec"):
        parse_document(b"<h1>x</h1>", ExtractionSettings(encoding="no-such-codec"))
