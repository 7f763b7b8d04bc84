"""Tests for loading documents into the page renderer."""

import pytest

from conftest import make_pdf
from tracksheet.core.document.pdf_reader import PDFDocumentReader
from tracksheet.core.errors import DocumentParseError


def test_load_bytes_reports_pages_and_sizes():
    reader = PDFDocumentReader()

    assert reader.load_bytes(make_pdf(pages=2, width=400, height=500)) == 2
    assert [(s.width, s.height) for s in reader.page_sizes] == [(400, 500)] * 2
    reader.close_document()


@pytest.mark.parametrize("data", [b"<html>not a pdf</html>", b"plain text notes"])
def test_load_bytes_rejects_other_documents(data):
    reader = PDFDocumentReader()

    with pytest.raises(DocumentParseError):
        reader.load_bytes(data)

    assert not reader.is_loaded()


def test_failed_load_keeps_current_document():
    reader = PDFDocumentReader()
    reader.load_bytes(make_pdf(pages=3))

    with pytest.raises(DocumentParseError):
        reader.load_bytes(b"<html></html>")

    assert reader.total_pages == 3
    reader.close_document()
