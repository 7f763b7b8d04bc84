"""
PyMuPDF implementation of the document backend.
"""
import logging
from typing import Dict, List, Optional

import fitz  # PyMuPDF

from ..errors import DocumentParseError
from .backend import Color, DocumentBackend, FontHandle, PageSize, TextMetrics
from .fonts import BASE_FONT_CODES, load_base_font

logger = logging.getLogger(__name__)


class PyMuPDFBackend(DocumentBackend):
    """Composes the output document with PyMuPDF (fitz)."""

    def __init__(self, garbage: int = 4, deflate: bool = True):
        self.garbage = garbage
        self.deflate = deflate
        self.source: Optional[fitz.Document] = None
        self.output: Optional[fitz.Document] = None
        self._fonts: Dict[str, FontHandle] = {}

    def parse(self, data: bytes) -> int:
        if not data:
            raise DocumentParseError("Source document is empty")
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as exc:
            # fitz.FileDataError derives from RuntimeError
            raise DocumentParseError(f"Not a valid PDF document: {exc}") from exc

        if not doc.is_pdf:
            doc.close()
            raise DocumentParseError("Source document is not a PDF")
        if doc.needs_pass:
            doc.close()
            raise DocumentParseError("Source document is password protected")
        if doc.page_count == 0:
            doc.close()
            raise DocumentParseError("Source document has no pages")

        self.source = doc
        return doc.page_count

    def copy_pages(self) -> List[PageSize]:
        if self.source is None:
            raise RuntimeError("parse() must be called before copy_pages()")
        self.output = fitz.open()
        try:
            self.output.insert_pdf(self.source)
        except (RuntimeError, ValueError) as exc:
            raise DocumentParseError(f"Could not copy source pages: {exc}") from exc
        return [PageSize(page.rect.width, page.rect.height) for page in self.output]

    def embed_font(self, base_font: str) -> FontHandle:
        # Base-14 fonts are referenced by code; PyMuPDF adds the font
        # resource to a page the first time text is inserted there.
        if base_font not in self._fonts:
            if base_font not in BASE_FONT_CODES:
                raise ValueError(f"Unsupported base font: {base_font}")
            self._fonts[base_font] = FontHandle(base_font, BASE_FONT_CODES[base_font])
        return self._fonts[base_font]

    def measure_text(self, font: FontHandle, text: str, size: float) -> TextMetrics:
        metrics = load_base_font(font.base_font)
        return TextMetrics(
            width=metrics.text_length(text, fontsize=size),
            ascent=metrics.ascender * size,
            descent=-metrics.descender * size,
        )

    def _page(self, page_index: int) -> fitz.Page:
        if self.output is None:
            raise RuntimeError("copy_pages() must be called before drawing")
        return self.output[page_index]

    @staticmethod
    def _to_page_rect(page: fitz.Page, x: float, y: float, width: float,
                      height: float) -> fitz.Rect:
        # Bottom-left origin -> PyMuPDF top-left origin, then undo page rotation
        page_height = page.rect.height
        rect = fitz.Rect(x, page_height - (y + height), x + width, page_height - y)
        return rect * page.derotation_matrix

    def draw_rect(self, page_index: int, x: float, y: float, width: float,
                  height: float, fill: Color) -> None:
        page = self._page(page_index)
        rect = self._to_page_rect(page, x, y, width, height)
        page.draw_rect(rect, color=None, fill=fill, width=0, overlay=True)

    def draw_text(self, page_index: int, font: FontHandle, text: str, x: float,
                  y: float, size: float, color: Color) -> None:
        page = self._page(page_index)
        point = fitz.Point(x, page.rect.height - y) * page.derotation_matrix
        page.insert_text(
            point,
            text,
            fontname=font.ref,
            fontsize=size,
            color=color,
            rotate=page.rotation,
            overlay=True,
        )

    def draw_image(self, page_index: int, x: float, y: float, width: float,
                   height: float, data: bytes) -> None:
        page = self._page(page_index)
        rect = self._to_page_rect(page, x, y, width, height)
        page.insert_image(rect, stream=data, keep_proportion=False, overlay=True)

    def serialize(self) -> bytes:
        if self.output is None:
            raise RuntimeError("copy_pages() must be called before serialize()")
        return self.output.tobytes(garbage=self.garbage, deflate=self.deflate)

    def close(self) -> None:
        for doc in (self.output, self.source):
            if doc is not None and not doc.is_closed:
                doc.close()
        self.output = None
        self.source = None
