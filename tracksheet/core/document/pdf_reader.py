"""
PDF loading and page rendering for the document surface.
"""
import logging
from typing import List, Optional

import fitz  # PyMuPDF
from PyQt5.QtGui import QImage, QPixmap

from ..errors import DocumentParseError
from .backend import PageSize

logger = logging.getLogger(__name__)


class PDFDocumentReader:
    """Holds the displayed document and renders its pages."""

    def __init__(self):
        self.doc: Optional[fitz.Document] = None
        self.total_pages: int = 0
        self.page_sizes: List[PageSize] = []

    def load_bytes(self, data: bytes) -> int:
        """
        Load a PDF from memory.

        Returns:
            Number of pages

        Raises:
            DocumentParseError: If data is not a readable PDF
        """
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as exc:
            raise DocumentParseError(f"Not a valid PDF document: {exc}") from exc

        if not doc.is_pdf:
            doc.close()
            raise DocumentParseError("Document is not a PDF")
        if doc.page_count == 0:
            doc.close()
            raise DocumentParseError("Document has no pages")

        self.close_document()
        self.doc = doc
        self.total_pages = doc.page_count
        self.page_sizes = [PageSize(page.rect.width, page.rect.height) for page in doc]
        logger.debug("Loaded document with %d page(s)", self.total_pages)
        return self.total_pages

    def is_loaded(self) -> bool:
        return self.doc is not None

    def close_document(self) -> None:
        if self.doc:
            self.doc.close()
            self.doc = None
        self.total_pages = 0
        self.page_sizes = []

    def render_page(self, page_index: int, zoom: float) -> Optional[QPixmap]:
        """
        Render one page at the given zoom factor.

        Args:
            page_index: 0-based index of the page to render
            zoom: Pixels per PDF point

        Returns:
            The rendered pixmap, or None if the page does not exist
        """
        if not self.doc or not 0 <= page_index < self.total_pages:
            return None

        page = self.doc.load_page(page_index)
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        img = QImage(pix.samples, pix.width, pix.height, pix.stride, QImage.Format_RGB888)
        # QImage does not own pix.samples; copy before pix is released
        return QPixmap.fromImage(img.copy())
