"""
Document library boundary used by the compositor.

All coordinates passed to a backend are in the PDF's native space:
points, origin at the bottom-left corner of the page as displayed.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Tuple

Color = Tuple[float, float, float]  # RGB, each 0..1


@dataclass(frozen=True)
class PageSize:
    width: float
    height: float


@dataclass(frozen=True)
class TextMetrics:
    """Measured extent of one line of text, in points."""
    width: float
    ascent: float  # above the baseline
    descent: float  # below the baseline, positive

    @property
    def height(self) -> float:
        return self.ascent + self.descent


@dataclass(frozen=True)
class FontHandle:
    """An embedded font, valid for the backend that produced it."""
    base_font: str
    ref: Any = None


class DocumentBackend(ABC):
    """
    One composition session: a parsed source and a new output document.

    A backend instance is used for exactly one export and then closed.
    """

    @abstractmethod
    def parse(self, data: bytes) -> int:
        """
        Parse the source document.

        Returns:
            Number of pages in the source

        Raises:
            DocumentParseError: If data is not a readable PDF
        """

    @abstractmethod
    def copy_pages(self) -> List[PageSize]:
        """Create the output document with a copy of every source page."""

    @abstractmethod
    def embed_font(self, base_font: str) -> FontHandle:
        """Embed a standard font into the output document."""

    @abstractmethod
    def measure_text(self, font: FontHandle, text: str, size: float) -> TextMetrics:
        pass

    @abstractmethod
    def draw_rect(self, page_index: int, x: float, y: float, width: float,
                  height: float, fill: Color) -> None:
        """Fill a rectangle whose bottom-left corner is (x, y)."""

    @abstractmethod
    def draw_text(self, page_index: int, font: FontHandle, text: str, x: float,
                  y: float, size: float, color: Color) -> None:
        """Draw one line of text with its baseline starting at (x, y)."""

    @abstractmethod
    def draw_image(self, page_index: int, x: float, y: float, width: float,
                   height: float, data: bytes) -> None:
        """Draw an image into the box whose bottom-left corner is (x, y)."""

    @abstractmethod
    def serialize(self) -> bytes:
        """Return the output document as PDF bytes."""

    def close(self) -> None:
        """Release library resources."""
