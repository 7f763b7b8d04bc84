"""
Standard PDF base fonts and their metrics.
"""
from functools import lru_cache

import fitz  # PyMuPDF

# Base-14 font name -> PyMuPDF built-in font code
BASE_FONT_CODES = {
    "Helvetica": "helv",
    "Times-Roman": "tiro",
    "Courier": "cour",
}


@lru_cache(maxsize=None)
def load_base_font(base_font: str) -> fitz.Font:
    """
    Load the built-in PyMuPDF font for a base-14 name.

    Raises:
        KeyError: If the font is not one of the supported base fonts
    """
    return fitz.Font(BASE_FONT_CODES[base_font])


def text_width(text: str, base_font: str, size: float) -> float:
    """Advance width of a single line of text at the given size."""
    return load_base_font(base_font).text_length(text, fontsize=size)
