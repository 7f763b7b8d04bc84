"""
Annotation data model.

Positions are stored as a page index plus fractional offsets into the
page box (top-left origin), so they survive zoom and resize.
"""
import base64
import binascii
import math
import re
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

from ..errors import InvalidAnnotationError


class AnnotationKind(Enum):
    TEXT = "text"
    IMAGE = "image"


# Editor font family -> standard PDF base font used for export
FONT_FAMILIES = {
    "Helvetica": "Helvetica",
    "Arial": "Helvetica",
    "Tahoma": "Helvetica",
    "Calibri": "Helvetica",
    "Verdana": "Helvetica",
    "Trebuchet MS": "Helvetica",
    "Comic Sans MS": "Helvetica",
    "Impact": "Helvetica",
    "Times": "Times-Roman",
    "Times New Roman": "Times-Roman",
    "Georgia": "Times-Roman",
    "Courier": "Courier",
    "Courier New": "Courier",
}

DEFAULT_TEXT = "Edit me"
DEFAULT_FONT_FAMILY = "Helvetica"
DEFAULT_FONT_COLOR = "#000000"
DEFAULT_FONT_SIZE = 12
MIN_FONT_SIZE = 6
MAX_FONT_SIZE = 96

_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{6})$")
_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=.+-]+)*;base64,(?P<payload>.*)$", re.DOTALL)


def new_annotation_id() -> str:
    return uuid.uuid4().hex


def clamp_fraction(value: float) -> float:
    """Clamp a fractional coordinate into [0, 1]."""
    value = float(value)
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def clamp_font_size(size) -> int:
    """Clamp a font size to the supported point range."""
    try:
        size = int(size)
    except (TypeError, ValueError):
        return DEFAULT_FONT_SIZE
    return max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, size))


def parse_hex_color(value: str) -> Tuple[int, int, int]:
    """
    Parse a '#RRGGBB' string.

    Raises:
        InvalidAnnotationError: If the string is not a six digit hex color
    """
    match = _HEX_COLOR.match(value or "")
    if not match:
        raise InvalidAnnotationError(f"Invalid color {value!r}, expected #RRGGBB")
    digits = match.group(1)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def encode_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(url: str) -> bytes:
    """
    Decode a base64 'data:' URL to raw bytes.

    Raises:
        ValueError: If the URL is not a base64 data URL
    """
    match = _DATA_URL.match(url or "")
    if not match:
        raise ValueError("not a base64 data URL")
    try:
        return base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"corrupt base64 payload: {exc}") from exc


@dataclass
class Annotation:
    """A single placed mark on one page of a document."""
    page_index: int  # 0-based page index
    x_fraction: float  # 0..1 from the left edge
    y_fraction: float  # 0..1 from the top edge
    text: str = DEFAULT_TEXT
    font_size: int = DEFAULT_FONT_SIZE
    font_family: str = DEFAULT_FONT_FAMILY
    font_color: str = DEFAULT_FONT_COLOR
    kind: AnnotationKind = AnnotationKind.TEXT

    # Image annotations only
    image_data: Optional[str] = None  # data: URL
    width_fraction: float = 0.0
    height_fraction: float = 0.0

    id: str = field(default_factory=new_annotation_id)

    def __post_init__(self):
        if isinstance(self.kind, str):
            self.kind = AnnotationKind(self.kind)
        if isinstance(self.page_index, bool) or int(self.page_index) != self.page_index:
            raise InvalidAnnotationError(f"Page index must be an integer, got {self.page_index!r}")
        self.page_index = int(self.page_index)
        if self.page_index < 0:
            raise InvalidAnnotationError(f"Page index must be >= 0, got {self.page_index}")

        self.x_fraction = clamp_fraction(self.x_fraction)
        self.y_fraction = clamp_fraction(self.y_fraction)

        if not isinstance(self.font_size, int) or isinstance(self.font_size, bool) \
                or not MIN_FONT_SIZE <= self.font_size <= MAX_FONT_SIZE:
            raise InvalidAnnotationError(
                f"Font size must be an integer between {MIN_FONT_SIZE} and {MAX_FONT_SIZE}, "
                f"got {self.font_size!r}"
            )
        if self.font_family not in FONT_FAMILIES:
            raise InvalidAnnotationError(f"Unknown font family {self.font_family!r}")
        parse_hex_color(self.font_color)

        if self.kind == AnnotationKind.TEXT:
            if not self.text or not self.text.strip():
                raise InvalidAnnotationError("Annotation text must not be empty")
        else:
            if not self.image_data:
                raise InvalidAnnotationError("Image annotation has no image data")
            self.width_fraction = clamp_fraction(self.width_fraction)
            self.height_fraction = clamp_fraction(self.height_fraction)
            if self.width_fraction <= 0 or self.height_fraction <= 0:
                raise InvalidAnnotationError("Image annotation must have a non-zero size")

    @property
    def position(self):
        from ..page.geometry import Position
        return Position(self.page_index, self.x_fraction, self.y_fraction)

    @property
    def base_font(self) -> str:
        """Standard PDF font this annotation is drawn with."""
        return FONT_FAMILIES[self.font_family]

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return parse_hex_color(self.font_color)

    @property
    def is_image(self) -> bool:
        return self.kind == AnnotationKind.IMAGE

    def with_changes(self, **changes) -> "Annotation":
        """
        Return a copy with the given fields replaced.

        The id is never changed. The copy is validated like a new annotation.
        """
        if "id" in changes and changes["id"] != self.id:
            raise InvalidAnnotationError("Annotation id is immutable")
        changes.pop("id", None)
        return replace(self, **changes)

    def to_dict(self):
        """Convert annotation to dictionary for JSON serialization."""
        data = {
            'id': self.id,
            'kind': self.kind.value,
            'page_index': self.page_index,
            'x_fraction': self.x_fraction,
            'y_fraction': self.y_fraction,
            'font_size': self.font_size,
            'font_family': self.font_family,
            'font_color': self.font_color,
        }

        if self.kind == AnnotationKind.TEXT:
            data['text'] = self.text
        else:
            data['image_data'] = self.image_data
            data['width_fraction'] = self.width_fraction
            data['height_fraction'] = self.height_fraction

        return data

    @staticmethod
    def from_dict(data):
        """Create annotation from dictionary."""
        kind = AnnotationKind(data.get('kind', AnnotationKind.TEXT.value))
        kwargs = dict(
            page_index=data['page_index'],
            x_fraction=data['x_fraction'],
            y_fraction=data['y_fraction'],
            font_size=data.get('font_size', DEFAULT_FONT_SIZE),
            font_family=data.get('font_family', DEFAULT_FONT_FAMILY),
            font_color=data.get('font_color', DEFAULT_FONT_COLOR),
            kind=kind,
        )
        if data.get('id'):
            kwargs['id'] = data['id']

        if kind == AnnotationKind.TEXT:
            kwargs['text'] = data.get('text', '')
        else:
            kwargs['image_data'] = data.get('image_data')
            kwargs['width_fraction'] = data.get('width_fraction', 0.0)
            kwargs['height_fraction'] = data.get('height_fraction', 0.0)

        return Annotation(**kwargs)
