"""
Screen-space layout of annotation markers drawn over the document surface.
"""
from dataclasses import dataclass
from typing import Callable, Container, Iterable, List, Optional

from ..annotations.models import Annotation
from ..document.fonts import text_width
from .geometry import PageGeometry

# (text, base font, pixel size) -> pixel width
TextMeasure = Callable[[str, str, float], float]

MARKER_PADDING = 2.0
ASCENT_RATIO = 0.8
DESCENT_RATIO = 0.25


@dataclass
class OverlayMarker:
    """
    A marker box for one annotation.

    (anchor_x, anchor_y) is the annotation's position in container pixels.
    For text it is the left end of the baseline, for images the top-left
    corner, which matches where the exported PDF puts it.
    """
    annotation_id: str
    page_index: int
    anchor_x: float
    anchor_y: float
    x: float
    y: float
    width: float
    height: float
    font_px: float = 0.0

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


def layout_markers(annotations: Iterable[Annotation], geometry: PageGeometry,
                   measure: TextMeasure = text_width,
                   visible_pages: Optional[Container[int]] = None) -> List[OverlayMarker]:
    """
    Compute marker boxes for annotations, in insertion (z) order.

    Annotations on pages outside visible_pages, or beyond the surface's
    page count, get no marker.
    """
    markers = []
    page_height = geometry.page_height_px

    for ann in annotations:
        if ann.page_index >= geometry.effective_page_count:
            continue
        if visible_pages is not None and ann.page_index not in visible_pages:
            continue

        anchor_x, anchor_y = geometry.position_to_screen(ann.position)

        if ann.is_image:
            width = ann.width_fraction * geometry.width
            height = ann.height_fraction * page_height
            markers.append(OverlayMarker(
                ann.id, ann.page_index, anchor_x, anchor_y,
                anchor_x, anchor_y, width, height,
            ))
            continue

        font_px = ann.font_size * geometry.scale
        line = " ".join(ann.text.splitlines())
        width = measure(line, ann.base_font, font_px)
        ascent = font_px * ASCENT_RATIO
        descent = font_px * DESCENT_RATIO
        markers.append(OverlayMarker(
            ann.id, ann.page_index, anchor_x, anchor_y,
            x=anchor_x - MARKER_PADDING,
            y=anchor_y - ascent - MARKER_PADDING,
            width=width + 2 * MARKER_PADDING,
            height=ascent + descent + 2 * MARKER_PADDING,
            font_px=font_px,
        ))

    return markers


def hit_test(markers: List[OverlayMarker], x: float, y: float) -> Optional[OverlayMarker]:
    """Topmost marker under a container-relative point, or None."""
    for marker in reversed(markers):
        if marker.contains(x, y):
            return marker
    return None
