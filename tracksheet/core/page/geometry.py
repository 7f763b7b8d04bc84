"""
Conversion between display-surface pixels and fractional page positions.

The display surface stacks every page of the document vertically inside
one container. Pages are assumed to share the same height, so the page a
pixel falls on is found by dividing the container height evenly.
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from ..annotations.models import clamp_fraction


@dataclass(frozen=True)
class Position:
    """Resolution-independent position on a page (top-left origin)."""
    page_index: int
    x_fraction: float
    y_fraction: float


@dataclass(frozen=True)
class PageGeometry:
    """
    Snapshot of the display container at the time of one interaction.

    Build a fresh one for every event; zoom and container size can change
    between clicks.
    """
    left: float
    top: float
    width: float
    height: float
    page_count: Optional[int] = None
    scale: float = 1.0  # screen pixels per PDF point, used for marker sizes

    @property
    def effective_page_count(self) -> int:
        # Unknown page count is treated as a single page
        if not self.page_count or self.page_count < 1:
            return 1
        return int(self.page_count)

    @property
    def page_height_px(self) -> float:
        return self.height / self.effective_page_count

    @property
    def is_usable(self) -> bool:
        return self.width > 0 and self.height > 0

    def pointer_to_position(self, client_x: float, client_y: float) -> Optional[Position]:
        """
        Map a pointer location to a page position.

        Locations outside the container are clamped onto the nearest page
        edge. Returns None if the container has no area.
        """
        if not self.is_usable:
            return None

        offset_x = client_x - self.left
        offset_y = client_y - self.top
        page_height = self.page_height_px
        page_count = self.effective_page_count

        page_index = int(math.floor(offset_y / page_height))
        page_index = max(0, min(page_count - 1, page_index))

        y_fraction = clamp_fraction((offset_y - page_index * page_height) / page_height)
        x_fraction = clamp_fraction(offset_x / self.width)
        return Position(page_index, x_fraction, y_fraction)

    def position_to_screen(self, position: Position) -> Tuple[float, float]:
        """Container-relative pixel location of a position."""
        page_height = self.page_height_px
        left = position.x_fraction * self.width
        top = position.page_index * page_height + position.y_fraction * page_height
        return left, top

    def position_to_client(self, position: Position) -> Tuple[float, float]:
        left, top = self.position_to_screen(position)
        return self.left + left, self.top + top

    def page_box(self, page_index: int) -> Tuple[float, float, float, float]:
        """Container-relative (x, y, width, height) of one page."""
        page_height = self.page_height_px
        return 0.0, page_index * page_height, self.width, page_height


def map_pointer(geometry: Optional[PageGeometry], client_x: float,
                client_y: float) -> Optional[Position]:
    """
    Map a pointer event to a page position.

    Returns None when no document is loaded (no geometry) or the surface
    has no area.
    """
    if geometry is None:
        return None
    return geometry.pointer_to_position(client_x, client_y)
