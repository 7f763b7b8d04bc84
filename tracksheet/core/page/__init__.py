"""
Page geometry and overlay layout for the document surface.
"""
from .geometry import PageGeometry, Position, map_pointer
from .overlay import OverlayMarker, hit_test, layout_markers

__all__ = [
    "PageGeometry",
    "Position",
    "map_pointer",
    "OverlayMarker",
    "layout_markers",
    "hit_test",
]
