"""
Display surface: every page of the document stacked in one widget, with
annotation markers painted on top.
"""
import logging
from typing import Dict, List, Optional

from PyQt5.QtCore import QPointF, QRectF, QSize, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QFont, QMouseEvent, QPainter, QPen, QPixmap
from PyQt5.QtWidgets import QSizePolicy, QWidget

from ...core.annotations import Annotation, decode_data_url
from ...core.page import OverlayMarker, PageGeometry, layout_markers

logger = logging.getLogger(__name__)

QT_FONT_FAMILIES = {
    "Helvetica": "Helvetica",
    "Times-Roman": "Times",
    "Courier": "Courier",
}


class DocumentSurface(QWidget):
    """
    Stacks rendered pages without gaps so that page heights divide the
    widget height evenly.
    """

    # Signals
    surface_clicked = pyqtSignal(float, float)  # x, y in widget pixels
    context_requested = pyqtSignal(float, float)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)
        self.setCursor(Qt.CrossCursor)

        self.zoom = 1.0
        self.page_pixmaps: List[QPixmap] = []
        self.annotations: List[Annotation] = []
        self.markers: List[OverlayMarker] = []
        self.selected_id: Optional[str] = None
        self._image_cache: Dict[str, QPixmap] = {}

    @property
    def page_count(self) -> int:
        return len(self.page_pixmaps)

    def set_pages(self, pixmaps: List[QPixmap], zoom: float):
        """Show freshly rendered pages at a zoom level."""
        self.page_pixmaps = list(pixmaps)
        self.zoom = zoom
        width = max((p.width() for p in self.page_pixmaps), default=0)
        height = sum(p.height() for p in self.page_pixmaps)
        self.setFixedSize(QSize(width, height))
        self._relayout()

    def clear(self):
        self.page_pixmaps = []
        self.annotations = []
        self.markers = []
        self._image_cache.clear()
        self.setFixedSize(QSize(0, 0))
        self.update()

    def set_annotations(self, annotations: List[Annotation]):
        """Set annotations to display, in z-order."""
        self.annotations = list(annotations)
        live_ids = {ann.id for ann in self.annotations}
        for stale in set(self._image_cache) - live_ids:
            del self._image_cache[stale]
        self._relayout()

    def set_selected(self, annotation_id: Optional[str]):
        self.selected_id = annotation_id
        self.update()

    def geometry_snapshot(self) -> Optional[PageGeometry]:
        """Current page geometry, or None when no document is shown."""
        if not self.page_pixmaps:
            return None
        return PageGeometry(
            left=0.0,
            top=0.0,
            width=float(self.width()),
            height=float(self.height()),
            page_count=self.page_count,
            scale=self.zoom,
        )

    def _relayout(self):
        geometry = self.geometry_snapshot()
        self.markers = layout_markers(self.annotations, geometry) if geometry else []
        self.update()

    # Mouse event handlers

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() == Qt.LeftButton:
            self.surface_clicked.emit(float(event.x()), float(event.y()))
            return
        if event.button() == Qt.RightButton:
            self.context_requested.emit(float(event.x()), float(event.y()))
            return
        super().mousePressEvent(event)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setRenderHint(QPainter.TextAntialiasing)

        y = 0
        for pixmap in self.page_pixmaps:
            painter.drawPixmap(0, y, pixmap)
            y += pixmap.height()

        by_id = {ann.id: ann for ann in self.annotations}
        for marker in self.markers:
            ann = by_id.get(marker.annotation_id)
            if ann is None:
                continue
            if ann.is_image:
                self._paint_image(painter, ann, marker)
            else:
                self._paint_text(painter, ann, marker)
            if marker.annotation_id == self.selected_id:
                self._paint_selection(painter, marker)

        painter.end()

    def _paint_text(self, painter: QPainter, ann: Annotation, marker: OverlayMarker):
        """White patch sized to the text, then the text on its baseline."""
        painter.setPen(Qt.NoPen)
        painter.setBrush(QColor(255, 255, 255))
        painter.drawRect(QRectF(marker.x, marker.y, marker.width, marker.height))

        font = QFont(QT_FONT_FAMILIES.get(ann.base_font, "Helvetica"))
        font.setPixelSize(max(1, int(round(marker.font_px))))
        painter.setFont(font)
        painter.setPen(QColor(*ann.rgb))
        painter.drawText(QPointF(marker.anchor_x, marker.anchor_y),
                         " ".join(ann.text.splitlines()))

    def _paint_image(self, painter: QPainter, ann: Annotation, marker: OverlayMarker):
        pixmap = self._image_cache.get(ann.id)
        if pixmap is None:
            pixmap = QPixmap()
            try:
                pixmap.loadFromData(decode_data_url(ann.image_data))
            except ValueError as e:
                logger.warning("Cannot display image annotation %s: %s", ann.id, e)
            self._image_cache[ann.id] = pixmap

        rect = QRectF(marker.x, marker.y, marker.width, marker.height)
        if pixmap.isNull():
            painter.setPen(QPen(QColor(200, 0, 0), 1, Qt.DashLine))
            painter.setBrush(Qt.NoBrush)
            painter.drawRect(rect)
        else:
            painter.drawPixmap(rect, pixmap, QRectF(pixmap.rect()))

    def _paint_selection(self, painter: QPainter, marker: OverlayMarker):
        painter.setPen(QPen(QColor(0, 120, 215), 1, Qt.DashLine))
        painter.setBrush(Qt.NoBrush)
        painter.drawRect(QRectF(marker.x, marker.y, marker.width, marker.height))
