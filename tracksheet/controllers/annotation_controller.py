"""
Controller for placing and editing annotations on the document surface.
"""
import logging
from pathlib import Path
from typing import List, Optional

from PyQt5.QtCore import QObject, pyqtSignal
from PyQt5.QtGui import QImage
from PyQt5.QtWidgets import QMessageBox, QWidget

from ..core.annotations import Annotation, AnnotationManager, clamp_font_size, encode_data_url
from ..core.document.backend import PageSize
from ..core.errors import InvalidAnnotationError
from ..core.page import OverlayMarker, PageGeometry, Position, hit_test, map_pointer
from ..utils.warning_manager import WarningType, warning_manager

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}
DEFAULT_IMAGE_PX = 100


class AnnotationController(QObject):
    """Handles all annotation-related operations and user interactions."""

    # Signals
    annotations_changed = pyqtSignal()
    edit_requested = pyqtSignal(object, bool)  # Annotation, is_new

    def __init__(self, annotation_manager: AnnotationManager, parent: QWidget = None):
        super().__init__()
        self.annotation_manager = annotation_manager
        self.parent_widget = parent

    def handle_click(self, geometry: Optional[PageGeometry], x: float, y: float,
                     markers: List[OverlayMarker]) -> Optional[Position]:
        """
        React to a click on the document surface.

        A click on an existing marker opens it for editing, a click
        anywhere else opens a new draft at the clicked position.

        Args:
            geometry: Surface geometry for this click, None if no document
            x, y: Click location in surface pixels
            markers: Markers currently drawn on the surface

        Returns:
            The clicked position, or None if nothing was hit or mapped
        """
        marker = hit_test(markers, x, y)
        if marker is not None:
            annotation = self.annotation_manager.get(marker.annotation_id)
            if annotation is not None:
                self.edit_requested.emit(annotation, False)
                return annotation.position

        position = map_pointer(geometry, x, y)
        if position is None:
            return None

        draft = self.annotation_manager.begin_placement(position)
        self.edit_requested.emit(draft, True)
        return position

    def apply_edit(self, annotation: Annotation, is_new: bool, **changes) -> Optional[Annotation]:
        """
        Save the edit dialog's values.

        Returns:
            The stored annotation, or None if the values were rejected
        """
        try:
            if is_new:
                if "font_size" in changes:
                    changes["font_size"] = clamp_font_size(changes["font_size"])
                result = self.annotation_manager.commit(annotation.with_changes(**changes))
            else:
                result = self.annotation_manager.update(annotation.id, **changes)
        except InvalidAnnotationError as e:
            QMessageBox.warning(self.parent_widget, "Invalid Annotation", str(e))
            return None
        except KeyError:
            logger.warning("Annotation %s disappeared before its edit was saved", annotation.id)
            return None

        self.annotations_changed.emit()
        return result

    def add_image(self, position: Position, image_path: str, page_size: PageSize,
                  zoom: float) -> Optional[Annotation]:
        """
        Place an image with its top-left corner at a position.

        The image starts out 100x100 screen pixels at the current zoom.
        """
        path = Path(image_path)
        mime_type = IMAGE_MIME_TYPES.get(path.suffix.lower())
        if mime_type is None:
            QMessageBox.warning(self.parent_widget, "Unsupported Image",
                                "Only PNG and JPEG images can be placed.")
            return None

        image = QImage(str(path))
        if image.isNull() or image.width() == 0:
            QMessageBox.warning(self.parent_widget, "Unreadable Image",
                                f"Could not read {path.name}.")
            return None

        width_fraction = min(1.0, DEFAULT_IMAGE_PX / (page_size.width * zoom))
        height_fraction = min(1.0, DEFAULT_IMAGE_PX / (page_size.height * zoom))

        try:
            draft = self.annotation_manager.begin_image_placement(
                position,
                encode_data_url(path.read_bytes(), mime_type),
                width_fraction,
                height_fraction,
            )
            annotation = self.annotation_manager.commit(draft)
        except (OSError, InvalidAnnotationError) as e:
            QMessageBox.warning(self.parent_widget, "Image Not Added", str(e))
            return None

        self.annotations_changed.emit()
        return annotation

    def delete_annotation(self, annotation_id: str) -> bool:
        """
        Delete an annotation with user confirmation.

        Returns:
            True if annotation was deleted
        """
        if not warning_manager.show_confirmation(
            self.parent_widget,
            WarningType.DELETE_ANNOTATION,
            "Delete Annotation",
            "Are you sure you want to delete this annotation?",
        ):
            return False

        if self.annotation_manager.remove(annotation_id):
            self.annotations_changed.emit()
            return True
        return False

    def undo(self) -> bool:
        if self.annotation_manager.undo():
            self.annotations_changed.emit()
            return True
        return False

    def redo(self) -> bool:
        if self.annotation_manager.redo():
            self.annotations_changed.emit()
            return True
        return False
