"""
Annotation list for one editor instance, with undo/redo support.
"""
import copy
import logging
from typing import List, Optional

from ..errors import InvalidAnnotationError
from .models import (
    DEFAULT_FONT_COLOR,
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_TEXT,
    Annotation,
    AnnotationKind,
    clamp_font_size,
)
from .undo_redo import UndoRedoStack

logger = logging.getLogger(__name__)


class AnnotationManager:
    """
    Owns the in-memory annotation list.

    Edits apply immediately and are not persisted until the template is
    saved. List order is z-order: later annotations draw on top.
    """

    def __init__(self, default_font_size: int = DEFAULT_FONT_SIZE,
                 default_font_family: str = DEFAULT_FONT_FAMILY,
                 default_font_color: str = DEFAULT_FONT_COLOR):
        self.annotations: List[Annotation] = []
        self.undo_redo_stack = UndoRedoStack()
        self.has_unsaved_changes: bool = False

        self.default_font_size = clamp_font_size(default_font_size)
        self.default_font_family = default_font_family
        self.default_font_color = default_font_color

        # Saved state, for detecting real changes
        self._saved_annotations: List[Annotation] = []

    def begin_placement(self, position) -> Annotation:
        """
        Create a draft text annotation at a position.

        The draft is not part of the list until commit() is called, so a
        cancelled edit leaves nothing behind.
        """
        return Annotation(
            page_index=position.page_index,
            x_fraction=position.x_fraction,
            y_fraction=position.y_fraction,
            text=DEFAULT_TEXT,
            font_size=self.default_font_size,
            font_family=self.default_font_family,
            font_color=self.default_font_color,
        )

    def begin_image_placement(self, position, image_data: str, width_fraction: float,
                              height_fraction: float) -> Annotation:
        return Annotation(
            page_index=position.page_index,
            x_fraction=position.x_fraction,
            y_fraction=position.y_fraction,
            kind=AnnotationKind.IMAGE,
            image_data=image_data,
            width_fraction=width_fraction,
            height_fraction=height_fraction,
        )

    def commit(self, annotation: Annotation) -> Annotation:
        """Add an annotation to the top of the list."""
        if self.get(annotation.id) is not None:
            raise InvalidAnnotationError(f"Duplicate annotation id {annotation.id}")
        self.undo_redo_stack.push_state(self.annotations)
        self.annotations.append(annotation)
        self._check_for_changes()
        return annotation

    def update(self, annotation_id: str, **changes) -> Annotation:
        """
        Replace an annotation in place with updated fields.

        The id and list position are kept. Applying values equal to the
        current ones changes nothing and records no undo step.

        Raises:
            KeyError: If no annotation has this id
            InvalidAnnotationError: If the new values are invalid
        """
        index = self._index_of(annotation_id)
        current = self.annotations[index]

        if "font_size" in changes:
            changes["font_size"] = clamp_font_size(changes["font_size"])
        updated = current.with_changes(**changes)
        if updated == current:
            return current

        self.undo_redo_stack.push_state(self.annotations)
        self.annotations[index] = updated
        self._check_for_changes()
        return updated

    def remove(self, annotation_id: str) -> bool:
        """Remove an annotation by id. Returns False if it was not found."""
        try:
            index = self._index_of(annotation_id)
        except KeyError:
            return False
        self.undo_redo_stack.push_state(self.annotations)
        del self.annotations[index]
        self._check_for_changes()
        return True

    def get(self, annotation_id: str) -> Optional[Annotation]:
        for ann in self.annotations:
            if ann.id == annotation_id:
                return ann
        return None

    def _index_of(self, annotation_id: str) -> int:
        for index, ann in enumerate(self.annotations):
            if ann.id == annotation_id:
                return index
        raise KeyError(annotation_id)

    def get_annotations_for_page(self, page_index: int) -> List[Annotation]:
        return [ann for ann in self.annotations if ann.page_index == page_index]

    def snapshot(self) -> List[Annotation]:
        """Deep copy of the list, in z-order."""
        return copy.deepcopy(self.annotations)

    def replace_all(self, annotations: List[Annotation]) -> None:
        """Load a saved list; clears history and marks it as saved."""
        self.annotations = copy.deepcopy(list(annotations))
        self.undo_redo_stack.clear()
        self.mark_saved()

    def clear_all(self) -> None:
        self.replace_all([])

    def _check_for_changes(self) -> None:
        self.has_unsaved_changes = self.annotations != self._saved_annotations

    def mark_saved(self) -> None:
        self._saved_annotations = copy.deepcopy(self.annotations)
        self.has_unsaved_changes = False

    def undo(self) -> bool:
        previous_state = self.undo_redo_stack.undo(self.annotations)
        if previous_state is None:
            return False
        self.annotations = previous_state
        self._check_for_changes()
        return True

    def redo(self) -> bool:
        next_state = self.undo_redo_stack.redo(self.annotations)
        if next_state is None:
            return False
        self.annotations = next_state
        self._check_for_changes()
        return True

    def can_undo(self) -> bool:
        return self.undo_redo_stack.can_undo()

    def can_redo(self) -> bool:
        return self.undo_redo_stack.can_redo()

    def get_annotation_count(self) -> int:
        return len(self.annotations)
