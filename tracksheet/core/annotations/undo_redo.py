"""
Undo/redo history for an annotation list.
"""
import copy
from typing import List, Optional

from .models import Annotation


class UndoRedoStack:
    """Bounded history of annotation list snapshots."""

    def __init__(self, max_size: int = 50):
        self.undo_stack: List[List[Annotation]] = []
        self.redo_stack: List[List[Annotation]] = []
        self.max_size = max_size

    def push_state(self, annotations: List[Annotation]) -> None:
        """
        Record the list as it was before a mutation.

        Any redo history is discarded.
        """
        self.undo_stack.append(copy.deepcopy(annotations))
        self.redo_stack.clear()

        if len(self.undo_stack) > self.max_size:
            self.undo_stack.pop(0)

    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def undo(self, current_state: List[Annotation]) -> Optional[List[Annotation]]:
        """Return the previous list, saving current_state for redo."""
        if not self.can_undo():
            return None
        self.redo_stack.append(copy.deepcopy(current_state))
        return self.undo_stack.pop()

    def redo(self, current_state: List[Annotation]) -> Optional[List[Annotation]]:
        """Return the next list, saving current_state for undo."""
        if not self.can_redo():
            return None
        self.undo_stack.append(copy.deepcopy(current_state))
        return self.redo_stack.pop()

    def clear(self) -> None:
        self.undo_stack.clear()
        self.redo_stack.clear()
