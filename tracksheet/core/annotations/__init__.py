"""
Annotation model and editing session.
"""
from .models import (
    Annotation,
    AnnotationKind,
    FONT_FAMILIES,
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
    clamp_font_size,
    decode_data_url,
    encode_data_url,
)
from .manager import AnnotationManager
from .undo_redo import UndoRedoStack

__all__ = [
    'Annotation',
    'AnnotationKind',
    'AnnotationManager',
    'UndoRedoStack',
    'FONT_FAMILIES',
    'MIN_FONT_SIZE',
    'MAX_FONT_SIZE',
    'clamp_font_size',
    'decode_data_url',
    'encode_data_url',
]
