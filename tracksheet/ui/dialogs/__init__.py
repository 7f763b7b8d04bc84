from .annotation_dialog import AnnotationDialog

__all__ = ['AnnotationDialog']
