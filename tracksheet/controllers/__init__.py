"""
Controllers connecting the widgets to the core and services.
"""
from .annotation_controller import AnnotationController
from .export_controller import ExportController
from .template_controller import TemplateController

__all__ = [
    'AnnotationController',
    'ExportController',
    'TemplateController',
]
