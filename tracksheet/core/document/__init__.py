"""
PDF document composition.

The Qt page renderer lives in pdf_reader and is imported directly by the UI.
"""
from .backend import DocumentBackend, FontHandle, PageSize, TextMetrics
from .compositor import CompositionResult, DocumentCompositor, SkippedAnnotation, project_to_pdf
from .pymupdf_backend import PyMuPDFBackend

__all__ = [
    'DocumentBackend',
    'FontHandle',
    'PageSize',
    'TextMetrics',
    'CompositionResult',
    'DocumentCompositor',
    'SkippedAnnotation',
    'project_to_pdf',
    'PyMuPDFBackend',
]
