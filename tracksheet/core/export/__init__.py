"""
Export admission, pipeline and delivery.

ExportWorker needs PyQt5 and is imported from its module directly.
"""
from .export_service import (
    ExportJob,
    ExportResult,
    ExportService,
    download_filename,
)
from .gate import ExportGate

__all__ = [
    'ExportGate',
    'ExportJob',
    'ExportResult',
    'ExportService',
    'download_filename',
]
