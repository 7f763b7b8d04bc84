"""
Annotation model, page geometry, PDF composition and export pipeline.
"""
from .errors import (
    AnnotationDrawError,
    DocumentParseError,
    ExportBusyError,
    InvalidAnnotationError,
    PageIndexOutOfRange,
    SourceFetchError,
    StorageUploadError,
    TemplateNotFoundError,
    TrackSheetError,
    UnsupportedAttachmentError,
)
from .template import Attachment, AttachmentKind, Template

__all__ = [
    'TrackSheetError',
    'SourceFetchError',
    'DocumentParseError',
    'PageIndexOutOfRange',
    'AnnotationDrawError',
    'StorageUploadError',
    'ExportBusyError',
    'InvalidAnnotationError',
    'UnsupportedAttachmentError',
    'TemplateNotFoundError',
    'Template',
    'Attachment',
    'AttachmentKind',
]
