"""
Exception types raised by the core.

Fatal export errors abort the whole export. Per-annotation errors are
collected by the compositor and reported as a summary.
"""
from typing import Optional


class TrackSheetError(Exception):
    """Base class for all application errors."""


class SourceFetchError(TrackSheetError):
    """The original document bytes could not be read from storage."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"Could not fetch source document from {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DocumentParseError(TrackSheetError):
    """The source bytes are not a readable PDF document."""


class PageIndexOutOfRange(TrackSheetError):
    """An annotation references a page the document does not have."""

    def __init__(self, annotation_id: str, page_index: int, page_count: int):
        self.annotation_id = annotation_id
        self.page_index = page_index
        self.page_count = page_count
        super().__init__(
            f"Annotation {annotation_id} is on page {page_index + 1}, "
            f"but the document has {page_count} page(s)"
        )


class AnnotationDrawError(TrackSheetError):
    """Measuring or drawing a single annotation failed."""

    def __init__(self, annotation_id: str, reason: str):
        self.annotation_id = annotation_id
        self.reason = reason
        super().__init__(f"Could not draw annotation {annotation_id}: {reason}")


class StorageUploadError(TrackSheetError):
    """Uploading bytes or recording file metadata failed."""


class ExportBusyError(TrackSheetError):
    """An export is already running for this editor."""

    def __init__(self):
        super().__init__("An export is already in progress.")


class InvalidAnnotationError(TrackSheetError, ValueError):
    """An annotation field failed validation."""


class UnsupportedAttachmentError(TrackSheetError, ValueError):
    """The attached file is not a PDF, Word or Excel document."""

    def __init__(self, filename: str, content_type: Optional[str] = None):
        self.filename = filename
        self.content_type = content_type
        super().__init__(f"Unsupported file type: {filename} ({content_type or 'unknown'})")


class TemplateNotFoundError(TrackSheetError, KeyError):
    """No template is stored under the requested id."""

    def __str__(self):
        return f"Template not found: {self.args[0]}"
