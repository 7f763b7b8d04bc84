"""
Export pipeline: fetch the source, compose, deliver and optionally keep a copy.
"""
import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..annotations.models import Annotation
from ..document.compositor import (
    CompositionResult,
    DocumentCompositor,
    ProgressCallback,
    SkippedAnnotation,
)
from ..errors import StorageUploadError, TrackSheetError
from ..template import Template
from .gate import ExportGate

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
FALLBACK_FILENAME = "time-tracker"


def download_filename(template_name: str) -> str:
    """Template name with whitespace runs collapsed to '_', plus '.pdf'."""
    stem = re.sub(r"\s+", "_", (template_name or "").strip())
    return f"{stem or FALLBACK_FILENAME}.pdf"


@dataclass
class ExportJob:
    """Everything an export needs, captured when it was requested."""
    source_url: str
    annotations: List[Annotation]
    filename: str
    download_path: Optional[Path] = None
    save_copy: bool = False
    owner_id: str = ""


@dataclass
class ExportResult:
    """
    Outcome of one export.

    The download and the storage copy are independent: persist_error set
    means the file was exported but not saved to storage.
    """
    filename: str
    composition: CompositionResult
    download_path: Optional[Path] = None
    stored_path: Optional[str] = None
    persist_error: Optional[str] = None
    skipped: List[SkippedAnnotation] = field(init=False)

    def __post_init__(self):
        self.skipped = self.composition.skipped

    @property
    def data(self) -> bytes:
        return self.composition.data

    @property
    def total(self) -> int:
        return self.composition.total

    @property
    def skipped_count(self) -> int:
        return self.composition.skipped_count

    def summary(self) -> str:
        return self.composition.summary()

    def message(self) -> str:
        """User-facing report covering both the export and the storage copy."""
        lines = [self.summary()]
        if self.download_path is not None:
            lines.append(f"Saved to {self.download_path}")
        if self.persist_error:
            lines.append(f"File exported but not saved to storage: {self.persist_error}")
        elif self.stored_path:
            lines.append(f"Copy stored as {self.stored_path}")
        return "\n".join(lines)


class ExportService:
    """
    Runs exports for one editor.

    begin() and finish() belong on the UI thread, run() may execute on a
    worker thread. export() does all three in order.
    """

    def __init__(self, storage, compositor: Optional[DocumentCompositor] = None,
                 metadata=None, gate: Optional[ExportGate] = None):
        """
        Args:
            storage: StorageClient used to fetch sources and store copies
            compositor: Compositor to draw with, a default one if None
            metadata: MetadataStore recording stored copies, optional
            gate: Busy flag, a private one if None
        """
        self.storage = storage
        self.compositor = compositor or DocumentCompositor()
        self.metadata = metadata
        self.gate = gate or ExportGate()

    @property
    def busy(self) -> bool:
        return self.gate.busy

    def begin(self, template: Template, download_path: Optional[Path] = None,
              save_copy: bool = False, owner_id: str = "") -> ExportJob:
        """
        Admit an export and snapshot the template's annotations.

        Raises:
            ExportBusyError: If an export is already running
            TrackSheetError: If the template has no PDF attachment
        """
        if not template.supports_annotations:
            raise TrackSheetError("Attach a PDF before exporting.")

        self.gate.acquire()
        job = ExportJob(
            source_url=template.attachment.url,
            annotations=[ann.with_changes() for ann in template.annotations],
            filename=download_filename(template.name),
            download_path=Path(download_path) if download_path else None,
            save_copy=save_copy,
            owner_id=owner_id,
        )
        logger.info("Export started: %d annotations from %s",
                    len(job.annotations), job.source_url)
        return job

    def run(self, job: ExportJob, progress: Optional[ProgressCallback] = None) -> ExportResult:
        """
        Fetch, compose and deliver one admitted job.

        Raises:
            SourceFetchError: If the source bytes could not be read
            DocumentParseError: If the source is not a PDF
            OSError: If the download file could not be written
        """
        try:
            source = self.storage.fetch(job.source_url)
            composition = self.compositor.compose(source, job.annotations, progress)
        except TrackSheetError as e:
            logger.error("Export failed: %s", e)
            raise

        result = ExportResult(filename=job.filename, composition=composition)
        if job.download_path is not None:
            result.download_path = self.deliver(composition, job.download_path)

        if job.save_copy:
            try:
                result.stored_path = self.save_copy(composition, job.owner_id, job.filename)
            except StorageUploadError as e:
                logger.warning("File exported but not saved to storage: %s", e)
                result.persist_error = str(e)

        logger.info("Export finished: %s", result.summary())
        return result

    def finish(self) -> None:
        self.gate.release()

    def export(self, template: Template, download_path: Optional[Path] = None,
               save_copy: bool = False, owner_id: str = "",
               progress: Optional[ProgressCallback] = None) -> ExportResult:
        """Synchronous begin, run and finish."""
        job = self.begin(template, download_path, save_copy, owner_id)
        try:
            return self.run(job, progress)
        finally:
            self.finish()

    def deliver(self, result, path: Path) -> Path:
        """Write a composition's (or export result's) bytes to the download location."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        # The target is only ever replaced by a complete file
        temp_fd, temp_path = tempfile.mkstemp(suffix=".pdf", dir=str(path.parent))
        try:
            with os.fdopen(temp_fd, "wb") as f:
                f.write(result.data)
            shutil.move(temp_path, str(path))
        except OSError:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise
        logger.info("Wrote %d bytes to %s", len(result.data), path)
        return path

    def save_copy(self, result, owner_id: str, filename: str) -> str:
        """
        Upload the exported bytes as a new file. The source attachment is
        never overwritten.

        Returns:
            Storage path of the new file

        Raises:
            StorageUploadError: If the upload or the file record failed
        """
        # Imported here, services depends on core and not the other way round
        from ...services.storage import make_storage_path

        storage_path = make_storage_path(owner_id, filename)
        stored = self.storage.upload(storage_path, result.data, PDF_CONTENT_TYPE)
        if self.metadata is not None:
            self.metadata.record_file(owner_id, filename, stored, PDF_CONTENT_TYPE,
                                      len(result.data))
        return stored
