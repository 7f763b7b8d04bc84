"""
Background thread for exports.
"""
import logging

from PyQt5.QtCore import QThread, pyqtSignal

from ..errors import TrackSheetError
from .export_service import ExportJob, ExportService

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    """Worker thread running an admitted export without freezing the UI."""

    # Signals
    finished = pyqtSignal(bool, str)  # success, message
    completed = pyqtSignal(object)  # ExportResult
    progress = pyqtSignal(str)  # status message
    annotation_progress = pyqtSignal(int, int)  # done, total

    def __init__(self, service: ExportService, job: ExportJob):
        super().__init__()
        self.service = service
        self.job = job

    def run(self):
        """Execute the export in a background thread."""
        self.progress.emit("Exporting annotations...")
        try:
            result = self.service.run(self.job, self._on_annotation_progress)
        except (TrackSheetError, OSError) as e:
            self.finished.emit(False, f"Export failed: {e}")
            return
        except Exception as e:
            logger.exception("Unexpected error during export")
            self.finished.emit(False, f"Error during export: {e}")
            return

        self.completed.emit(result)
        self.finished.emit(True, result.message())

    def _on_annotation_progress(self, done, total):
        self.annotation_progress.emit(done, total)
