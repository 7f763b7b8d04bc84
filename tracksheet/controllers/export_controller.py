"""
Controller starting exports on a worker thread.
"""
import logging
from pathlib import Path
from typing import Optional

from PyQt5.QtCore import QObject, pyqtSignal
from PyQt5.QtWidgets import QWidget

from ..core.errors import TrackSheetError
from ..core.export import ExportService
from ..core.export.export_worker import ExportWorker
from ..core.template import Template

logger = logging.getLogger(__name__)


class ExportController(QObject):
    """
    Owns the export gate on the UI thread.

    The gate is acquired before the worker starts and released when the
    worker reports back, so the busy state only changes on this thread.
    """

    # Signals
    busy_changed = pyqtSignal(bool)
    progress = pyqtSignal(int, int)  # done, total
    export_finished = pyqtSignal(bool, str)  # success, message
    export_completed = pyqtSignal(object)  # ExportResult

    def __init__(self, service: ExportService, parent: QWidget = None):
        super().__init__()
        self.service = service
        self.parent_widget = parent
        self.export_worker: Optional[ExportWorker] = None

    @property
    def busy(self) -> bool:
        return self.service.busy

    def start_export(self, template: Template, download_path: Path,
                     save_copy: bool = False, owner_id: str = "") -> bool:
        """
        Start an export in the background.

        Returns:
            False if the export could not be started
        """
        try:
            job = self.service.begin(template, download_path, save_copy, owner_id)
        except TrackSheetError as e:
            self.export_finished.emit(False, str(e))
            return False

        self.busy_changed.emit(True)

        self.export_worker = ExportWorker(self.service, job)
        self.export_worker.annotation_progress.connect(self.progress)
        self.export_worker.completed.connect(self.export_completed)
        self.export_worker.finished.connect(self._on_worker_finished)
        self.export_worker.start()
        return True

    def _on_worker_finished(self, success: bool, message: str):
        self.service.finish()
        self.busy_changed.emit(False)

        if success:
            logger.info("Export complete")
        else:
            logger.error(message)
        self.export_finished.emit(success, message)

        # Clean up worker
        self.export_worker.deleteLater()
        self.export_worker = None
