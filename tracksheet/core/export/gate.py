"""
Single-slot admission gate around the export pipeline.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from ..errors import ExportBusyError

logger = logging.getLogger(__name__)


class ExportGate:
    """
    Busy flag owned by one editor.

    Only the UI thread acquires and releases it. A second request while
    an export is in flight is rejected, never queued.
    """

    def __init__(self):
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def acquire(self) -> None:
        """
        Raises:
            ExportBusyError: If an export is already running
        """
        if self._busy:
            logger.info("Export rejected, another export is in progress")
            raise ExportBusyError()
        self._busy = True

    def release(self) -> None:
        self._busy = False

    @contextmanager
    def admit(self) -> Iterator[None]:
        """Hold the gate for the duration of a with block."""
        self.acquire()
        try:
            yield
        finally:
            self.release()
