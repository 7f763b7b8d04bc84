"""
Controller for the template being edited: its attachment and persistence.
"""
import logging
import mimetypes
from pathlib import Path
from typing import Optional

from PyQt5.QtCore import QObject, pyqtSignal
from PyQt5.QtWidgets import QWidget

from ..core.annotations import AnnotationManager
from ..core.errors import TrackSheetError
from ..core.template import Attachment, AttachmentKind, Template
from ..services import MetadataStore, StorageClient, make_storage_path

logger = logging.getLogger(__name__)


class TemplateController(QObject):
    """Keeps the Template and the AnnotationManager in step."""

    # Signals
    template_changed = pyqtSignal(object)  # Template
    document_loaded = pyqtSignal(bytes)  # PDF bytes of the attachment
    error = pyqtSignal(str, str)  # title, message

    def __init__(self, storage: StorageClient, metadata: MetadataStore,
                 annotation_manager: AnnotationManager, owner_id: str,
                 parent: QWidget = None):
        super().__init__()
        self.storage = storage
        self.metadata = metadata
        self.annotation_manager = annotation_manager
        self.owner_id = owner_id
        self.parent_widget = parent
        self.template = Template()

    @property
    def has_unsaved_changes(self) -> bool:
        return self.annotation_manager.has_unsaved_changes

    def sync_annotations(self) -> Template:
        """Copy the editing session's annotations into the template."""
        self.template.annotations = self.annotation_manager.snapshot()
        return self.template

    def attach_file(self, file_path: str) -> Optional[Attachment]:
        """
        Upload a file and make it the template's attachment.

        Annotations of the previous attachment are dropped.
        """
        path = Path(file_path)
        content_type, _ = mimetypes.guess_type(path.name)
        try:
            kind = AttachmentKind.detect(path.name, content_type)
            data = path.read_bytes()
            storage_path = self.storage.upload(
                make_storage_path(self.owner_id, path.name), data,
                content_type or "application/octet-stream",
            )
            self.metadata.record_file(self.owner_id, path.name, storage_path,
                                      content_type or "", len(data))
        except (TrackSheetError, OSError) as e:
            logger.warning("Could not attach %s: %s", path, e)
            self.error.emit("Attachment Failed", str(e))
            return None

        attachment = Attachment(kind, self.storage.get_public_url(storage_path), storage_path)
        self.template.set_attachment(attachment)
        self.annotation_manager.clear_all()
        # A new attachment is an unsaved template change
        self.annotation_manager.has_unsaved_changes = True
        logger.info("Attached %s as %s", path.name, kind.value)

        self.template_changed.emit(self.template)
        if attachment.supports_annotations:
            self.document_loaded.emit(data)
        return attachment

    def save_template(self, name: Optional[str] = None) -> Optional[str]:
        if name:
            self.template.name = name
        self.sync_annotations()
        try:
            self.template.id = self.metadata.save_template(
                self.template.id, self.template.name,
                self.template.template_data(), owner_id=self.owner_id,
            )
        except (TrackSheetError, OSError) as e:
            logger.error("Could not save template: %s", e)
            self.error.emit("Save Failed", str(e))
            return None

        self.annotation_manager.mark_saved()
        self.template_changed.emit(self.template)
        return self.template.id

    def load_template(self, template_id: str) -> Optional[Template]:
        """Load a saved template and fetch its attachment for display."""
        try:
            template = Template.from_dict(self.metadata.load_template(template_id))
        except (TrackSheetError, KeyError, ValueError) as e:
            logger.error("Could not load template %s: %s", template_id, e)
            self.error.emit("Load Failed", str(e))
            return None

        self.template = template
        self.annotation_manager.replace_all(template.annotations)
        self.template_changed.emit(template)

        if template.supports_annotations:
            try:
                self.document_loaded.emit(self.storage.fetch(template.attachment.url))
            except TrackSheetError as e:
                self.error.emit("Attachment Unavailable", str(e))
        return template

    def list_templates(self):
        return self.metadata.list_templates(self.owner_id)
