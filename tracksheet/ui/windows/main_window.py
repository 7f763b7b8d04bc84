import logging
from pathlib import Path
from typing import Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QKeySequence
from PyQt5.QtWidgets import (
    QAction, QFileDialog, QInputDialog, QLabel, QMainWindow, QMessageBox,
    QProgressBar, QScrollArea, QToolBar,
)

from ... import __version__
from ...controllers import AnnotationController, ExportController, TemplateController
from ...core.annotations import Annotation, AnnotationManager
from ...core.document import DocumentCompositor
from ...core.document.pdf_reader import PDFDocumentReader
from ...core.errors import DocumentParseError
from ...core.export import ExportService, download_filename
from ...core.page import Position, hit_test
from ...core.template import Template
from ...services import create_metadata_store, create_storage_client
from ...utils.config import AppConfig
from ...utils.warning_manager import WarningType, warning_manager
from ..dialogs import AnnotationDialog
from ..widgets import DocumentSurface

logger = logging.getLogger(__name__)

# Where Add Image puts the image before anything was clicked
DEFAULT_IMAGE_POSITION = Position(0, 0.05, 0.05)


class MainWindow(QMainWindow):
    def __init__(self, config: AppConfig, file_path: Optional[str] = None):
        super().__init__()
        self.config = config
        self.setWindowTitle(f"TrackSheet {__version__}")

        self.pdf_reader = PDFDocumentReader()
        self.annotation_manager = AnnotationManager(
            config.default_font_size,
            config.default_font_family,
            config.default_font_color,
        )
        self.zoom = config.clamp_zoom(config.default_zoom)
        self.last_position: Optional[Position] = None

        storage = create_storage_client(config)
        metadata = create_metadata_store(config)
        compositor = DocumentCompositor(padding=config.background_padding)

        self.annotation_controller = AnnotationController(self.annotation_manager, self)
        self.template_controller = TemplateController(
            storage, metadata, self.annotation_manager, config.owner_id, self
        )
        self.export_controller = ExportController(
            ExportService(storage, compositor, metadata), self
        )

        self.setup_ui()
        self._connect_signals()
        self._update_actions()

        if file_path:
            self.template_controller.attach_file(file_path)

    def setup_ui(self):
        toolbar = QToolBar("Main", self)
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self.open_action = QAction("Open PDF", self)
        self.open_action.setShortcut(QKeySequence.Open)
        self.open_action.triggered.connect(self.open_pdf)
        toolbar.addAction(self.open_action)

        self.load_action = QAction("Load Template", self)
        self.load_action.triggered.connect(self.load_template)
        toolbar.addAction(self.load_action)

        self.save_action = QAction("Save Template", self)
        self.save_action.setShortcut(QKeySequence.Save)
        self.save_action.triggered.connect(self.save_template)
        toolbar.addAction(self.save_action)
        toolbar.addSeparator()

        self.page_count_label = QLabel("No PDF", self)
        self.page_count_label.setMinimumWidth(70)
        self.page_count_label.setAlignment(Qt.AlignCenter)
        toolbar.addWidget(self.page_count_label)
        toolbar.addSeparator()

        self.zoom_out_action = QAction("Zoom Out", self)
        self.zoom_out_action.setShortcut(QKeySequence.ZoomOut)
        self.zoom_out_action.triggered.connect(lambda: self.adjust_zoom(-self.config.zoom_step))
        toolbar.addAction(self.zoom_out_action)

        self.zoom_label = QLabel(self)
        self.zoom_label.setMinimumWidth(50)
        self.zoom_label.setAlignment(Qt.AlignCenter)
        toolbar.addWidget(self.zoom_label)

        self.zoom_in_action = QAction("Zoom In", self)
        self.zoom_in_action.setShortcut(QKeySequence.ZoomIn)
        self.zoom_in_action.triggered.connect(lambda: self.adjust_zoom(self.config.zoom_step))
        toolbar.addAction(self.zoom_in_action)
        toolbar.addSeparator()

        self.add_image_action = QAction("Add Image", self)
        self.add_image_action.triggered.connect(self.add_image)
        toolbar.addAction(self.add_image_action)

        self.undo_action = QAction("Undo", self)
        self.undo_action.setShortcut(QKeySequence.Undo)
        self.undo_action.triggered.connect(self.annotation_controller.undo)
        toolbar.addAction(self.undo_action)

        self.redo_action = QAction("Redo", self)
        self.redo_action.setShortcut(QKeySequence.Redo)
        self.redo_action.triggered.connect(self.annotation_controller.redo)
        toolbar.addAction(self.redo_action)
        toolbar.addSeparator()

        self.export_action = QAction("Export PDF", self)
        self.export_action.setShortcut("Ctrl+E")
        self.export_action.triggered.connect(lambda: self.export_pdf(save_copy=False))
        toolbar.addAction(self.export_action)

        self.export_save_action = QAction("Export && Save to Storage", self)
        self.export_save_action.triggered.connect(lambda: self.export_pdf(save_copy=True))
        toolbar.addAction(self.export_save_action)

        # PAGE DISPLAY AREA
        self.surface = DocumentSurface()
        self.scroll_area = QScrollArea(self)
        self.scroll_area.setAlignment(Qt.AlignHCenter)
        self.scroll_area.setWidget(self.surface)
        self.setCentralWidget(self.scroll_area)

        self.progress_bar = QProgressBar(self)
        self.progress_bar.setMaximumWidth(200)
        self.progress_bar.hide()
        self.statusBar().addPermanentWidget(self.progress_bar)
        self.statusBar().showMessage("Open a PDF to start annotating")

    def _connect_signals(self):
        self.surface.surface_clicked.connect(self._on_surface_clicked)
        self.surface.context_requested.connect(self._on_surface_context)

        self.annotation_controller.annotations_changed.connect(self._refresh_annotations)
        self.annotation_controller.edit_requested.connect(self._edit_annotation)

        self.template_controller.template_changed.connect(self._on_template_changed)
        self.template_controller.document_loaded.connect(self._show_document)
        self.template_controller.error.connect(
            lambda title, message: QMessageBox.warning(self, title, message)
        )

        self.export_controller.busy_changed.connect(lambda _busy: self._update_actions())
        self.export_controller.progress.connect(self._on_export_progress)
        self.export_controller.export_finished.connect(self._on_export_finished)

    # Document display

    def open_pdf(self):
        if self.template_controller.template.attachment is not None and \
                self.annotation_manager.get_annotation_count() > 0:
            if not warning_manager.show_confirmation(
                self, WarningType.REPLACE_ATTACHMENT, "Replace Attachment",
                "Replacing the attachment removes all of its annotations. Continue?",
            ):
                return

        file_path, _ = QFileDialog.getOpenFileName(
            self, "Open Attachment", "",
            "Documents (*.pdf *.docx *.xlsx);;PDF Files (*.pdf)",
        )
        if file_path:
            self.template_controller.attach_file(file_path)

    def _show_document(self, data: bytes):
        try:
            page_count = self.pdf_reader.load_bytes(data)
        except DocumentParseError as e:
            QMessageBox.critical(self, "Error", f"Could not open document:\n{e}")
            return
        logger.info("Displaying document with %d page(s)", page_count)
        self._render_pages()
        self._refresh_annotations()

    def _render_pages(self):
        if not self.pdf_reader.is_loaded():
            self.surface.clear()
            self.page_count_label.setText("No PDF")
            return
        pixmaps = [self.pdf_reader.render_page(i, self.zoom)
                   for i in range(self.pdf_reader.total_pages)]
        self.surface.set_pages([p for p in pixmaps if p is not None], self.zoom)
        pages = self.pdf_reader.total_pages
        self.page_count_label.setText(f"{pages} page" + ("" if pages == 1 else "s"))
        self.zoom_label.setText(f"{int(round(self.zoom * 100))}%")

    def adjust_zoom(self, delta: float):
        new_zoom = self.config.clamp_zoom(self.zoom + delta)
        if new_zoom == self.zoom:
            return
        self.zoom = new_zoom
        self._render_pages()

    # Annotation editing

    def _on_surface_clicked(self, x: float, y: float):
        if not self.template_controller.template.supports_annotations:
            return
        position = self.annotation_controller.handle_click(
            self.surface.geometry_snapshot(), x, y, self.surface.markers
        )
        if position is not None:
            self.last_position = position

    def _on_surface_context(self, x: float, y: float):
        marker = hit_test(self.surface.markers, x, y)
        if marker is not None:
            self.annotation_controller.delete_annotation(marker.annotation_id)

    def _edit_annotation(self, annotation: Annotation, is_new: bool):
        if annotation.is_image:
            # Images have nothing to edit; the dialog only offers removal
            self.annotation_controller.delete_annotation(annotation.id)
            return

        self.surface.set_selected(annotation.id)
        dialog = AnnotationDialog(annotation, is_new, self)
        accepted = dialog.exec_() == AnnotationDialog.Accepted
        self.surface.set_selected(None)

        if accepted:
            self.annotation_controller.apply_edit(annotation, is_new, **dialog.values())
        elif dialog.delete_requested:
            self.annotation_controller.delete_annotation(annotation.id)

    def add_image(self):
        if not self.template_controller.template.supports_annotations or \
                not self.pdf_reader.page_sizes:
            QMessageBox.information(self, "No PDF", "Attach a PDF before adding images.")
            return

        file_path, _ = QFileDialog.getOpenFileName(
            self, "Add Image", "", "Images (*.png *.jpg *.jpeg)"
        )
        if not file_path:
            return

        position = self.last_position or DEFAULT_IMAGE_POSITION
        if position.page_index >= len(self.pdf_reader.page_sizes):
            position = DEFAULT_IMAGE_POSITION
        self.annotation_controller.add_image(
            position, file_path, self.pdf_reader.page_sizes[position.page_index], self.zoom
        )

    def _refresh_annotations(self):
        self.surface.set_annotations(self.annotation_manager.annotations)
        self._update_actions()

    # Templates

    def save_template(self) -> bool:
        template = self.template_controller.template
        name, ok = QInputDialog.getText(self, "Save Template", "Template name:", text=template.name)
        if not ok:
            return False
        template_id = self.template_controller.save_template(name.strip() or None)
        if template_id is None:
            return False
        self.statusBar().showMessage(f"Saved template '{template.name}'", 5000)
        return True

    def load_template(self):
        if not self._confirm_discard(WarningType.DISCARD_UNSAVED):
            return

        templates = self.template_controller.list_templates()
        if not templates:
            QMessageBox.information(self, "No Templates", "There are no saved templates yet.")
            return

        labels = [f"{t['name']} ({t['id'][:8]})" for t in templates]
        label, ok = QInputDialog.getItem(self, "Load Template", "Template:", labels, 0, False)
        if ok:
            self.template_controller.load_template(templates[labels.index(label)]['id'])

    def _on_template_changed(self, template: Template):
        self.setWindowTitle(f"TrackSheet - {template.name}")
        if not template.supports_annotations:
            self.pdf_reader.close_document()
            self._render_pages()
            if template.attachment is not None:
                self.statusBar().showMessage(
                    f"{template.attachment.kind.value.title()} attachments cannot be annotated"
                )
        self.last_position = None
        self._refresh_annotations()

    def _confirm_discard(self, warning_type: WarningType) -> bool:
        """True if it is fine to drop the current unsaved changes."""
        if not self.template_controller.has_unsaved_changes:
            return True
        reply = warning_manager.show_save_discard_cancel(self, warning_type)
        if reply == QMessageBox.Save:
            return self.save_template()
        return reply == QMessageBox.Discard

    # Export

    def export_pdf(self, save_copy: bool = False):
        template = self.template_controller.sync_annotations()
        if not template.supports_annotations:
            QMessageBox.warning(self, "No PDF", "Attach a PDF before exporting.")
            return

        output_path, _ = QFileDialog.getSaveFileName(
            self, "Export Annotated PDF", download_filename(template.name), "PDF Files (*.pdf)"
        )
        if not output_path:
            return

        self.export_controller.start_export(
            template, Path(output_path), save_copy=save_copy, owner_id=self.config.owner_id
        )

    def _on_export_progress(self, done: int, total: int):
        self.progress_bar.setMaximum(max(total, 1))
        self.progress_bar.setValue(done)
        self.progress_bar.show()

    def _on_export_finished(self, success: bool, message: str):
        self.progress_bar.hide()
        if success:
            QMessageBox.information(self, "Export Complete", message)
        else:
            QMessageBox.critical(self, "Export Failed", message)

    def _update_actions(self):
        busy = self.export_controller.busy
        can_annotate = self.template_controller.template.supports_annotations

        self.export_action.setEnabled(can_annotate and not busy)
        self.export_save_action.setEnabled(can_annotate and not busy)
        self.add_image_action.setEnabled(can_annotate)
        self.undo_action.setEnabled(self.annotation_manager.can_undo())
        self.redo_action.setEnabled(self.annotation_manager.can_redo())
        self.zoom_label.setText(f"{int(round(self.zoom * 100))}%")

        if busy:
            self.statusBar().showMessage("Exporting...")

    def closeEvent(self, event):
        """Handle window close event - check for unsaved changes."""
        if self.export_controller.busy:
            QMessageBox.information(self, "Export Running",
                                    "Wait for the export to finish before closing.")
            event.ignore()
            return

        if self._confirm_discard(WarningType.EXIT_UNSAVED):
            self.pdf_reader.close_document()
            event.accept()
        else:
            event.ignore()
