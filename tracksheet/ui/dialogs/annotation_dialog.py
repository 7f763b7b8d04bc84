"""
Dialog for editing one text annotation.
"""
from typing import Any, Dict

from PyQt5.QtGui import QColor, QFont
from PyQt5.QtWidgets import (
    QColorDialog, QComboBox, QDialog, QFormLayout, QHBoxLayout, QLabel,
    QPlainTextEdit, QPushButton, QSpinBox, QVBoxLayout,
)

from ...core.annotations import FONT_FAMILIES, MAX_FONT_SIZE, MIN_FONT_SIZE, Annotation
from ..widgets.document_surface import QT_FONT_FAMILIES


class AnnotationDialog(QDialog):
    """
    Text, font family, color and size of an annotation, with a preview.

    exec_() returns Accepted for Save. delete_requested is set when the
    user chose Delete instead.
    """

    def __init__(self, annotation: Annotation, is_new: bool, parent=None):
        super().__init__(parent)
        self.annotation = annotation
        self.is_new = is_new
        self.delete_requested = False
        self._color = annotation.font_color

        self.setWindowTitle("Add Annotation" if is_new else "Edit Annotation")
        self.setMinimumWidth(360)
        self.setup_ui()
        self._update_preview()

    def setup_ui(self):
        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.text_edit = QPlainTextEdit(self.annotation.text, self)
        self.text_edit.setFixedHeight(70)
        self.text_edit.textChanged.connect(self._update_preview)
        form.addRow("Text:", self.text_edit)

        self.family_combo = QComboBox(self)
        self.family_combo.addItems(sorted(FONT_FAMILIES))
        self.family_combo.setCurrentText(self.annotation.font_family)
        self.family_combo.currentTextChanged.connect(self._update_preview)
        form.addRow("Font:", self.family_combo)

        self.size_spin = QSpinBox(self)
        self.size_spin.setRange(MIN_FONT_SIZE, MAX_FONT_SIZE)
        self.size_spin.setValue(self.annotation.font_size)
        self.size_spin.valueChanged.connect(self._update_preview)
        form.addRow("Size:", self.size_spin)

        self.color_button = QPushButton(self)
        self.color_button.clicked.connect(self._choose_color)
        form.addRow("Color:", self.color_button)

        layout.addLayout(form)

        self.preview_label = QLabel(self)
        self.preview_label.setStyleSheet("background-color: white; padding: 4px;")
        self.preview_label.setMinimumHeight(40)
        layout.addWidget(self.preview_label)

        buttons = QHBoxLayout()
        if not self.is_new:
            delete_button = QPushButton("Delete", self)
            delete_button.clicked.connect(self._on_delete)
            buttons.addWidget(delete_button)
        buttons.addStretch()

        cancel_button = QPushButton("Cancel", self)
        cancel_button.clicked.connect(self.reject)
        buttons.addWidget(cancel_button)

        save_button = QPushButton("Save", self)
        save_button.setDefault(True)
        save_button.clicked.connect(self.accept)
        buttons.addWidget(save_button)
        layout.addLayout(buttons)

    def _choose_color(self):
        color = QColorDialog.getColor(QColor(self._color), self, "Choose Text Color")
        if color.isValid():
            self._color = color.name()
            self._update_preview()

    def _on_delete(self):
        self.delete_requested = True
        self.reject()

    def _update_preview(self):
        self.color_button.setText(self._color)
        self.color_button.setStyleSheet(f"color: {self._color};")

        base_font = FONT_FAMILIES.get(self.family_combo.currentText(), "Helvetica")
        font = QFont(QT_FONT_FAMILIES.get(base_font, "Helvetica"))
        font.setPointSize(self.size_spin.value())
        self.preview_label.setFont(font)
        self.preview_label.setText(self.text_edit.toPlainText() or " ")
        self.preview_label.setStyleSheet(
            f"background-color: white; padding: 4px; color: {self._color};"
        )

    def values(self) -> Dict[str, Any]:
        """Field values in the form AnnotationManager.update() takes."""
        return {
            "text": self.text_edit.toPlainText().strip(),
            "font_family": self.family_combo.currentText(),
            "font_size": self.size_spin.value(),
            "font_color": self._color,
        }
