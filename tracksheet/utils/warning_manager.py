"""
Confirmation dialogs that the user can silence for the rest of the session.
"""
from enum import Enum
from typing import Dict, Set

from PyQt5.QtWidgets import QCheckBox, QMessageBox, QWidget


class WarningType(Enum):
    DELETE_ANNOTATION = "delete_annotation"
    REPLACE_ATTACHMENT = "replace_attachment"
    DISCARD_UNSAVED = "discard_unsaved"
    EXIT_UNSAVED = "exit_unsaved"


class WarningManager:
    """Remembers "don't ask again" choices for one application session."""

    def __init__(self):
        self._suppressed: Set[WarningType] = set()
        self._last_choices: Dict[WarningType, int] = {}

    def should_show_warning(self, warning_type: WarningType) -> bool:
        return warning_type not in self._suppressed

    def suppress_warning(self, warning_type: WarningType) -> None:
        self._suppressed.add(warning_type)

    def reset_all_warnings(self) -> None:
        self._suppressed.clear()
        self._last_choices.clear()

    def show_warning(self, parent: QWidget, warning_type: WarningType,
                     title: str, message: str,
                     buttons: int = QMessageBox.Yes | QMessageBox.No,
                     default_button: int = QMessageBox.No,
                     show_dont_ask: bool = True) -> int:
        """
        Show a question box, or repeat the remembered answer if silenced.

        Returns:
            The QMessageBox button the user chose
        """
        if not self.should_show_warning(warning_type):
            return self._last_choices.get(warning_type, QMessageBox.Yes)

        msg_box = QMessageBox(parent)
        msg_box.setIcon(QMessageBox.Question)
        msg_box.setWindowTitle(title)
        msg_box.setText(message)
        msg_box.setStandardButtons(buttons)
        msg_box.setDefaultButton(default_button)

        dont_ask_checkbox = None
        if show_dont_ask:
            dont_ask_checkbox = QCheckBox("Don't ask again this session")
            msg_box.setCheckBox(dont_ask_checkbox)

        result = msg_box.exec_()
        self._last_choices[warning_type] = result

        if dont_ask_checkbox is not None and dont_ask_checkbox.isChecked():
            self.suppress_warning(warning_type)
        return result

    def show_confirmation(self, parent: QWidget, warning_type: WarningType,
                          title: str, message: str, show_dont_ask: bool = True) -> bool:
        """Yes/No question. True if the user answered Yes."""
        result = self.show_warning(parent, warning_type, title, message,
                                   QMessageBox.Yes | QMessageBox.No,
                                   QMessageBox.No, show_dont_ask)
        return result == QMessageBox.Yes

    def show_save_discard_cancel(self, parent: QWidget, warning_type: WarningType,
                                 title: str = "Unsaved Changes",
                                 message: str = "The template has unsaved changes. Save them?",
                                 show_dont_ask: bool = False) -> int:
        return self.show_warning(parent, warning_type, title, message,
                                 QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel,
                                 QMessageBox.Save, show_dont_ask)


warning_manager = WarningManager()
