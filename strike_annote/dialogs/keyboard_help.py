# strike_annote/dialogs/keyboard_help.py
from __future__ import annotations

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QGridLayout,
    QLabel,
    QVBoxLayout,
)

from ..domain import KEYBOARD_SHORTCUTS, ActionCatalog


class KeyboardHelpDialog(QDialog):
    """
    Non-modal shortcut reference. Toggled with '?'; the action hotkeys are read
    from the active catalog so a configured catalog shows its own keys.
    """

    def __init__(self, catalog: ActionCatalog, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Keyboard Shortcuts")
        self.setModal(False)
        self.resize(460, 520)

        layout = QVBoxLayout(self)
        layout.setSpacing(10)

        grid = QGridLayout()
        grid.setHorizontalSpacing(16)
        row = 0
        sections = dict(KEYBOARD_SHORTCUTS)
        sections["Actions"] = [(a.hotkey.upper(), a.name) for a in catalog.all()]
        for title, entries in sections.items():
            header = QLabel(title)
            header.setStyleSheet("font-weight: bold;")
            grid.addWidget(header, row, 0, 1, 2)
            row += 1
            for key, desc in entries:
                k = QLabel(key)
                k.setStyleSheet("font-family: monospace; padding: 1px 6px; border: 1px solid #52525b;")
                k.setAlignment(Qt.AlignCenter)
                grid.addWidget(k, row, 0)
                grid.addWidget(QLabel(desc), row, 1)
                row += 1
        layout.addLayout(grid)
        layout.addStretch()

        buttons = QDialogButtonBox(QDialogButtonBox.Close)
        buttons.rejected.connect(self.hide)
        layout.addWidget(buttons)

    def keyPressEvent(self, event):
        if event.text() == "?" or event.key() == Qt.Key_Escape:
            self.hide()
            event.accept()
            return
        super().keyPressEvent(event)
