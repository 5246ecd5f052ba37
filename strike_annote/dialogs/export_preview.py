# strike_annote/dialogs/export_preview.py
from __future__ import annotations

import logging
import os
from typing import Dict, Optional

from PyQt5.QtGui import QFontDatabase
from PyQt5.QtWidgets import (
    QApplication,
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
)

from ..export import export_json_text
from ..persistence import write_export


logger = logging.getLogger(__name__)


class ExportPreviewDialog(QDialog):
    """
    Shows the export document exactly as it will be written, with Copy and Save.
    """

    def __init__(self, doc: Dict, default_path: str, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Export Preview")
        self.setModal(True)
        self.resize(640, 560)

        self._doc = doc
        self._default_path = default_path
        self._saved_path: Optional[str] = None
        self._text = export_json_text(doc)

        self._build_ui()

    def saved_path(self) -> Optional[str]:
        return self._saved_path

    # ---------------- UI ----------------

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(10)

        n = len(self._doc.get("segments") or [])
        size_kb = len(self._text.encode("utf-8")) / 1024.0
        layout.addWidget(QLabel(f"{self._doc.get('video_file', '')}  ·  {n} segments  ·  {size_kb:.1f} KB"))

        self.text = QPlainTextEdit()
        self.text.setReadOnly(True)
        self.text.setFont(QFontDatabase.systemFont(QFontDatabase.FixedFont))
        self.text.setPlainText(self._text)
        layout.addWidget(self.text, stretch=1)

        row = QHBoxLayout()
        self.btn_copy = QPushButton("Copy")
        self.btn_copy.clicked.connect(self._copy)
        row.addWidget(self.btn_copy)
        row.addStretch()
        layout.addLayout(row)

        buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Close)
        buttons.accepted.connect(self._save)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _copy(self):
        QApplication.clipboard().setText(self._text)

    def _save(self):
        path, _ = QFileDialog.getSaveFileName(self, "Save Export", self._default_path, "JSON (*.json)")
        if not path:
            return
        try:
            write_export(path, self._doc)
        except OSError as e:
            QMessageBox.warning(self, "Export failed", str(e))
            return
        logger.info("Exported %s segments to %s", len(self._doc.get("segments") or []), path)
        self._saved_path = os.path.abspath(path)
        self.accept()
