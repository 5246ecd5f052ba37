# strike_annote/app.py
from __future__ import annotations

import logging
import sys
from typing import Optional

from PyQt5.QtWidgets import QApplication, QFileDialog, QMessageBox

from .main_window import MainWindow


LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    logging.getLogger("strike_annote").setLevel(level)


def choose_data_root(parent=None) -> Optional[str]:
    d = QFileDialog.getExistingDirectory(parent, "Select Data Root")
    return d or None


def run_app(data_root: Optional[str] = None) -> int:
    configure_logging()
    app = QApplication(sys.argv)

    win = MainWindow(data_root=data_root)
    win.show()

    # If root not set, prompt once (non-blocking for main window usage)
    if not win.data_root:
        QMessageBox.information(
            win,
            "Select Data Root",
            "Please choose a data root directory for config.json, the video queue and label files.",
        )
        d = choose_data_root(win)
        if d:
            win.set_data_root(d)

    return app.exec_()
