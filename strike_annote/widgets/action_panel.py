# strike_annote/widgets/action_panel.py
from __future__ import annotations

from typing import Dict, Optional, Set

from PyQt5.QtCore import Qt, QTimer, pyqtSignal
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import (
    QButtonGroup,
    QGridLayout,
    QGroupBox,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..domain import CATEGORY_LABELS, ActionCatalog, ActionCategory, category_color_hex


FLASH_MS = 150


def _button_style(color: str, flashing: bool = False) -> str:
    border = 3 if flashing else 1
    style = (
        f"QPushButton {{ text-align: left; padding: 4px; border: {border}px solid {color}; }}"
        f"QPushButton:checked {{ background: {color}; color: white; }}"
    )
    if flashing:
        c = QColor(color)
        style += f"QPushButton:!checked {{ background: rgba({c.red()}, {c.green()}, {c.blue()}, 90); }}"
    return style


class ActionPanel(QGroupBox):
    """
    Right panel: the action catalog grouped by category, one button per action.

    Emits:
      - action_selected(int) when a button is clicked

    flash_action() briefly highlights a button; the main window calls it when
    an action hotkey is pressed so the keyboard choice is visible.
    """
    action_selected = pyqtSignal(int)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__("Actions", parent)

        self._buttons: Dict[int, QPushButton] = {}
        self._colors: Dict[int, str] = {}
        self._flashing: Set[int] = set()
        self._group = QButtonGroup(self)
        self._group.setExclusive(True)
        self._group.idClicked.connect(self.action_selected.emit)

        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(6, 6, 6, 6)
        self._layout.setSpacing(8)

    # ---------------- Public API ----------------

    def set_catalog(self, catalog: ActionCatalog) -> None:
        self._clear()
        for category in ActionCategory:
            actions = catalog.by_category(category)
            if not actions:
                continue
            color = category_color_hex(category)
            title = QLabel(CATEGORY_LABELS[category])
            title.setStyleSheet(f"color: {color}; font-weight: bold;")
            self._layout.addWidget(title)

            grid = QGridLayout()
            grid.setSpacing(4)
            for i, action in enumerate(actions):
                btn = QPushButton(f"{action.hotkey.upper()}  {action.name}")
                btn.setCheckable(True)
                btn.setFocusPolicy(Qt.NoFocus)
                btn.setCursor(Qt.PointingHandCursor)
                btn.setToolTip(f"{action.short_name} (hotkey {action.hotkey.upper()})")
                btn.setStyleSheet(_button_style(color))
                self._group.addButton(btn, action.id)
                self._buttons[action.id] = btn
                self._colors[action.id] = color
                grid.addWidget(btn, i // 2, i % 2)
            self._layout.addLayout(grid)

        hint = QLabel("Press hotkey or click to select action, then mark segment with [ and ]")
        hint.setWordWrap(True)
        hint.setStyleSheet("color: #8a8a8f;")
        self._layout.addWidget(hint)
        self._layout.addStretch()

    def set_selected(self, action_id: Optional[int]) -> None:
        if action_id is None or action_id not in self._buttons:
            # An exclusive group cannot be emptied directly
            self._group.setExclusive(False)
            for b in self._buttons.values():
                b.setChecked(False)
            self._group.setExclusive(True)
            return
        self._buttons[action_id].setChecked(True)

    def flash_action(self, action_id: int) -> None:
        btn = self._buttons.get(action_id)
        if btn is None:
            return
        self._flashing.add(action_id)
        btn.setStyleSheet(_button_style(self._colors[action_id], flashing=True))
        QTimer.singleShot(FLASH_MS, lambda: self._end_flash(action_id, btn))

    def is_flashing(self, action_id: int) -> bool:
        return action_id in self._flashing

    # ---------------- Internals ----------------

    def _end_flash(self, action_id: int, btn: QPushButton) -> None:
        # The catalog may have been rebuilt since the flash started
        if self._buttons.get(action_id) is not btn:
            return
        self._flashing.discard(action_id)
        btn.setStyleSheet(_button_style(self._colors[action_id]))

    def _clear(self) -> None:
        for b in list(self._group.buttons()):
            self._group.removeButton(b)
        self._buttons = {}
        self._colors = {}
        self._flashing = set()
        while self._layout.count():
            item = self._layout.takeAt(0)
            w = item.widget()
            if w is not None:
                w.deleteLater()
            elif item.layout() is not None:
                sub = item.layout()
                while sub.count():
                    child = sub.takeAt(0).widget()
                    if child is not None:
                        child.deleteLater()
