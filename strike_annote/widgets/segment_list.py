# strike_annote/widgets/segment_list.py
from __future__ import annotations

from typing import List, Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMenu,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..domain import ALL_CATEGORIES, ActionCatalog, ActionCategory, Segment, category_color_hex
from ..segment_store import SegmentStore, SortKey
from ..timeutils import format_time_range


TABLE_COLUMNS = ["#", "action", "short", "time", "duration"]

FILTER_CHOICES = [
    ("All", ALL_CATEGORIES),
    ("Straights", ActionCategory.STRAIGHT.value),
    ("Hooks", ActionCategory.HOOK.value),
    ("Uppercuts", ActionCategory.UPPERCUT.value),
    ("Other", ActionCategory.OTHER.value),
]


class SegmentList(QGroupBox):
    """
    Committed segments for the current video.

    Sorting/filtering always goes through SegmentStore.list(); the table holds
    no segment state of its own beyond the ids of the rows it shows.

    Signals:
      - edit_requested(segment_id)
      - delete_requested(segment_id)
      - view_changed() when sort or filter changes
    """
    edit_requested = pyqtSignal(int)
    delete_requested = pyqtSignal(int)
    view_changed = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__("Segments", parent)

        self._row_ids: List[int] = []

        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(6)

        bar = QHBoxLayout()
        self.combo_sort = QComboBox()
        self.combo_sort.addItem("By Time", SortKey.BY_TIME.value)
        self.combo_sort.addItem("By Action", SortKey.BY_ACTION.value)
        self.combo_filter = QComboBox()
        for label, value in FILTER_CHOICES:
            self.combo_filter.addItem(label, value)
        for c in (self.combo_sort, self.combo_filter):
            c.setFocusPolicy(Qt.NoFocus)
            c.currentIndexChanged.connect(lambda _i: self.view_changed.emit())
        self.count_label = QLabel("0 of 0")
        bar.addWidget(self.combo_sort)
        bar.addWidget(self.combo_filter)
        bar.addStretch()
        bar.addWidget(self.count_label)
        layout.addLayout(bar)

        self.table = QTableWidget(0, len(TABLE_COLUMNS))
        self.table.setHorizontalHeaderLabels(TABLE_COLUMNS)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.verticalHeader().setVisible(False)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.setFocusPolicy(Qt.NoFocus)
        self.table.setContextMenuPolicy(Qt.CustomContextMenu)
        self.table.customContextMenuRequested.connect(self._show_context_menu)
        self.table.cellDoubleClicked.connect(lambda row, _col: self._emit_for_row(row, self.edit_requested))
        layout.addWidget(self.table, stretch=1)

        actions = QHBoxLayout()
        self.btn_edit = QPushButton("Edit Selected")
        self.btn_delete = QPushButton("Delete Selected")
        for b in (self.btn_edit, self.btn_delete):
            b.setFocusPolicy(Qt.NoFocus)
            b.setCursor(Qt.PointingHandCursor)
        self.btn_edit.clicked.connect(lambda: self._emit_for_row(self.table.currentRow(), self.edit_requested))
        self.btn_delete.clicked.connect(lambda: self._emit_for_row(self.table.currentRow(), self.delete_requested))
        actions.addWidget(self.btn_edit)
        actions.addWidget(self.btn_delete)
        actions.addStretch()
        layout.addLayout(actions)

        self.empty_label = QLabel("No segments yet. Mark your first segment using [ and ] keys.")
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.empty_label.setStyleSheet("color: #8a8a8f;")
        layout.addWidget(self.empty_label)

    # ---------------- Public API ----------------

    def sort_key(self) -> SortKey:
        return SortKey(self.combo_sort.currentData())

    def category_filter(self) -> str:
        return str(self.combo_filter.currentData())

    def set_segments(self, store: SegmentStore, catalog: ActionCatalog) -> None:
        rows = store.list(self.sort_key(), self.category_filter())
        self._row_ids = [s.id for s in rows]
        self.count_label.setText(f"{len(rows)} of {store.count()}")
        self.empty_label.setVisible(store.is_empty())

        self.table.setRowCount(0)
        for i, seg in enumerate(rows):
            self._append_row(i, seg, catalog)

    def clear_segments(self) -> None:
        self._row_ids = []
        self.table.setRowCount(0)
        self.count_label.setText("0 of 0")
        self.empty_label.setVisible(True)

    # ---------------- Rendering ----------------

    def _append_row(self, index: int, seg: Segment, catalog: ActionCatalog) -> None:
        action = catalog.lookup(seg.action_id)
        row = self.table.rowCount()
        self.table.insertRow(row)

        values = [
            f"#{index + 1}",
            action.name if action else f"unknown ({seg.action_id})",
            action.short_name if action else "?",
            format_time_range(seg.start_time, seg.end_time),
            f"{seg.duration:.2f}s",
        ]
        for col, val in enumerate(values):
            item = QTableWidgetItem(val)
            item.setToolTip(val)
            if col == 2 and action is not None:
                item.setForeground(QColor(category_color_hex(action.category)))
            self.table.setItem(row, col, item)

    # ---------------- Context menu ----------------

    def _show_context_menu(self, pos):
        item = self.table.itemAt(pos)
        if item is None:
            return
        row = item.row()
        menu = QMenu(self)
        edit_action = menu.addAction("Jump to segment / edit")
        delete_action = menu.addAction("Delete segment")
        chosen = menu.exec_(self.table.viewport().mapToGlobal(pos))
        if chosen == edit_action:
            self._emit_for_row(row, self.edit_requested)
        elif chosen == delete_action:
            self._emit_for_row(row, self.delete_requested)

    def _emit_for_row(self, row: int, signal) -> None:
        if 0 <= row < len(self._row_ids):
            signal.emit(self._row_ids[row])
