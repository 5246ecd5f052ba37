# strike_annote/widgets/video_queue.py
from __future__ import annotations

from typing import Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..domain import VideoItem, VideoQueue, VideoStatus
from ..timeutils import format_time_short


STATUS_STYLE = {
    VideoStatus.NOT_STARTED: ("○", "#8a8a8f"),
    VideoStatus.IN_PROGRESS: ("◐", "#EAB308"),
    VideoStatus.COMPLETE: ("●", "#22C55E"),
}


class VideoQueuePanel(QGroupBox):
    """
    Left panel: overall progress plus one row per queued video.

    Signals:
      - video_selected(video_id) on click
      - add_videos_requested()
      - mark_complete_requested(video_id) for the current row
    """
    video_selected = pyqtSignal(str)
    add_videos_requested = pyqtSignal()
    mark_complete_requested = pyqtSignal(str)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__("Video Queue", parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(6)

        self.progress_label = QLabel("0 / 0 complete")
        self.progress = QProgressBar()
        self.progress.setRange(0, 100)
        self.progress.setTextVisible(False)
        layout.addWidget(self.progress_label)
        layout.addWidget(self.progress)

        self.list = QListWidget()
        self.list.setSelectionMode(QAbstractItemView.SingleSelection)
        self.list.setFocusPolicy(Qt.NoFocus)
        self.list.itemClicked.connect(self._on_item_clicked)
        layout.addWidget(self.list, stretch=1)

        btns = QHBoxLayout()
        self.btn_add = QPushButton("Add Videos")
        self.btn_complete = QPushButton("Mark Complete")
        for b in (self.btn_add, self.btn_complete):
            b.setFocusPolicy(Qt.NoFocus)
            b.setCursor(Qt.PointingHandCursor)
        self.btn_add.clicked.connect(self.add_videos_requested.emit)
        self.btn_complete.clicked.connect(self._on_complete_clicked)
        btns.addWidget(self.btn_add)
        btns.addWidget(self.btn_complete)
        layout.addLayout(btns)

    def set_queue(self, queue: VideoQueue) -> None:
        total = len(queue.videos)
        done = queue.completed_count()
        self.progress_label.setText(f"{done} / {total} complete")
        self.progress.setValue(int(round(queue.progress_percent())))

        current = queue.current()
        self.list.clear()
        for v in queue.videos:
            it = QListWidgetItem(self._row_text(v))
            it.setData(Qt.UserRole, v.video_id)
            it.setForeground(QColor(STATUS_STYLE[v.status][1]))
            it.setToolTip(f"{v.path or v.filename}\n{v.resolution} @ {v.fps:g} fps, {v.bitrate} kbps")
            self.list.addItem(it)
            if current is not None and v.video_id == current.video_id:
                self.list.setCurrentItem(it)

        self.btn_complete.setEnabled(current is not None and current.status != VideoStatus.COMPLETE)

    def _row_text(self, v: VideoItem) -> str:
        glyph = STATUS_STYLE[v.status][0]
        est = f"/{v.estimated_segments}" if v.estimated_segments else ""
        return f"{glyph} {v.filename}   {format_time_short(v.duration)}   {v.segments_labeled}{est} segs"

    def _on_item_clicked(self, item: QListWidgetItem):
        vid = item.data(Qt.UserRole)
        if vid:
            self.video_selected.emit(str(vid))

    def _on_complete_clicked(self):
        item = self.list.currentItem()
        if item is not None:
            self.mark_complete_requested.emit(str(item.data(Qt.UserRole)))
