# strike_annote/widgets/video_view.py
from __future__ import annotations

from typing import Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor, QPainter, QPen
from PyQt5.QtWidgets import QSizePolicy, QWidget

from ..timeutils import format_time_precise


class VideoView(QWidget):
    """
    Stand-in for the video surface. Nothing is decoded; the widget shows what the
    labeler needs to place marks: file name, clock time, frame counter, play state
    and the pending IN/OUT marks.
    """

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setMinimumSize(480, 270)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

        self._filename = ""
        self._time = 0.0
        self._duration = 0.0
        self._frame = 0
        self._total_frames = 0
        self._playing = False
        self._speed = 1.0
        self._mark_in: Optional[float] = None
        self._mark_out: Optional[float] = None

    def set_video(self, filename: str, duration: float, total_frames: int) -> None:
        self._filename = filename
        self._duration = max(0.0, float(duration))
        self._total_frames = max(0, int(total_frames))
        self.update()

    def set_playback(self, t: float, frame: int, playing: bool, speed: float) -> None:
        self._time = t
        self._frame = frame
        self._playing = playing
        self._speed = speed
        self.update()

    def set_marks(self, mark_in: Optional[float], mark_out: Optional[float]) -> None:
        self._mark_in = mark_in
        self._mark_out = mark_out
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor("#000000"))
        r = self.rect().adjusted(12, 10, -12, -10)

        if not self._filename:
            painter.setPen(QPen(QColor("#6b6b6b"), 1))
            painter.drawText(self.rect(), Qt.AlignCenter, "No video selected")
            painter.end()
            return

        painter.setPen(QPen(QColor("#d4d4d8"), 1))
        painter.drawText(r, Qt.AlignLeft | Qt.AlignTop, self._filename)

        state = "PLAYING" if self._playing else "PAUSED"
        painter.drawText(r, Qt.AlignRight | Qt.AlignTop, f"{state}  {self._speed:g}x")

        f = painter.font()
        f.setPointSize(max(f.pointSize(), 10) * 2)
        painter.setFont(f)
        painter.drawText(
            self.rect(),
            Qt.AlignCenter,
            f"{format_time_precise(self._time)} / {format_time_precise(self._duration)}",
        )
        painter.setFont(self.font())

        painter.drawText(r, Qt.AlignLeft | Qt.AlignBottom, f"Frame: {self._frame} / {self._total_frames}")

        if self._mark_in is not None:
            painter.setPen(QPen(QColor("#EAB308"), 1))
            text = f"IN {format_time_precise(self._mark_in)}"
            if self._mark_out is not None:
                text += f"   OUT {format_time_precise(self._mark_out)}"
            painter.drawText(r, Qt.AlignRight | Qt.AlignBottom, text)
        painter.end()
