# strike_annote/widgets/timeline.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from PyQt5.QtCore import Qt, QRect, QRectF, QPoint, pyqtSignal
from PyQt5.QtGui import QColor, QPainter, QPen, QFontMetrics, QPolygon
from PyQt5.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..domain import ActionCatalog, Segment, category_color_hex
from ..timeutils import MAX_ZOOM, MIN_ZOOM, TimelineView, format_time_short, span_between, segment_span


@dataclass
class _HitBlock:
    segment_id: int
    rect: QRect


class _TimelineCanvas(QWidget):
    seek_requested = pyqtSignal(float)   # fraction of track width, 0..1
    segment_clicked = pyqtSignal(int)    # segment id

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)

        # Data
        self._view = TimelineView(total_duration=0.0)
        self._segments: List[Segment] = []
        self._catalog: Optional[ActionCatalog] = None
        self._mark_in: Optional[float] = None
        self._mark_out: Optional[float] = None

        # Styling/layout
        self._ruler_h = 18
        self._block_pad = 6

        self._hit_blocks: List[_HitBlock] = []

        self.setMouseTracking(True)
        self.setMinimumHeight(72)
        self.setMinimumWidth(400)

    # ---------------- Public API ----------------

    def set_state(
        self,
        view: TimelineView,
        segments: List[Segment],
        catalog: ActionCatalog,
        mark_in: Optional[float],
        mark_out: Optional[float],
    ) -> None:
        self._view = view
        self._segments = list(segments or [])
        self._catalog = catalog
        self._mark_in = mark_in
        self._mark_out = mark_out
        self.update()

    # ---------------- Geometry helpers ----------------

    def _percent_to_x(self, percent: float) -> int:
        return int(round((percent / 100.0) * max(1, self.width())))

    # ---------------- Painting ----------------

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        painter.fillRect(self.rect(), QColor("#1c1c1f"))
        self._hit_blocks = []

        if not self._view.is_usable():
            painter.setPen(QPen(QColor("#6b6b6b"), 1))
            painter.drawText(self.rect(), Qt.AlignCenter, "No video loaded")
            painter.end()
            return

        fm = QFontMetrics(self.font())
        self._paint_ruler(painter, fm)
        self._paint_segments(painter, fm)
        self._paint_marks(painter)
        self._paint_playhead(painter)
        painter.end()

    def _paint_ruler(self, painter: QPainter, fm: QFontMetrics) -> None:
        painter.setPen(QPen(QColor("#3a3a3f"), 1))
        painter.drawLine(0, self._ruler_h, self.width(), self._ruler_h)

        for t in self._view.tick_marks():
            pos = self._view.to_percent(t)
            if pos < -5 or pos > 105:
                continue
            x = self._percent_to_x(pos)
            label = format_time_short(t)
            w = fm.horizontalAdvance(label)
            painter.setPen(QPen(QColor("#8a8a8f"), 1))
            painter.drawText(x - w // 2, fm.ascent(), label)
            painter.setPen(QPen(QColor("#3a3a3f"), 1))
            painter.drawLine(x, self._ruler_h - 5, x, self._ruler_h)

    def _block_top(self) -> int:
        return self._ruler_h + self._block_pad

    def _block_height(self) -> int:
        return max(8, self.height() - self._block_top() - self._block_pad)

    def _paint_segments(self, painter: QPainter, fm: QFontMetrics) -> None:
        if self._catalog is None:
            return
        top = self._block_top()
        h = self._block_height()
        for seg in self._segments:
            action = self._catalog.lookup(seg.action_id)
            if action is None:
                continue
            span = segment_span(seg, self._view)
            if span is None:
                continue

            x1 = self._percent_to_x(span.start_percent)
            x2 = self._percent_to_x(span.end_percent)
            if x2 <= x1:
                x2 = x1 + 1
            rect = QRect(x1, top, x2 - x1, h)

            painter.fillRect(rect, QColor(category_color_hex(action.category)))
            painter.setPen(QPen(QColor("#000000"), 1))
            painter.drawRect(rect)

            # Only draw the label if the block is wide enough
            if span.width_percent > 5 and fm.horizontalAdvance(action.short_name) + 6 < rect.width():
                painter.setPen(QPen(QColor("#ffffff"), 1))
                painter.drawText(rect, Qt.AlignCenter, action.short_name)

            self._hit_blocks.append(_HitBlock(segment_id=seg.id, rect=rect))

    def _paint_marks(self, painter: QPainter) -> None:
        if self._mark_in is None:
            return
        top = self._block_top()
        h = self._block_height()
        accent = QColor("#EAB308")

        end = self._mark_out if self._mark_out is not None else self._mark_in
        span = span_between(self._mark_in, end, self._view)
        if span is not None and self._mark_out is not None:
            x1 = self._percent_to_x(span.start_percent)
            x2 = self._percent_to_x(span.end_percent)
            fill = QColor(accent)
            fill.setAlpha(70)
            painter.fillRect(QRectF(x1, top, max(2, x2 - x1), h), fill)

        painter.setPen(QPen(accent, 2))
        for t, tag in ((self._mark_in, "IN"), (self._mark_out, "OUT")):
            if t is None:
                continue
            pos = self._view.to_percent(t)
            if pos < 0 or pos > 100:
                continue
            x = self._percent_to_x(pos)
            painter.drawLine(x, top, x, top + h)
            painter.drawText(x + 3, top + h - 3, tag)

    def _paint_playhead(self, painter: QPainter) -> None:
        pos = self._view.to_percent(self._view.current_time)
        if pos < 0 or pos > 100:
            return
        x = self._percent_to_x(pos)
        red = QColor("#ef4444")
        painter.setPen(QPen(red, 2))
        painter.drawLine(x, 0, x, self.height())
        painter.setBrush(red)
        painter.drawPolygon(QPolygon([QPoint(x - 5, 0), QPoint(x + 5, 0), QPoint(x, 6)]))

    # ---------------- Interaction / hit testing ----------------

    def _hit_test_block(self, pos: QPoint) -> Optional[_HitBlock]:
        # Later blocks are drawn on top; test them first.
        for hb in reversed(self._hit_blocks):
            if hb.rect.contains(pos):
                return hb
        return None

    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton or not self._view.is_usable():
            return super().mousePressEvent(event)

        hb = self._hit_test_block(event.pos())
        if hb is not None:
            self.segment_clicked.emit(hb.segment_id)
        else:
            self.seek_requested.emit(event.pos().x() / float(max(1, self.width())))
        event.accept()

    def mouseMoveEvent(self, event):
        if self._hit_test_block(event.pos()) is not None:
            self.setCursor(Qt.PointingHandCursor)
        else:
            self.setCursor(Qt.ArrowCursor)
        return super().mouseMoveEvent(event)


class TimelineWidget(QGroupBox):
    """
    Zoomable timeline: tick ruler, category-colored segments, IN/OUT marks, playhead.

    Use:
      - set_state(view, segments, catalog, mark_in, mark_out) after every change
      - seek_requested(fraction) when the track is clicked
      - segment_clicked(segment_id) when a segment block is clicked
      - zoom_in_requested / zoom_out_requested from the header buttons
    """
    seek_requested = pyqtSignal(float)
    segment_clicked = pyqtSignal(int)
    zoom_in_requested = pyqtSignal()
    zoom_out_requested = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__("Timeline", parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(6)

        header = QHBoxLayout()
        header.addStretch()
        self.btn_zoom_out = QPushButton("−")
        self.btn_zoom_in = QPushButton("+")
        self.zoom_label = QLabel("1.0x")
        self.zoom_label.setMinimumWidth(40)
        self.zoom_label.setAlignment(Qt.AlignCenter)
        for b in (self.btn_zoom_out, self.btn_zoom_in):
            b.setFixedWidth(28)
            b.setFocusPolicy(Qt.NoFocus)
            b.setCursor(Qt.PointingHandCursor)
        self.btn_zoom_out.clicked.connect(self.zoom_out_requested.emit)
        self.btn_zoom_in.clicked.connect(self.zoom_in_requested.emit)
        header.addWidget(self.btn_zoom_out)
        header.addWidget(self.zoom_label)
        header.addWidget(self.btn_zoom_in)
        layout.addLayout(header)

        self.canvas = _TimelineCanvas(self)
        self.canvas.seek_requested.connect(self.seek_requested.emit)
        self.canvas.segment_clicked.connect(self.segment_clicked.emit)
        layout.addWidget(self.canvas, stretch=1)

        marks = QHBoxLayout()
        self.mark_in_label = QLabel("Mark In [ : --:--")
        self.mark_out_label = QLabel("Mark Out ] : --:--")
        self.duration_label = QLabel("")
        marks.addWidget(self.mark_in_label)
        marks.addSpacing(16)
        marks.addWidget(self.mark_out_label)
        marks.addStretch()
        marks.addWidget(self.duration_label)
        layout.addLayout(marks)

    def set_state(
        self,
        view: TimelineView,
        segments: List[Segment],
        catalog: ActionCatalog,
        mark_in: Optional[float],
        mark_out: Optional[float],
    ) -> None:
        self.canvas.set_state(view, segments, catalog, mark_in, mark_out)
        self.zoom_label.setText(f"{view.zoom:.1f}x")
        self.btn_zoom_out.setEnabled(view.zoom > MIN_ZOOM)
        self.btn_zoom_in.setEnabled(view.zoom < MAX_ZOOM)

        self.mark_in_label.setText(f"Mark In [ : {format_time_short(mark_in) if mark_in is not None else '--:--'}")
        self.mark_out_label.setText(f"Mark Out ] : {format_time_short(mark_out) if mark_out is not None else '--:--'}")
        if mark_in is not None and mark_out is not None:
            self.duration_label.setText(f"Duration: {mark_out - mark_in:.2f}s")
        else:
            self.duration_label.setText("")
