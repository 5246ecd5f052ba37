# strike_annote/main_window.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtWidgets import (
    QAbstractSpinBox,
    QApplication,
    QComboBox,
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSplitter,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from .domain import ActionCatalog, AppConfig, VideoItem, VideoQueue, VideoStatus
from .keymap import (
    KEY_BACKSPACE,
    KEY_DELETE,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_LEFT,
    KEY_RIGHT,
    KEY_SPACE,
    CommandKind,
    resolve_key,
)
from .media_probe import ALLOWED_VIDEO_EXTS, quality_report, video_item_from_path
from .persistence import (
    default_export_path,
    load_or_default_config,
    load_queue,
    load_video_segments,
    save_config,
    save_queue,
    save_video_labels,
)
from .session import LabelingSession, Outcome
from .timeutils import format_time_precise
from .widgets.action_panel import ActionPanel
from .widgets.segment_list import SegmentList
from .widgets.timeline import TimelineWidget
from .widgets.video_queue import VideoQueuePanel
from .widgets.video_view import VideoView
from .dialogs.export_preview import ExportPreviewDialog
from .dialogs.keyboard_help import KeyboardHelpDialog


logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 33
TOAST_MS = 2500

# Qt key -> normalized name understood by keymap.resolve_key
_QT_KEY_NAMES: Dict[int, str] = {
    Qt.Key_Space: KEY_SPACE,
    Qt.Key_Left: KEY_LEFT,
    Qt.Key_Right: KEY_RIGHT,
    Qt.Key_Return: KEY_ENTER,
    Qt.Key_Enter: KEY_ENTER,
    Qt.Key_Backspace: KEY_BACKSPACE,
    Qt.Key_Delete: KEY_DELETE,
    Qt.Key_Escape: KEY_ESCAPE,
}

# Held arrow keys keep stepping; everything else fires once per press.
_REPEATABLE = {Qt.Key_Left, Qt.Key_Right}


class MainWindow(QMainWindow):
    def __init__(self, data_root: Optional[str] = None):
        super().__init__()
        self.setWindowTitle("Strike-Annote (Boxing Action Labeling)")
        self.resize(1600, 960)
        self.setFocusPolicy(Qt.StrongFocus)

        self.data_root: Optional[str] = None
        self.cfg: Optional[AppConfig] = None
        self.catalog: Optional[ActionCatalog] = None
        self.queue: VideoQueue = VideoQueue()
        self.session: Optional[LabelingSession] = None

        self._help: Optional[KeyboardHelpDialog] = None

        self._timer = QTimer(self)
        self._timer.setInterval(TICK_INTERVAL_MS)
        self._timer.timeout.connect(self._on_tick)

        self._build_ui()
        self.set_data_root(data_root)
        self._timer.start()

    # ---------------- UI ----------------

    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)

        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(6, 6, 6, 6)
        main_layout.setSpacing(6)

        # ===== Top: data root + annotator + export/help =====
        top = QHBoxLayout()
        top.setSpacing(10)
        main_layout.addLayout(top)

        root_box = QGroupBox("Data Root")
        root_lay = QHBoxLayout(root_box)
        root_lay.setContentsMargins(6, 6, 6, 6)
        self.root_label = QLabel("Not set")
        self.btn_set_root = QPushButton("Select Root")
        self.btn_set_root.clicked.connect(self._choose_data_root)
        root_lay.addWidget(self.root_label, stretch=1)
        root_lay.addWidget(self.btn_set_root)
        top.addWidget(root_box, stretch=4)

        out_box = QGroupBox("Labeling")
        out_lay = QHBoxLayout(out_box)
        out_lay.setContentsMargins(6, 6, 6, 6)
        self.annotator_label = QLabel("")
        self.btn_annotator = QPushButton("Set Annotator")
        self.btn_annotator.clicked.connect(self._set_annotator)
        self.quality_label = QLabel("")
        self.btn_export = QPushButton("Export")
        self.btn_export.clicked.connect(self._open_export_preview)
        self.btn_help = QPushButton("Shortcuts (?)")
        self.btn_help.clicked.connect(self._toggle_help)
        out_lay.addWidget(self.annotator_label)
        out_lay.addWidget(self.btn_annotator)
        out_lay.addSpacing(12)
        out_lay.addWidget(self.quality_label)
        out_lay.addStretch()
        out_lay.addWidget(self.btn_export)
        out_lay.addWidget(self.btn_help)
        top.addWidget(out_box, stretch=6)

        # ===== Middle: queue (left) | video + timeline (center) | actions + segments (right) =====
        split = QSplitter(Qt.Horizontal)
        main_layout.addWidget(split, stretch=1)

        self.queue_panel = VideoQueuePanel()
        self.queue_panel.video_selected.connect(self._on_queue_video_selected)
        self.queue_panel.add_videos_requested.connect(self._add_videos)
        self.queue_panel.mark_complete_requested.connect(self._mark_complete)
        split.addWidget(self.queue_panel)

        center = QWidget()
        center_lay = QVBoxLayout(center)
        center_lay.setContentsMargins(0, 0, 0, 0)
        center_lay.setSpacing(6)

        self.video_view = VideoView()
        center_lay.addWidget(self.video_view, stretch=3)

        play_bar = QHBoxLayout()
        play_bar.setSpacing(8)
        self.btn_back_1s = QPushButton("-1s")
        self.btn_prev_frame = QPushButton("◀ Frame")
        self.btn_play = QPushButton("Play")
        self.btn_next_frame = QPushButton("Frame ▶")
        self.btn_fwd_1s = QPushButton("+1s")
        self.btn_back_1s.clicked.connect(lambda: self._run_playback(lambda s: s.jump(-1.0)))
        self.btn_prev_frame.clicked.connect(lambda: self._run_playback(lambda s: s.step_frames(-1)))
        self.btn_play.clicked.connect(lambda: self._run_playback(lambda s: s.clock.toggle()))
        self.btn_next_frame.clicked.connect(lambda: self._run_playback(lambda s: s.step_frames(1)))
        self.btn_fwd_1s.clicked.connect(lambda: self._run_playback(lambda s: s.jump(1.0)))
        self.combo_speed = QComboBox()
        self.combo_speed.currentIndexChanged.connect(self._on_speed_changed)
        self.time_label = QLabel("0:00.00 / 0:00.00")
        self.frame_label = QLabel("Frame 0 / 0")
        for w in (self.btn_back_1s, self.btn_prev_frame, self.btn_play, self.btn_next_frame, self.btn_fwd_1s):
            play_bar.addWidget(w)
        play_bar.addSpacing(12)
        play_bar.addWidget(QLabel("Speed:"))
        play_bar.addWidget(self.combo_speed)
        play_bar.addStretch()
        play_bar.addWidget(self.time_label)
        play_bar.addSpacing(12)
        play_bar.addWidget(self.frame_label)
        center_lay.addLayout(play_bar)

        self.timeline = TimelineWidget()
        self.timeline.seek_requested.connect(self._on_timeline_seek)
        self.timeline.segment_clicked.connect(self._edit_segment)
        self.timeline.zoom_in_requested.connect(lambda: self._run_playback(lambda s: s.zoom_in()))
        self.timeline.zoom_out_requested.connect(lambda: self._run_playback(lambda s: s.zoom_out()))
        center_lay.addWidget(self.timeline, stretch=1)
        split.addWidget(center)

        right = QWidget()
        right_lay = QVBoxLayout(right)
        right_lay.setContentsMargins(0, 0, 0, 0)
        right_lay.setSpacing(6)
        self.action_panel = ActionPanel()
        self.action_panel.action_selected.connect(self._on_action_clicked)
        self.segment_list = SegmentList()
        self.segment_list.edit_requested.connect(self._edit_segment)
        self.segment_list.delete_requested.connect(self._delete_segment)
        self.segment_list.view_changed.connect(self._refresh_segments)
        right_lay.addWidget(self.action_panel, stretch=2)
        right_lay.addWidget(self.segment_list, stretch=3)
        split.addWidget(right)

        split.setStretchFactor(0, 2)
        split.setStretchFactor(1, 7)
        split.setStretchFactor(2, 3)

        self.statusBar().showMessage("Ready")

        self._apply_focus_policy()
        self._update_enabled_state()

    def _apply_focus_policy(self) -> None:
        """Buttons never take focus, so Space/Enter always reach the shortcut handler."""
        for w in (
            self.btn_set_root,
            self.btn_annotator,
            self.btn_export,
            self.btn_help,
            self.btn_back_1s,
            self.btn_prev_frame,
            self.btn_play,
            self.btn_next_frame,
            self.btn_fwd_1s,
            self.combo_speed,
        ):
            w.setFocusPolicy(Qt.NoFocus)
            w.setCursor(Qt.PointingHandCursor)

    # ---------------- Data root / config ----------------

    def _choose_data_root(self):
        d = QFileDialog.getExistingDirectory(self, "Select Data Root")
        if d:
            self.set_data_root(d)

    def set_data_root(self, data_root: Optional[str]) -> None:
        if self.session is not None:
            self._save_current_video()
        self.session = None

        if data_root:
            self.data_root = data_root
            self.root_label.setText(data_root)
            self.cfg = load_or_default_config(data_root)
            self.catalog = self.cfg.catalog()
            self.queue = load_queue(data_root)
            self.action_panel.set_catalog(self.catalog)
            self._populate_speeds()
            if self._help is not None:
                self._help.deleteLater()
                self._help = None
            logger.info("Data root %s: %d videos queued", data_root, len(self.queue.videos))
            self._open_current_video()
        else:
            self.data_root = None
            self.root_label.setText("Not set")
            self.cfg = None
            self.catalog = None
            self.queue = VideoQueue()
            self._refresh_all()

    def _populate_speeds(self) -> None:
        self.combo_speed.blockSignals(True)
        self.combo_speed.clear()
        for s in self.cfg.playback_speeds:
            self.combo_speed.addItem(f"{s:g}x", float(s))
        idx = self.combo_speed.findData(1.0)
        self.combo_speed.setCurrentIndex(idx if idx >= 0 else 0)
        self.combo_speed.blockSignals(False)

    def _set_annotator(self):
        if self.cfg is None:
            return
        name, ok = QInputDialog.getText(self, "Annotator", "Labeled by:", QLineEdit.Normal, self.cfg.annotator)
        name = (name or "").strip()
        if not ok or not name:
            return
        self.cfg.annotator = name
        try:
            save_config(self.cfg)
        except (OSError, ValueError) as e:
            QMessageBox.warning(self, "Config save failed", str(e))
        self._refresh_all()

    # ---------------- Queue / video switching ----------------

    def _open_current_video(self) -> None:
        video = self.queue.current()
        if video is None or self.cfg is None:
            self.session = None
            self._refresh_all()
            return
        segments = load_video_segments(self.data_root, video)
        self.session = LabelingSession(self.cfg, self.catalog, video, segments)
        self.session.clock.set_speed(self._selected_speed())
        self.session.sync_video_counts()
        logger.info("Opened %s (%d segments)", video.filename, self.session.store.count())
        self._refresh_all()

    def _switch_video(self, target: Optional[VideoItem]) -> None:
        """`target` has already been made current on the queue (or is None at a queue end)."""
        if target is None:
            self._toast(Outcome(False, "End of queue"))
            return
        if self.session is not None and self.session.video is target:
            return
        self._save_current_video()
        self._open_current_video()
        self._save_queue()
        self._toast(Outcome(True, "Video loaded", target.filename))

    def _on_queue_video_selected(self, video_id: str) -> None:
        self._switch_video(self.queue.select(video_id))

    def _next_video(self) -> None:
        self._switch_video(self.queue.next())

    def _previous_video(self) -> None:
        self._switch_video(self.queue.previous())

    def _add_videos(self):
        if not self.data_root:
            QMessageBox.warning(self, "No Root", "Please select a Data Root first.")
            return
        patterns = " ".join(f"*{e}" for e in sorted(ALLOWED_VIDEO_EXTS))
        paths, _ = QFileDialog.getOpenFileNames(self, "Add Videos", "", f"Videos ({patterns})")
        if not paths:
            return

        was_empty = self.queue.is_empty()
        errors: List[str] = []
        QApplication.setOverrideCursor(Qt.WaitCursor)
        try:
            for p in paths:
                try:
                    self.queue.add(video_item_from_path(p, self.queue.next_video_id()))
                except ValueError as e:
                    errors.append(str(e))
        finally:
            QApplication.restoreOverrideCursor()

        self._save_queue()
        if errors:
            QMessageBox.warning(self, "Some videos were skipped", "\n".join(errors))
        if was_empty and not self.queue.is_empty():
            self._open_current_video()
        else:
            self._refresh_queue()

    def _mark_complete(self, video_id: str) -> None:
        video = self.queue.get(video_id)
        if video is None:
            return
        video.status = VideoStatus.COMPLETE
        self._save_queue()
        self._refresh_queue()
        self._toast(Outcome(True, "Video complete", video.filename))

    # ---------------- Keyboard ----------------

    def keyPressEvent(self, event):
        fw = QApplication.focusWidget()
        if isinstance(fw, (QLineEdit, QTextEdit, QPlainTextEdit, QAbstractSpinBox)):
            return super().keyPressEvent(event)
        if event.isAutoRepeat() and event.key() not in _REPEATABLE:
            event.accept()
            return
        if self.catalog is None:
            return super().keyPressEvent(event)

        name = _QT_KEY_NAMES.get(event.key()) or event.text()
        cmd = resolve_key(name, bool(event.modifiers() & Qt.ShiftModifier), self.catalog)
        if cmd is None:
            return super().keyPressEvent(event)
        event.accept()

        if cmd.kind == CommandKind.TOGGLE_HELP:
            self._toggle_help()
            return
        if cmd.kind == CommandKind.NEXT_VIDEO:
            self._next_video()
            return
        if cmd.kind == CommandKind.PREVIOUS_VIDEO:
            self._previous_video()
            return
        if self.session is None:
            return

        if cmd.kind == CommandKind.SELECT_ACTION:
            self.action_panel.flash_action(cmd.arg)
        outcome = self.session.handle(cmd)
        if outcome is not None:
            self._toast(outcome)
        if cmd.kind == CommandKind.COMMIT and outcome is not None and outcome.ok:
            self._autosave()
        self._refresh_all()

    # ---------------- Playback ----------------

    def _run_playback(self, fn) -> None:
        if self.session is None:
            return
        fn(self.session)
        self._refresh_playback()

    def _on_tick(self) -> None:
        if self.session is None or not self.session.clock.playing:
            return
        self.session.tick()
        self._refresh_playback()

    def _on_timeline_seek(self, fraction: float) -> None:
        if self.session is None:
            return
        self.session.seek_fraction(fraction)
        self._refresh_playback()

    def _selected_speed(self) -> float:
        data = self.combo_speed.currentData()
        return float(data) if data is not None else 1.0

    def _on_speed_changed(self, _idx: int) -> None:
        if self.session is None or self.combo_speed.currentData() is None:
            return
        try:
            self.session.clock.set_speed(self._selected_speed())
        except ValueError as e:
            QMessageBox.warning(self, "Playback speed", str(e))
        self._refresh_playback()

    # ---------------- Actions / segments ----------------

    def _on_action_clicked(self, action_id: int) -> None:
        if self.session is None:
            return
        self._toast(self.session.select_action(action_id))
        self._refresh_all()

    def _edit_segment(self, segment_id: int) -> None:
        if self.session is None:
            return
        outcome = self.session.edit_segment(segment_id)
        if outcome is not None:
            self._toast(outcome)
        self._refresh_all()

    def _delete_segment(self, segment_id: int) -> None:
        if self.session is None:
            return
        resp = QMessageBox.question(
            self,
            "Delete segment",
            "Delete this segment?",
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        if resp != QMessageBox.Yes:
            return
        outcome = self.session.delete_segment(segment_id)
        if outcome is None:
            return
        self._toast(outcome)
        self._autosave()
        self._refresh_all()

    # ---------------- Dialogs ----------------

    def _toggle_help(self):
        if self.catalog is None:
            return
        if self._help is None:
            self._help = KeyboardHelpDialog(self.catalog, self)
        if self._help.isVisible():
            self._help.hide()
        else:
            self._help.show()
            self._help.raise_()

    def _open_export_preview(self):
        if self.session is None or not self.data_root:
            QMessageBox.warning(self, "Nothing to export", "Select a data root and a video first.")
            return
        self.session.clock.pause()
        doc = self.session.export_document()
        dlg = ExportPreviewDialog(doc, default_export_path(self.data_root, self.session.video), self)
        if dlg.exec_() and dlg.saved_path():
            self._toast(Outcome(True, "Export saved", dlg.saved_path()))
        self._refresh_playback()

    # ---------------- Persistence ----------------

    def _save_current_video(self) -> None:
        if self.session is None or not self.data_root:
            return
        try:
            save_video_labels(self.data_root, self.session.video, self.session.export_document())
        except OSError as e:
            QMessageBox.warning(self, "Save failed", str(e))

    def _save_queue(self) -> None:
        if not self.data_root:
            return
        try:
            save_queue(self.data_root, self.queue)
        except OSError as e:
            QMessageBox.warning(self, "Queue save failed", str(e))

    def _autosave(self) -> None:
        self._save_current_video()
        self._save_queue()

    # ---------------- Refresh ----------------

    def _toast(self, outcome: Outcome) -> None:
        text = outcome.title if not outcome.detail else f"{outcome.title}: {outcome.detail}"
        if not outcome.ok:
            text = f"⚠ {text}"
        self.statusBar().showMessage(text, TOAST_MS)

    def _refresh_all(self) -> None:
        self._refresh_queue()
        self._refresh_header()
        self._refresh_segments()
        s = self.session
        if s is None:
            self.video_view.set_video("", 0.0, 0)
            self.action_panel.set_selected(None)
        else:
            self.video_view.set_video(s.video.filename, s.video.duration, s.video.total_frames)
            self.action_panel.set_selected(s.marks.state.selected_action_id)
        self._refresh_playback()
        self._update_enabled_state()

    def _refresh_queue(self) -> None:
        self.queue_panel.set_queue(self.queue)

    def _refresh_header(self) -> None:
        self.annotator_label.setText(f"Labeled by: {self.cfg.annotator}" if self.cfg else "")
        if self.session is None:
            self.quality_label.setText("")
            self.quality_label.setToolTip("")
            return
        report = quality_report(self.session.video)
        verdict = "PASS" if report.passed else "CHECK"
        self.quality_label.setText(f"Quality: {verdict} ({report.codec})")
        self.quality_label.setStyleSheet(f"color: {'#22C55E' if report.passed else '#EAB308'};")
        self.quality_label.setToolTip("\n".join(
            f"{'✓' if c.passed else '✗'} {c.name}: {c.value} (min {c.required})" for c in report.checks
        ))

    def _refresh_segments(self) -> None:
        if self.session is None or self.catalog is None:
            self.segment_list.clear_segments()
            return
        self.segment_list.set_segments(self.session.store, self.catalog)

    def _refresh_playback(self) -> None:
        s = self.session
        if s is None:
            self.time_label.setText("0:00.00 / 0:00.00")
            self.frame_label.setText("Frame 0 / 0")
            self.btn_play.setText("Play")
            return
        frame = s.current_frame()
        self.time_label.setText(f"{format_time_precise(s.current_time)} / {format_time_precise(s.video.duration)}")
        self.frame_label.setText(f"Frame {frame} / {s.video.total_frames}")
        self.btn_play.setText("Pause" if s.clock.playing else "Play")
        self.video_view.set_playback(s.current_time, frame, s.clock.playing, s.clock.speed)
        self.video_view.set_marks(s.marks.mark_in, s.marks.mark_out)
        self.timeline.set_state(s.view(), s.store.segments(), s.catalog, s.marks.mark_in, s.marks.mark_out)

    def _update_enabled_state(self):
        has_root = bool(self.data_root)
        has_video = self.session is not None

        self.btn_annotator.setEnabled(has_root)
        self.btn_export.setEnabled(has_video)
        self.queue_panel.setEnabled(has_root)
        for w in (
            self.btn_back_1s,
            self.btn_prev_frame,
            self.btn_play,
            self.btn_next_frame,
            self.btn_fwd_1s,
            self.combo_speed,
            self.timeline,
            self.action_panel,
            self.segment_list,
        ):
            w.setEnabled(has_video)

    def closeEvent(self, event):
        self._timer.stop()
        if self.session is not None:
            self.session.clock.pause()
        self._autosave()
        super().closeEvent(event)
