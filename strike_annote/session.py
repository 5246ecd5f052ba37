# strike_annote/session.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Optional

from .domain import ActionCatalog, AppConfig, Segment, VideoItem, VideoStatus
from .export import build_export_document
from .keymap import Command, CommandKind
from .marking import IncompleteSelection, MarkController, MarkError, SegmentTooShort
from .playback import PlaybackClock
from .segment_store import SegmentStore
from .timeutils import TimelineView, clamp_zoom


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    """User-facing result of one input event (rendered as a transient toast)."""
    ok: bool
    title: str
    detail: str = ""


class LabelingSession:
    """
    Everything that changes while one video is being labeled.

    Each public method handles exactly one discrete input event and returns an
    Outcome for presentation, or None when there is nothing to tell the user.
    Switching videos means building a new session.
    """

    def __init__(
        self,
        config: AppConfig,
        catalog: ActionCatalog,
        video: VideoItem,
        segments: Iterable[Segment] = (),
    ):
        self.config = config
        self.catalog = catalog
        self.video = video
        self.store = SegmentStore(catalog, segments)
        self.marks = MarkController(catalog, self.store, config.min_segment_frames)
        self.clock = PlaybackClock(video.duration, config.playback_base_step, config.playback_speeds)
        self.zoom = 1.0

    # ---------------- Derived state ----------------

    @property
    def fps(self) -> float:
        return self.video.fps if self.video.fps and self.video.fps > 0 else 30.0

    @property
    def current_time(self) -> float:
        return self.clock.current_time

    def current_frame(self) -> int:
        return self.clock.current_frame(self.fps)

    def view(self) -> TimelineView:
        return TimelineView(
            total_duration=self.video.duration,
            zoom=self.zoom,
            current_time=self.clock.current_time,
        )

    # ---------------- Dispatch ----------------

    def handle(self, command: Command) -> Optional[Outcome]:
        kind = command.kind
        if kind == CommandKind.TOGGLE_PLAY:
            self.clock.toggle()
            return None
        if kind == CommandKind.STEP_FRAME:
            self.step_frames(int(command.arg or 0))
            return None
        if kind == CommandKind.JUMP:
            self.jump(float(command.arg or 0.0))
            return None
        if kind == CommandKind.MARK_IN:
            return self.mark_in()
        if kind == CommandKind.MARK_OUT:
            return self.mark_out()
        if kind == CommandKind.COMMIT:
            return self.commit()
        if kind == CommandKind.CLEAR_MARKS:
            return self.clear_marks()
        if kind == CommandKind.CANCEL_SELECTION:
            return self.cancel_selection()
        if kind == CommandKind.SELECT_ACTION:
            return self.select_action(int(command.arg))
        raise ValueError(f"{kind.value} is not handled by a labeling session")

    # ---------------- Playback ----------------

    def tick(self) -> float:
        return self.clock.tick()

    def step_frames(self, n: int) -> float:
        self.clock.pause()
        return self.clock.step_frames(n, self.fps)

    def jump(self, seconds: float) -> float:
        return self.clock.jump(seconds)

    def seek(self, t: float) -> float:
        """Scrub: pauses playback so the manual time is not overwritten by the next tick."""
        self.clock.pause()
        return self.clock.seek(t)

    def seek_fraction(self, fraction: float) -> float:
        """Click on the timeline track at `fraction` of its width."""
        view = self.view()
        if not view.is_usable():
            return self.clock.current_time
        return self.seek(view.seek_time(fraction))

    def set_zoom(self, zoom: float) -> float:
        self.zoom = clamp_zoom(zoom)
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom + self.config.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom - self.config.zoom_step)

    # ---------------- Marking ----------------

    def mark_in(self) -> Outcome:
        self.clock.pause()
        t = self.marks.set_mark_in(self.clock.current_time)
        return Outcome(True, "Mark In set", f"At {t:.2f}s")

    def mark_out(self) -> Outcome:
        self.clock.pause()
        try:
            t = self.marks.set_mark_out(self.clock.current_time)
        except MarkError:
            return Outcome(False, "Invalid mark out", "Mark out must be after mark in")
        return Outcome(True, "Mark Out set", f"At {t:.2f}s")

    def select_action(self, action_id: int) -> Outcome:
        try:
            action = self.marks.select_action(action_id)
        except MarkError as e:
            return Outcome(False, e.title, str(e))
        return Outcome(True, "Action selected", action.name)

    def commit(self) -> Outcome:
        try:
            segment = self.marks.commit(self.fps)
        except IncompleteSelection as e:
            return Outcome(False, e.title, f"Mark in, out, and select an action first ({e})")
        except SegmentTooShort as e:
            logger.info("Commit rejected: %s", e)
            return Outcome(False, e.title, f"Minimum {e.min_frames} frames required")
        self.sync_video_counts()
        action = self.catalog.lookup(segment.action_id)
        return Outcome(True, "Segment saved", action.name if action else "")

    def clear_marks(self) -> Outcome:
        self.marks.clear_marks()
        return Outcome(True, "Selection cleared")

    def cancel_selection(self) -> Outcome:
        self.marks.cancel_selection()
        return Outcome(True, "Selection cancelled")

    # ---------------- Segment list actions ----------------

    def edit_segment(self, segment_id: int) -> Optional[Outcome]:
        segment = self.store.get(segment_id)
        if segment is None:
            return None
        self.seek(self.marks.load_for_edit(segment))
        action = self.catalog.lookup(segment.action_id)
        name = action.name if action else f"segment {segment.id}"
        return Outcome(True, "Editing segment", f"{name}: adjust marks, then Enter replaces it")

    def delete_segment(self, segment_id: int) -> Optional[Outcome]:
        removed = self.store.remove(segment_id)
        if removed is None:
            return None
        logger.info("Deleted segment %s", removed.id)
        self.sync_video_counts()
        return Outcome(True, "Segment deleted")

    def sync_video_counts(self) -> None:
        self.video.segments_labeled = self.store.count()
        if self.video.status == VideoStatus.NOT_STARTED and not self.store.is_empty():
            self.video.status = VideoStatus.IN_PROGRESS

    # ---------------- Export ----------------

    def export_document(self, export_date: Optional[date] = None) -> Dict:
        return build_export_document(
            self.video.filename,
            self.store,
            self.catalog,
            labeled_by=self.config.annotator,
            export_date=export_date,
        )
