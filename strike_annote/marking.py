# strike_annote/marking.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from .domain import DEFAULT_MIN_SEGMENT_FRAMES, Action, ActionCatalog, Segment
from .segment_store import SegmentStore
from .timeutils import seconds_to_frames


logger = logging.getLogger(__name__)


# -----------------------------
# Rejections
# -----------------------------

class MarkError(ValueError):
    """A rejected mark/commit request. Always recoverable; the caller decides presentation."""
    title = "Rejected"


class InvalidMarkOut(MarkError):
    title = "Invalid mark out"

    def __init__(self, message: str = "mark out must be after mark in"):
        super().__init__(message)


class IncompleteSelection(MarkError):
    title = "Cannot save"

    def __init__(self, missing: Tuple[str, ...]):
        self.missing = tuple(missing)
        super().__init__("missing " + ", ".join(self.missing))


class SegmentTooShort(MarkError):
    title = "Segment too short"

    def __init__(self, frames: int, min_frames: int):
        self.frames = int(frames)
        self.min_frames = int(min_frames)
        super().__init__(f"minimum {self.min_frames} frames required (got {self.frames})")


class UnknownAction(MarkError):
    title = "Unknown action"

    def __init__(self, action_id: object):
        self.action_id = action_id
        super().__init__(f"no action with id {action_id!r}")


# -----------------------------
# Mark positions (tagged variants)
# -----------------------------

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class InMarked:
    mark_in: float


@dataclass(frozen=True)
class Ready:
    mark_in: float
    mark_out: float


MarkPosition = Union[Idle, InMarked, Ready]

IDLE = Idle()


@dataclass(frozen=True)
class MarkState:
    """
    Transient selection for one editing session.

    position carries the in/out marks; selected_action_id is independent of it.
    editing_segment_id is set by load_for_edit and names the segment the next
    commit replaces.
    """
    position: MarkPosition = IDLE
    selected_action_id: Optional[int] = None
    editing_segment_id: Optional[int] = None

    @property
    def mark_in(self) -> Optional[float]:
        if isinstance(self.position, (InMarked, Ready)):
            return self.position.mark_in
        return None

    @property
    def mark_out(self) -> Optional[float]:
        if isinstance(self.position, Ready):
            return self.position.mark_out
        return None

    def missing(self) -> Tuple[str, ...]:
        out = []
        if self.mark_in is None:
            out.append("mark in")
        if self.mark_out is None:
            out.append("mark out")
        if self.selected_action_id is None:
            out.append("action")
        return tuple(out)


# -----------------------------
# Controller
# -----------------------------

class MarkController:
    """
    Mark-in / mark-out / commit state machine.

    Idle --set_mark_in--> InMarked --set_mark_out--> Ready --commit--> Idle
    Every transition either completes or raises a MarkError leaving the state
    untouched.
    """

    def __init__(
        self,
        catalog: ActionCatalog,
        store: SegmentStore,
        min_segment_frames: int = DEFAULT_MIN_SEGMENT_FRAMES,
    ):
        self._catalog = catalog
        self._store = store
        self._min_frames = max(1, int(min_segment_frames))
        self._state = MarkState()

    # ---------------- Read access ----------------

    @property
    def state(self) -> MarkState:
        return self._state

    @property
    def store(self) -> SegmentStore:
        return self._store

    @property
    def min_segment_frames(self) -> int:
        return self._min_frames

    @property
    def mark_in(self) -> Optional[float]:
        return self._state.mark_in

    @property
    def mark_out(self) -> Optional[float]:
        return self._state.mark_out

    @property
    def selected_action(self) -> Optional[Action]:
        return self._catalog.lookup(self._state.selected_action_id)

    # ---------------- Transitions ----------------

    def set_mark_in(self, current_time: float) -> float:
        t = max(0.0, float(current_time))
        pos = self._state.position
        # An existing out-point survives only while it still lies after the new in-point.
        if isinstance(pos, Ready) and pos.mark_out > t:
            new_pos: MarkPosition = Ready(mark_in=t, mark_out=pos.mark_out)
        else:
            new_pos = InMarked(mark_in=t)
        self._state = replace(self._state, position=new_pos)
        return t

    def set_mark_out(self, current_time: float) -> float:
        t = float(current_time)
        mark_in = self._state.mark_in
        if mark_in is None or t <= mark_in:
            logger.info("Mark out rejected at %.3fs (mark in: %s)", t, mark_in)
            raise InvalidMarkOut()
        self._state = replace(self._state, position=Ready(mark_in=mark_in, mark_out=t))
        return t

    def select_action(self, action_id: int) -> Action:
        action = self._catalog.lookup(action_id)
        if action is None:
            raise UnknownAction(action_id)
        self._state = replace(self._state, selected_action_id=action.id)
        return action

    def commit(self, fps: float) -> Segment:
        """
        Validate the pending selection and turn it into a stored Segment.

        The selected action is kept so consecutive strikes of the same kind can
        be marked without reselecting.
        """
        st = self._state
        missing = st.missing()
        if missing:
            raise IncompleteSelection(missing)
        if fps is None or fps <= 0:
            fps = 30.0

        mark_in = st.mark_in
        mark_out = st.mark_out

        start_frame = seconds_to_frames(mark_in, fps)
        end_frame = seconds_to_frames(mark_out, fps)
        duration_frames = seconds_to_frames(mark_out - mark_in, fps)
        if duration_frames < self._min_frames:
            raise SegmentTooShort(duration_frames, self._min_frames)

        if st.editing_segment_id is not None:
            replaced = self._store.remove(st.editing_segment_id)
            if replaced is not None:
                logger.info("Replacing segment %s", replaced.id)

        segment = Segment(
            id=self._store.allocate_id(),
            action_id=int(st.selected_action_id),
            start_time=mark_in,
            end_time=mark_out,
            start_frame=start_frame,
            end_frame=end_frame,
        )
        self._store.add(segment)
        self._state = MarkState(selected_action_id=st.selected_action_id)
        logger.info(
            "Committed segment %s: action=%s %.3f-%.3fs frames %s-%s",
            segment.id, segment.action_id, segment.start_time, segment.end_time,
            segment.start_frame, segment.end_frame,
        )
        return segment

    def clear_marks(self) -> None:
        self._state = MarkState(selected_action_id=self._state.selected_action_id)

    def cancel_selection(self) -> None:
        self._state = MarkState()

    def load_for_edit(self, segment: Segment) -> float:
        """
        Load a segment back into the marks. Returns the time playback should seek to.
        The segment stays in the store until the replacing commit succeeds.
        """
        self._state = MarkState(
            position=Ready(mark_in=segment.start_time, mark_out=segment.end_time),
            selected_action_id=segment.action_id,
            editing_segment_id=segment.id,
        )
        return segment.start_time
