# strike_annote/timeutils.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

from .domain import Segment


MIN_ZOOM = 1.0
MAX_ZOOM = 10.0
TICK_DIVISIONS = 10


# -----------------------------
# Time formatting / conversion
# -----------------------------

def format_time_short(seconds: float) -> str:
    """m:ss, used for tick labels and mark readouts."""
    if seconds is None:
        seconds = 0.0
    s = max(0.0, float(seconds))
    mins = int(s // 60)
    secs = int(s % 60)
    return f"{mins}:{secs:02d}"


def format_time_precise(seconds: float) -> str:
    """m:ss.cc (hundredths truncated), used in the segment list."""
    if seconds is None:
        seconds = 0.0
    s = max(0.0, float(seconds))
    mins = int(s // 60)
    secs = int(s % 60)
    hundredths = int((s % 1) * 100)
    return f"{mins}:{secs:02d}.{hundredths:02d}"


def format_time_range(start: float, end: float) -> str:
    return f"{format_time_precise(start)} → {format_time_precise(end)}"


def seconds_to_frames(seconds: float, fps: float) -> int:
    if fps is None or fps <= 0:
        fps = 30.0
    if seconds is None:
        seconds = 0.0
    # Halves round up (1.5 -> 2, 2.5 -> 3), not to even.
    return int(math.floor(float(seconds) * float(fps) + 0.5))


def frames_to_seconds(frames: int, fps: float) -> float:
    if fps is None or fps <= 0:
        fps = 30.0
    if frames is None:
        frames = 0
    return float(frames) / float(fps)


# -----------------------------
# Zoomed view window
# -----------------------------

def clamp_zoom(z: float) -> float:
    """Clamp to [1, 10]. Step granularity is the caller's business."""
    return max(MIN_ZOOM, min(float(z), MAX_ZOOM))


@dataclass(frozen=True)
class TimelineView:
    """
    The visible window of the timeline.

    The window is always centered on current_time, except near the start where
    it would scroll before 0.
    """
    total_duration: float
    zoom: float = 1.0
    current_time: float = 0.0

    @property
    def visible_duration(self) -> float:
        return float(self.total_duration) / clamp_zoom(self.zoom)

    @property
    def scroll_offset(self) -> float:
        return max(0.0, float(self.current_time) - self.visible_duration / 2.0)

    def is_usable(self) -> bool:
        return self.total_duration > 0

    def to_percent(self, time: float) -> float:
        return time_to_percent(time, self.scroll_offset, self.visible_duration)

    def seek_time(self, fraction: float) -> float:
        """Pointer position (fraction of track width) -> clamped seek time."""
        t = percent_to_time(float(fraction) * 100.0, self.scroll_offset, self.visible_duration)
        return max(0.0, min(t, float(self.total_duration)))

    def tick_marks(self) -> List[float]:
        return compute_tick_marks(self.total_duration, self.visible_duration, self.scroll_offset)


# -----------------------------
# time <-> percent mapping
# -----------------------------

def time_to_percent(time: float, scroll_offset: float, visible_duration: float) -> float:
    return ((float(time) - float(scroll_offset)) / float(visible_duration)) * 100.0


def percent_to_time(percent: float, scroll_offset: float, visible_duration: float) -> float:
    return float(scroll_offset) + (float(percent) / 100.0) * float(visible_duration)


def compute_tick_marks(total_duration: float, visible_duration: float, scroll_offset: float) -> List[float]:
    """
    Evenly spaced tick times covering the visible window plus one interval of slack.

    interval = max(1, floor(visible / 10)); ticks start at the interval multiple at
    or before scroll_offset and stop at min(total, scroll + visible + interval).
    """
    interval = max(1, int(math.floor(float(visible_duration) / TICK_DIVISIONS)))
    first = math.floor(float(scroll_offset) / interval) * interval
    limit = min(float(total_duration), float(scroll_offset) + float(visible_duration) + interval)

    ticks: List[float] = []
    i = 0
    while True:
        t = float(first + i * interval)
        if t > limit:
            break
        ticks.append(t)
        i += 1
    return ticks


# -----------------------------
# Span layout for rendering
# -----------------------------

@dataclass(frozen=True)
class Span:
    """Horizontal placement on the 0..100 visible scale."""
    start_percent: float
    width_percent: float
    clipped_left: bool = False
    clipped_right: bool = False

    @property
    def end_percent(self) -> float:
        return self.start_percent + self.width_percent


def span_between(start_time: float, end_time: float, view: TimelineView) -> Optional[Span]:
    """
    Place [start_time, end_time] in the view, truncated to [0, 100].
    Returns None when the interval lies entirely outside the window.
    """
    start_pos = view.to_percent(start_time)
    end_pos = view.to_percent(end_time)
    if end_pos < start_pos:
        start_pos, end_pos = end_pos, start_pos

    if end_pos < 0 or start_pos > 100:
        return None

    left = max(0.0, start_pos)
    right = min(100.0, end_pos)
    return Span(
        start_percent=left,
        width_percent=max(0.0, right - left),
        clipped_left=start_pos < 0,
        clipped_right=end_pos > 100,
    )


def segment_span(segment: Segment, view: TimelineView) -> Optional[Span]:
    return span_between(segment.start_time, segment.end_time, view)
