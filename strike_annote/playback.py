# strike_annote/playback.py
from __future__ import annotations

from typing import Sequence

from .domain import DEFAULT_PLAYBACK_BASE_STEP, DEFAULT_PLAYBACK_SPEEDS
from .timeutils import frames_to_seconds, seconds_to_frames


class PlaybackClock:
    """
    Current playback time for one video.

    This holds no timer. The window owns a QTimer and calls tick(); every other
    method is a user-driven time set that pauses or overrides whatever the ticks
    were doing (last writer wins).
    """

    def __init__(
        self,
        duration: float,
        base_step: float = DEFAULT_PLAYBACK_BASE_STEP,
        speeds: Sequence[float] = DEFAULT_PLAYBACK_SPEEDS,
    ):
        self.duration = max(0.0, float(duration))
        self.base_step = float(base_step) if base_step and base_step > 0 else DEFAULT_PLAYBACK_BASE_STEP
        self.speeds = tuple(float(s) for s in speeds) or DEFAULT_PLAYBACK_SPEEDS
        self.current_time = 0.0
        self.playing = False
        self.speed = 1.0 if 1.0 in self.speeds else self.speeds[0]

    # ---------------- Play state ----------------

    def at_end(self) -> bool:
        return self.duration > 0 and self.current_time >= self.duration

    def play(self) -> bool:
        """Start playing. Refuses at end-of-video (no implicit restart)."""
        if self.duration <= 0 or self.at_end():
            self.playing = False
            return False
        self.playing = True
        return True

    def pause(self) -> None:
        self.playing = False

    def toggle(self) -> bool:
        if self.playing:
            self.pause()
        else:
            self.play()
        return self.playing

    def set_speed(self, speed: float) -> float:
        s = float(speed)
        if s not in self.speeds:
            raise ValueError(f"Unsupported playback speed {s}; allowed: {list(self.speeds)}")
        self.speed = s
        return s

    # ---------------- Time advance ----------------

    def tick(self) -> float:
        """One timer tick. Stops playback once the end is reached."""
        if not self.playing:
            return self.current_time
        nxt = self.current_time + self.base_step * self.speed
        if nxt >= self.duration:
            self.current_time = self.duration
            self.playing = False
        else:
            self.current_time = nxt
        return self.current_time

    def seek(self, t: float) -> float:
        self.current_time = max(0.0, min(float(t), self.duration))
        return self.current_time

    def step_frames(self, n: int, fps: float) -> float:
        return self.seek(self.current_time + frames_to_seconds(int(n), fps))

    def jump(self, seconds: float) -> float:
        return self.seek(self.current_time + float(seconds))

    def current_frame(self, fps: float) -> int:
        return seconds_to_frames(self.current_time, fps)
