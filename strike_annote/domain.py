# strike_annote/domain.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


# -----------------------------
# Actions / Categories
# -----------------------------

class ActionCategory(str, Enum):
    STRAIGHT = "straight"
    HOOK = "hook"
    UPPERCUT = "uppercut"
    OTHER = "other"


# Filter value meaning "no category filter" in segment listings.
ALL_CATEGORIES = "all"

CATEGORY_COLORS: Dict[ActionCategory, str] = {
    ActionCategory.STRAIGHT: "#3B82F6",
    ActionCategory.HOOK: "#22C55E",
    ActionCategory.UPPERCUT: "#F97316",
    ActionCategory.OTHER: "#6B7280",
}

CATEGORY_LABELS: Dict[ActionCategory, str] = {
    ActionCategory.STRAIGHT: "STRAIGHTS",
    ActionCategory.HOOK: "HOOKS",
    ActionCategory.UPPERCUT: "UPPERCUTS",
    ActionCategory.OTHER: "OTHER",
}


def category_color_hex(category: ActionCategory) -> str:
    return CATEGORY_COLORS.get(category, CATEGORY_COLORS[ActionCategory.OTHER])


@dataclass(frozen=True)
class Action:
    id: int
    name: str
    short_name: str
    hotkey: str
    category: ActionCategory

    def to_dict(self) -> Dict:
        return {
            "id": int(self.id),
            "name": self.name,
            "short_name": self.short_name,
            "hotkey": self.hotkey,
            "category": self.category.value,
        }

    @staticmethod
    def from_dict(d: Dict) -> "Action":
        return Action(
            id=int(d["id"]),
            name=str(d["name"]),
            short_name=str(d.get("short_name") or d.get("shortName") or d["name"]),
            hotkey=str(d["hotkey"]),
            category=ActionCategory(str(d.get("category", "other")).lower()),
        )


BOXING_ACTIONS: Tuple[Action, ...] = (
    Action(0, "Jab to Head", "JAB-H", "1", ActionCategory.STRAIGHT),
    Action(1, "Jab to Body", "JAB-B", "2", ActionCategory.STRAIGHT),
    Action(2, "Cross to Head", "CROSS-H", "3", ActionCategory.STRAIGHT),
    Action(3, "Cross to Body", "CROSS-B", "4", ActionCategory.STRAIGHT),
    Action(4, "Lead Hook to Head", "L-HOOK-H", "5", ActionCategory.HOOK),
    Action(5, "Lead Hook to Body", "L-HOOK-B", "6", ActionCategory.HOOK),
    Action(6, "Rear Hook to Head", "R-HOOK-H", "7", ActionCategory.HOOK),
    Action(7, "Rear Hook to Body", "R-HOOK-B", "8", ActionCategory.HOOK),
    Action(8, "Lead Uppercut", "L-UPPER", "9", ActionCategory.UPPERCUT),
    Action(9, "Rear Uppercut", "R-UPPER", "0", ActionCategory.UPPERCUT),
    Action(10, "Overhand", "OVER", "O", ActionCategory.OTHER),
    Action(11, "Defensive Movement", "DEF", "D", ActionCategory.OTHER),
    Action(12, "Idle / Stance", "IDLE", "I", ActionCategory.OTHER),
)


class ActionCatalog:
    """
    Read-only lookup table of labelable actions.

    Constructed once (from the built-in boxing set or from config.json) and
    handed to every component that needs it. Hotkeys must be unique
    (case-insensitive) and a single character.
    """

    def __init__(self, actions: Iterable[Action] = BOXING_ACTIONS):
        ordered = list(actions)
        by_id: Dict[int, Action] = {}
        by_key: Dict[str, Action] = {}
        for a in ordered:
            if a.id < 0:
                raise ValueError(f"Action id must be >= 0: {a.id}")
            if a.id in by_id:
                raise ValueError(f"Duplicate action id: {a.id}")
            key = a.hotkey.lower()
            if len(key) != 1:
                raise ValueError(f"Hotkey must be a single character: {a.hotkey!r}")
            if key in by_key:
                raise ValueError(f"Duplicate hotkey {a.hotkey!r} ({by_key[key].name} / {a.name})")
            by_id[a.id] = a
            by_key[key] = a
        self._actions: Tuple[Action, ...] = tuple(ordered)
        self._by_id = by_id
        self._by_key = by_key

    def __len__(self) -> int:
        return len(self._actions)

    def __contains__(self, action_id: object) -> bool:
        return action_id in self._by_id

    def all(self) -> Tuple[Action, ...]:
        return self._actions

    def lookup(self, action_id: Optional[int]) -> Optional[Action]:
        if action_id is None:
            return None
        return self._by_id.get(int(action_id))

    def find_by_hotkey(self, key: str) -> Optional[Action]:
        if not key or len(key) != 1:
            return None
        return self._by_key.get(key.lower())

    def hotkeys(self) -> List[str]:
        return [a.hotkey.lower() for a in self._actions]

    def by_category(self, category: ActionCategory) -> List[Action]:
        return [a for a in self._actions if a.category == category]


# -----------------------------
# Segments
# -----------------------------

@dataclass(frozen=True)
class Segment:
    """
    A committed labeled interval.
    Times are in seconds; frames were derived from the video fps at commit time
    and are never re-derived afterwards.
    """
    id: int
    action_id: int
    start_time: float
    end_time: float
    start_frame: int
    end_frame: int

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def total_frames(self) -> int:
        return self.end_frame - self.start_frame


# -----------------------------
# Videos / Queue
# -----------------------------

class VideoStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


@dataclass
class VideoItem:
    """
    A single video in the labeling queue.

    video_id is the stable logical id ("1", "2", ...); filename is what ends up in
    the export's video_file field. path is the absolute source path (may be empty
    for placeholder entries).
    """
    video_id: str
    filename: str
    path: str = ""
    duration: float = 0.0      # seconds; best-effort
    fps: float = 30.0          # best-effort; defaults to 30
    width: int = 0
    height: int = 0
    bitrate: int = 0           # kbps
    codec: str = ""
    status: VideoStatus = VideoStatus.NOT_STARTED
    segments_labeled: int = 0
    estimated_segments: int = 0

    @property
    def resolution(self) -> str:
        return f"{int(self.width)}x{int(self.height)}"

    @property
    def total_frames(self) -> int:
        return int(round(self.duration * self.fps))

    def to_dict(self) -> Dict:
        return {
            "video_id": self.video_id,
            "filename": self.filename,
            "path": self.path,
            "duration": float(self.duration),
            "fps": float(self.fps),
            "width": int(self.width),
            "height": int(self.height),
            "bitrate": int(self.bitrate),
            "codec": self.codec,
            "status": self.status.value,
            "segments_labeled": int(self.segments_labeled),
            "estimated_segments": int(self.estimated_segments),
        }

    @staticmethod
    def from_dict(d: Dict) -> "VideoItem":
        try:
            status = VideoStatus(str(d.get("status", "not_started")))
        except ValueError:
            status = VideoStatus.NOT_STARTED
        return VideoItem(
            video_id=str(d["video_id"]),
            filename=str(d["filename"]),
            path=str(d.get("path", "")),
            duration=float(d.get("duration", 0.0)),
            fps=float(d.get("fps", 30.0)) or 30.0,
            width=int(d.get("width", 0)),
            height=int(d.get("height", 0)),
            bitrate=int(d.get("bitrate", 0)),
            codec=str(d.get("codec", "")),
            status=status,
            segments_labeled=int(d.get("segments_labeled", 0)),
            estimated_segments=int(d.get("estimated_segments", 0)),
        )


@dataclass
class VideoQueue:
    """Ordered videos plus the index of the one being labeled."""
    videos: List[VideoItem] = field(default_factory=list)
    current_index: int = 0

    def is_empty(self) -> bool:
        return not self.videos

    def current(self) -> Optional[VideoItem]:
        if not self.videos:
            return None
        self.current_index = max(0, min(self.current_index, len(self.videos) - 1))
        return self.videos[self.current_index]

    def get(self, video_id: str) -> Optional[VideoItem]:
        for v in self.videos:
            if v.video_id == video_id:
                return v
        return None

    def index_of(self, video_id: str) -> int:
        for i, v in enumerate(self.videos):
            if v.video_id == video_id:
                return i
        return -1

    def select(self, video_id: str) -> Optional[VideoItem]:
        idx = self.index_of(video_id)
        if idx < 0:
            return None
        self.current_index = idx
        return self.videos[idx]

    def next(self) -> Optional[VideoItem]:
        """Advance to the next video; None (and no change) at the end of the queue."""
        if self.current_index >= len(self.videos) - 1:
            return None
        self.current_index += 1
        return self.videos[self.current_index]

    def previous(self) -> Optional[VideoItem]:
        if self.current_index <= 0 or not self.videos:
            return None
        self.current_index -= 1
        return self.videos[self.current_index]

    def add(self, video: VideoItem) -> None:
        if self.get(video.video_id) is not None:
            raise ValueError(f"Video id already queued: {video.video_id}")
        self.videos.append(video)

    def next_video_id(self) -> str:
        used = set()
        for v in self.videos:
            try:
                used.add(int(v.video_id))
            except ValueError:
                continue
        return str(max(used) + 1 if used else 1)

    def completed_count(self) -> int:
        return sum(1 for v in self.videos if v.status == VideoStatus.COMPLETE)

    def progress_percent(self) -> float:
        if not self.videos:
            return 0.0
        return (self.completed_count() / len(self.videos)) * 100.0


# -----------------------------
# Config payload
# -----------------------------

DEFAULT_ANNOTATOR = "annotator_username"
DEFAULT_MIN_SEGMENT_FRAMES = 5
DEFAULT_PLAYBACK_BASE_STEP = 0.033
DEFAULT_ZOOM_STEP = 0.5
DEFAULT_PLAYBACK_SPEEDS: Tuple[float, ...] = (0.25, 0.5, 1.0, 2.0)


@dataclass
class AppConfig:
    """
    Stored in <data_root>/config.json
    """
    data_root: str
    annotator: str = DEFAULT_ANNOTATOR
    min_segment_frames: int = DEFAULT_MIN_SEGMENT_FRAMES
    playback_base_step: float = DEFAULT_PLAYBACK_BASE_STEP
    zoom_step: float = DEFAULT_ZOOM_STEP
    playback_speeds: List[float] = field(default_factory=lambda: list(DEFAULT_PLAYBACK_SPEEDS))
    # Optional override of the built-in boxing catalog.
    actions: List[Action] = field(default_factory=list)

    def catalog(self) -> ActionCatalog:
        return ActionCatalog(self.actions or BOXING_ACTIONS)

    def to_dict(self) -> Dict:
        d: Dict = {
            "data_root": self.data_root,
            "annotator": self.annotator,
            "min_segment_frames": int(self.min_segment_frames),
            "playback_base_step": float(self.playback_base_step),
            "zoom_step": float(self.zoom_step),
            "playback_speeds": [float(s) for s in self.playback_speeds],
            "config_version": 1,
        }
        if self.actions:
            d["actions"] = [a.to_dict() for a in self.actions]
        return d

    @staticmethod
    def from_dict(d: Dict) -> "AppConfig":
        speeds = [float(s) for s in (d.get("playback_speeds") or []) if float(s) > 0]
        return AppConfig(
            data_root=str(d.get("data_root") or ""),
            annotator=str(d.get("annotator") or DEFAULT_ANNOTATOR),
            min_segment_frames=max(1, int(d.get("min_segment_frames", DEFAULT_MIN_SEGMENT_FRAMES))),
            playback_base_step=float(d.get("playback_base_step", DEFAULT_PLAYBACK_BASE_STEP)),
            zoom_step=float(d.get("zoom_step", DEFAULT_ZOOM_STEP)),
            playback_speeds=speeds or list(DEFAULT_PLAYBACK_SPEEDS),
            actions=[Action.from_dict(x) for x in (d.get("actions") or [])],
        )


# -----------------------------
# Keyboard help table
# -----------------------------

KEYBOARD_SHORTCUTS: Dict[str, List[Tuple[str, str]]] = {
    "Playback": [
        ("Space", "Play / Pause"),
        ("←", "Previous frame"),
        ("→", "Next frame"),
        ("Shift+←", "Back 1 second"),
        ("Shift+→", "Forward 1 second"),
    ],
    "Segment": [
        ("[", "Mark segment start (In point)"),
        ("]", "Mark segment end (Out point)"),
        ("Enter", "Confirm segment with selected action"),
        ("Backspace", "Clear mark in / mark out"),
        ("Escape", "Cancel current selection"),
    ],
    "Navigation": [
        ("N", "Next video in queue"),
        ("P", "Previous video in queue"),
        ("?", "Show/hide this help"),
    ],
}
