# strike_annote/persistence.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Dict, List, Optional

from .domain import AppConfig, Segment, VideoItem, VideoQueue
from .export import segments_from_export


logger = logging.getLogger(__name__)

# Filenames (within the data root)
CONFIG_FILENAME = "config.json"
QUEUE_FILENAME = "queue.json"
LABELS_DIRNAME = "labels"
EXPORTS_DIRNAME = "exports"


# -----------------------------
# Atomic file helpers
# -----------------------------

def _atomic_write_text(path: str, text: str, encoding: str = "utf-8") -> None:
    d = os.path.dirname(path) or "."
    os.makedirs(d, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", dir=d)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def _atomic_write_json(path: str, payload: Dict) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    _atomic_write_text(path, text + "\n")


def _read_json(path: str) -> Dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _try_read_json(path: str) -> Optional[Dict]:
    """Missing -> None; unreadable/invalid -> None with a warning."""
    if not os.path.exists(path):
        return None
    try:
        data = _read_json(path)
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return None
    return data


# -----------------------------
# App config (<root>/config.json)
# -----------------------------

def config_path(data_root: str) -> str:
    return os.path.join(data_root, CONFIG_FILENAME)


def load_config(data_root: str) -> Optional[AppConfig]:
    """
    Loads <data_root>/config.json.

    If missing or invalid, returns None (caller should use defaults).
    """
    if not data_root:
        return None
    data = _try_read_json(config_path(data_root))
    if data is None:
        return None
    try:
        cfg = AppConfig.from_dict(data)
        cfg.catalog()  # reject catalogs with duplicate ids / hotkeys up front
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Invalid config in %s: %s", data_root, e)
        return None
    # Ensure correct root is used
    cfg.data_root = data_root
    return cfg


def load_or_default_config(data_root: str) -> AppConfig:
    return load_config(data_root) or AppConfig(data_root=data_root)


def save_config(cfg: AppConfig) -> None:
    if not cfg.data_root:
        raise ValueError("AppConfig.data_root is required")
    _atomic_write_json(config_path(cfg.data_root), cfg.to_dict())


# -----------------------------
# Video queue (<root>/queue.json)
# -----------------------------

def queue_path(data_root: str) -> str:
    return os.path.join(data_root, QUEUE_FILENAME)


def load_queue(data_root: str) -> VideoQueue:
    data = _try_read_json(queue_path(data_root)) if data_root else None
    if data is None:
        return VideoQueue()
    videos: List[VideoItem] = []
    for v in data.get("videos") or []:
        try:
            videos.append(VideoItem.from_dict(v))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed queue entry %r: %s", v, e)
    idx = int(data.get("current_index", 0) or 0)
    q = VideoQueue(videos=videos, current_index=idx)
    q.current()  # clamps the index
    return q


def save_queue(data_root: str, queue: VideoQueue) -> None:
    _atomic_write_json(queue_path(data_root), {
        "videos": [v.to_dict() for v in queue.videos],
        "current_index": int(queue.current_index),
        "queue_version": 1,
    })


# -----------------------------
# Per-video labels (<root>/labels/<stem>.json)
# -----------------------------

def labels_path(data_root: str, video: VideoItem) -> str:
    stem = os.path.splitext(os.path.basename(video.filename))[0] or video.video_id
    return os.path.join(data_root, LABELS_DIRNAME, f"{stem}.json")


def load_video_segments(data_root: str, video: VideoItem) -> List[Segment]:
    """Segments previously saved for a video; empty if none were saved yet."""
    if not data_root:
        return []
    data = _try_read_json(labels_path(data_root, video))
    if data is None:
        return []
    return segments_from_export(data)


def save_video_labels(data_root: str, video: VideoItem, doc: Dict) -> str:
    """
    Stores a video's export document as its label file. Returns the written path.
    """
    path = labels_path(data_root, video)
    _atomic_write_json(path, doc)
    return path


def write_export(path: str, doc: Dict) -> str:
    _atomic_write_json(path, doc)
    return path


def default_export_path(data_root: str, video: VideoItem) -> str:
    stem = os.path.splitext(os.path.basename(video.filename))[0] or video.video_id
    return os.path.join(data_root, EXPORTS_DIRNAME, f"{stem}_labels.json")
