# strike_annote/media_probe.py
from __future__ import annotations

import json
import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .domain import VideoItem


logger = logging.getLogger(__name__)

# Allowed local extensions (strict)
ALLOWED_VIDEO_EXTS = {
    ".mp4", ".mov", ".mkv", ".avi", ".m4v", ".webm",
}

# Minimum acceptable source quality for labeling.
MIN_FPS = 24.0
MIN_WIDTH = 640
MIN_HEIGHT = 480
MIN_BITRATE_KBPS = 1000
MIN_DURATION_S = 30.0


def ext_lower(path: str) -> str:
    _, ext = os.path.splitext(path.strip())
    return ext.lower().strip()


def validate_local_video_path(path: str) -> Tuple[bool, str]:
    if not path:
        return (False, "No file selected.")
    if not os.path.exists(path):
        return (False, f"File does not exist: {path}")
    if not os.path.isfile(path):
        return (False, f"Not a file: {path}")
    ext = ext_lower(path)
    if ext not in ALLOWED_VIDEO_EXTS:
        return (False, f"Unsupported file type '{ext}'. Allowed: {sorted(ALLOWED_VIDEO_EXTS)}")
    return (True, "OK")


# -----------------------------
# ffprobe helpers
# -----------------------------

def find_ffprobe() -> str:
    # rely on PATH; allow override via env
    return os.environ.get("FFPROBE_BIN", "ffprobe")


def run_cmd(cmd: List[str]) -> Tuple[int, str]:
    """
    Runs a command and returns (returncode, stdout). stderr is logged on failure.
    """
    proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    out = (proc.stdout or b"").decode("utf-8", errors="ignore")
    if proc.returncode != 0:
        logger.warning("%s exited %s: %s", cmd[0], proc.returncode,
                       (proc.stderr or b"").decode("utf-8", errors="ignore").strip())
    return proc.returncode, out


def parse_rate(s: str) -> Optional[float]:
    """"30000/1001" -> 29.97; "0/0" -> None."""
    s = (s or "").strip()
    if not s:
        return None
    try:
        if "/" in s:
            a, b = s.split("/", 1)
            if float(b) == 0:
                return None
            r = float(a) / float(b)
        else:
            r = float(s)
    except ValueError:
        return None
    return r if r > 0 else None


@dataclass
class ProbeResult:
    duration: float = 0.0
    fps: float = 30.0
    width: int = 0
    height: int = 0
    bitrate: int = 0   # kbps
    codec: str = ""


def parse_ffprobe_json(payload: Dict) -> ProbeResult:
    """Pull the first video stream + container info out of `ffprobe -of json` output."""
    res = ProbeResult()
    streams = payload.get("streams") or []
    video = next((s for s in streams if s.get("codec_type", "video") == "video"), None)
    fmt = payload.get("format") or {}

    if video is not None:
        res.codec = str(video.get("codec_name") or "")
        res.width = int(video.get("width") or 0)
        res.height = int(video.get("height") or 0)
        fps = parse_rate(str(video.get("avg_frame_rate") or "")) or parse_rate(str(video.get("r_frame_rate") or ""))
        if fps:
            res.fps = fps

    for src in (fmt, video or {}):
        if not res.duration:
            try:
                res.duration = float(src.get("duration") or 0.0)
            except (TypeError, ValueError):
                pass

    raw_bitrate = fmt.get("bit_rate") or (video or {}).get("bit_rate")
    try:
        res.bitrate = int(round(int(raw_bitrate) / 1000.0)) if raw_bitrate else 0
    except (TypeError, ValueError):
        res.bitrate = 0
    return res


def ffprobe_video(path: str) -> ProbeResult:
    """
    Best-effort metadata for a local file.
    Returns defaults (duration 0, fps 30) if ffprobe is unavailable or parsing fails.
    """
    cmd = [
        find_ffprobe(),
        "-v", "error",
        "-select_streams", "v:0",
        "-show_entries", "stream=codec_type,codec_name,width,height,avg_frame_rate,r_frame_rate,bit_rate,duration"
                         ":format=duration,bit_rate",
        "-of", "json",
        path,
    ]
    try:
        code, out = run_cmd(cmd)
    except OSError as e:
        logger.warning("ffprobe unavailable (%s); using defaults for %s", e, path)
        return ProbeResult()
    if code != 0:
        return ProbeResult()
    try:
        return parse_ffprobe_json(json.loads(out or "{}"))
    except ValueError as e:
        logger.warning("Unparseable ffprobe output for %s: %s", path, e)
        return ProbeResult()


def video_item_from_path(path: str, video_id: str, estimated_segments: int = 0) -> VideoItem:
    """
    Validate a local file and describe it as a queue entry. The file is referenced
    in place, never copied.
    """
    ok, msg = validate_local_video_path(path)
    if not ok:
        raise ValueError(msg)
    info = ffprobe_video(path)
    return VideoItem(
        video_id=video_id,
        filename=os.path.basename(path),
        path=os.path.abspath(path),
        duration=info.duration,
        fps=info.fps,
        width=info.width,
        height=info.height,
        bitrate=info.bitrate,
        codec=info.codec,
        estimated_segments=int(estimated_segments),
    )


# -----------------------------
# Quality report
# -----------------------------

@dataclass(frozen=True)
class QualityCheck:
    name: str
    value: str
    required: str
    passed: bool


@dataclass(frozen=True)
class QualityReport:
    checks: Tuple[QualityCheck, ...]
    codec: str

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks)


def quality_report(video: VideoItem) -> QualityReport:
    fps_ok = video.fps >= MIN_FPS
    res_ok = video.width >= MIN_WIDTH and video.height >= MIN_HEIGHT
    bitrate_ok = video.bitrate >= MIN_BITRATE_KBPS
    duration_ok = video.duration >= MIN_DURATION_S
    return QualityReport(
        checks=(
            QualityCheck("FPS", f"{video.fps:g}", f"{MIN_FPS:g}", fps_ok),
            QualityCheck("Resolution", video.resolution, f"{MIN_WIDTH}x{MIN_HEIGHT}", res_ok),
            QualityCheck("Bitrate", f"{video.bitrate} kbps", f"{MIN_BITRATE_KBPS} kbps", bitrate_ok),
            QualityCheck("Duration", f"{video.duration:.0f}s", f"{MIN_DURATION_S:.0f}s", duration_ok),
        ),
        codec=video.codec or "unknown",
    )
