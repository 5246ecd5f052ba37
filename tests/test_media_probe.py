import json

import pytest

from strike_annote import media_probe
from strike_annote.domain import VideoItem
from strike_annote.media_probe import (
    ProbeResult,
    ffprobe_video,
    parse_ffprobe_json,
    parse_rate,
    quality_report,
    validate_local_video_path,
    video_item_from_path,
)


FFPROBE_PAYLOAD = {
    "streams": [{
        "codec_type": "video",
        "codec_name": "h264",
        "width": 1920,
        "height": 1080,
        "avg_frame_rate": "30000/1001",
        "r_frame_rate": "30/1",
    }],
    "format": {"duration": "95.5", "bit_rate": "5000000"},
}


def test_parse_rate():
    assert parse_rate("30000/1001") == pytest.approx(29.97, abs=0.01)
    assert parse_rate("25") == 25.0
    assert parse_rate("0/0") is None
    assert parse_rate("") is None
    assert parse_rate("abc") is None


def test_parse_ffprobe_json():
    res = parse_ffprobe_json(FFPROBE_PAYLOAD)
    assert res.codec == "h264"
    assert (res.width, res.height) == (1920, 1080)
    assert res.fps == pytest.approx(29.97, abs=0.01)
    assert res.duration == 95.5
    assert res.bitrate == 5000


def test_parse_ffprobe_json_fallbacks():
    payload = {"streams": [{"avg_frame_rate": "0/0", "r_frame_rate": "24/1", "duration": "12.0",
                            "bit_rate": "800000"}]}
    res = parse_ffprobe_json(payload)
    assert res.fps == 24.0
    assert res.duration == 12.0
    assert res.bitrate == 800
    assert parse_ffprobe_json({}) == ProbeResult()


def test_ffprobe_video_uses_runner(monkeypatch):
    monkeypatch.setattr(media_probe, "run_cmd", lambda cmd: (0, json.dumps(FFPROBE_PAYLOAD)))
    assert ffprobe_video("clip.mp4").duration == 95.5


def test_ffprobe_video_defaults_on_failure(monkeypatch):
    monkeypatch.setattr(media_probe, "run_cmd", lambda cmd: (1, ""))
    assert ffprobe_video("clip.mp4") == ProbeResult()

    monkeypatch.setattr(media_probe, "run_cmd", lambda cmd: (0, "not json"))
    assert ffprobe_video("clip.mp4") == ProbeResult()

    def missing(cmd):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(media_probe, "run_cmd", missing)
    assert ffprobe_video("clip.mp4").fps == 30.0


def test_ffprobe_binary_override(monkeypatch):
    seen = {}

    def fake(cmd):
        seen["bin"] = cmd[0]
        return 0, "{}"

    monkeypatch.setenv("FFPROBE_BIN", "/opt/ff/ffprobe")
    monkeypatch.setattr(media_probe, "run_cmd", fake)
    ffprobe_video("clip.mp4")
    assert seen["bin"] == "/opt/ff/ffprobe"


def test_validate_local_video_path(tmp_path):
    assert validate_local_video_path("")[0] is False
    assert validate_local_video_path(str(tmp_path / "missing.mp4"))[0] is False
    txt = tmp_path / "notes.txt"
    txt.write_text("x")
    assert validate_local_video_path(str(txt))[0] is False
    vid = tmp_path / "bout.MP4"
    vid.write_bytes(b"\x00")
    assert validate_local_video_path(str(vid)) == (True, "OK")


def test_video_item_from_path(tmp_path, monkeypatch):
    vid = tmp_path / "bout.mp4"
    vid.write_bytes(b"\x00")
    monkeypatch.setattr(media_probe, "run_cmd", lambda cmd: (0, json.dumps(FFPROBE_PAYLOAD)))
    item = video_item_from_path(str(vid), "3", estimated_segments=40)
    assert item.video_id == "3"
    assert item.filename == "bout.mp4"
    assert item.resolution == "1920x1080"
    assert item.estimated_segments == 40

    with pytest.raises(ValueError):
        video_item_from_path(str(tmp_path / "nope.mp4"), "4")


def test_quality_report():
    good = VideoItem(video_id="1", filename="a.mp4", duration=120.0, fps=30.0, width=1280, height=720,
                     bitrate=4000, codec="h264")
    report = quality_report(good)
    assert report.passed
    assert report.codec == "h264"
    assert [c.name for c in report.checks] == ["FPS", "Resolution", "Bitrate", "Duration"]

    poor = VideoItem(video_id="2", filename="b.mp4", duration=20.0, fps=15.0, width=320, height=240, bitrate=500)
    report = quality_report(poor)
    assert not report.passed
    assert not any(c.passed for c in report.checks)
    assert report.codec == "unknown"
