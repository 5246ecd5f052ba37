import json
from datetime import date

from strike_annote.domain import BOXING_ACTIONS, ActionCatalog, Segment
from strike_annote.export import (
    action_export_label,
    build_export_document,
    export_json_text,
    segments_from_export,
)
from strike_annote.segment_store import SegmentStore


def _store():
    s = SegmentStore(ActionCatalog())
    s.add(Segment(id=2, action_id=4, start_time=8.12345, end_time=8.6, start_frame=244, end_frame=258))
    s.add(Segment(id=1, action_id=0, start_time=5.2, end_time=5.8, start_frame=156, end_frame=174))
    return s


def test_action_labels():
    assert action_export_label(BOXING_ACTIONS[0]) == "JAB_H"
    # every dash is replaced, not just the first
    assert action_export_label(BOXING_ACTIONS[4]) == "L_HOOK_H"
    assert action_export_label(None) == "UNKNOWN"


def test_document_shape():
    doc = build_export_document("bout.mp4", _store(), ActionCatalog(), labeled_by="coach",
                                export_date=date(2024, 3, 9))
    assert doc["video_file"] == "bout.mp4"
    assert doc["labeled_by"] == "coach"
    assert doc["date"] == "2024-03-09"
    assert [s["id"] for s in doc["segments"]] == [1, 2]
    first = doc["segments"][0]
    assert first == {
        "id": 1,
        "action": "JAB_H",
        "action_id": 0,
        "start_time": 5.2,
        "end_time": 5.8,
        "start_frame": 156,
        "end_frame": 174,
    }


def test_times_rounded_and_frames_kept():
    doc = build_export_document("bout.mp4", _store(), ActionCatalog(), export_date=date(2024, 1, 1))
    second = doc["segments"][1]
    assert second["start_time"] == 8.123
    # frames come from the stored segment, not from the rounded time
    assert second["start_frame"] == 244
    assert doc["labeled_by"] == "annotator_username"


def test_orphaned_action_exports_as_unknown():
    s = SegmentStore(ActionCatalog())
    s.add(Segment(id=1, action_id=77, start_time=1.0, end_time=2.0, start_frame=30, end_frame=60))
    doc = build_export_document("x.mp4", s, ActionCatalog(), export_date=date(2024, 1, 1))
    assert doc["segments"][0]["action"] == "UNKNOWN"
    assert doc["segments"][0]["action_id"] == 77


def test_export_is_deterministic():
    a = export_json_text(build_export_document("b.mp4", _store(), ActionCatalog(), export_date=date(2024, 1, 1)))
    b = export_json_text(build_export_document("b.mp4", _store(), ActionCatalog(), export_date=date(2024, 1, 1)))
    assert a == b
    assert json.loads(a)["segments"][1]["action"] == "L_HOOK_H"


def test_segments_from_export_skips_bad_rows():
    doc = {
        "segments": [
            {"id": 1, "action_id": 0, "start_time": 1.0, "end_time": 2.0, "start_frame": 30, "end_frame": 60},
            {"id": 2, "action_id": 0, "start_time": 3.0},
            {"id": 3, "action_id": 0, "start_time": 5.0, "end_time": 4.0, "start_frame": 150, "end_frame": 120},
            {"id": "x", "action_id": 0, "start_time": 1.0, "end_time": 2.0, "start_frame": 30, "end_frame": 60},
        ]
    }
    segs = segments_from_export(doc)
    assert [s.id for s in segs] == [1]
    assert segments_from_export({}) == []
