from datetime import date

import pytest

from strike_annote.domain import AppConfig, Segment, VideoItem, VideoStatus
from strike_annote.keymap import Command, CommandKind
from strike_annote.session import LabelingSession


@pytest.fixture
def session():
    cfg = AppConfig(data_root="", annotator="coach")
    video = VideoItem(video_id="1", filename="bout.mp4", duration=60.0, fps=30.0)
    return LabelingSession(cfg, cfg.catalog(), video)


def _mark(session, start, end, action_id=0):
    session.seek(start)
    session.handle(Command(CommandKind.MARK_IN))
    session.seek(end)
    session.handle(Command(CommandKind.MARK_OUT))
    session.handle(Command(CommandKind.SELECT_ACTION, action_id))


def test_keyboard_flow_commits_a_segment(session):
    _mark(session, 5.2, 5.8)
    outcome = session.handle(Command(CommandKind.COMMIT))
    assert outcome.ok
    assert outcome.title == "Segment saved"
    assert outcome.detail == "Jab to Head"
    assert session.store.count() == 1
    assert session.video.segments_labeled == 1
    assert session.video.status == VideoStatus.IN_PROGRESS


def test_rejections_become_outcomes(session):
    outcome = session.handle(Command(CommandKind.COMMIT))
    assert not outcome.ok
    assert "mark in" in outcome.detail

    session.seek(3.0)
    session.mark_in()
    session.seek(2.0)
    outcome = session.mark_out()
    assert not outcome.ok
    assert outcome.title == "Invalid mark out"

    session.seek(3.1)
    session.mark_out()
    session.select_action(0)
    outcome = session.commit()
    assert not outcome.ok
    assert outcome.detail == "Minimum 5 frames required"

    outcome = session.select_action(404)
    assert not outcome.ok
    assert session.store.is_empty()


def test_marking_pauses_playback(session):
    session.clock.play()
    session.handle(Command(CommandKind.MARK_IN))
    assert not session.clock.playing


def test_seek_wins_over_ticks(session):
    session.clock.play()
    session.tick()
    session.seek_fraction(0.5)
    assert not session.clock.playing
    assert session.current_time == pytest.approx(30.0)
    session.tick()
    assert session.current_time == pytest.approx(30.0)


def test_frame_step_and_jump(session):
    session.seek(10.0)
    session.handle(Command(CommandKind.STEP_FRAME, 1))
    assert session.current_frame() == 301
    session.handle(Command(CommandKind.JUMP, -1.0))
    assert session.current_time == pytest.approx(9.0 + 1 / 30.0)


def test_toggle_play(session):
    session.handle(Command(CommandKind.TOGGLE_PLAY))
    assert session.clock.playing


def test_zoom_steps_and_clamps(session):
    assert session.zoom_in() == 1.5
    session.set_zoom(42)
    assert session.zoom == 10.0
    assert session.view().visible_duration == pytest.approx(6.0)
    session.set_zoom(1.0)
    assert session.zoom_out() == 1.0


def test_edit_then_commit_replaces(session):
    _mark(session, 1.0, 2.0)
    session.commit()
    original = session.store.list()[0]

    outcome = session.edit_segment(original.id)
    assert outcome.title == "Editing segment"
    assert session.current_time == 1.0
    assert session.marks.mark_out == 2.0

    session.seek(2.5)
    session.mark_out()
    session.commit()
    assert [s.end_time for s in session.store.list()] == [2.5]


def test_missing_segment_is_a_silent_no_op(session):
    assert session.edit_segment(99) is None
    assert session.delete_segment(99) is None


def test_delete_segment(session):
    _mark(session, 1.0, 2.0)
    session.commit()
    seg_id = session.store.list()[0].id
    assert session.delete_segment(seg_id).title == "Segment deleted"
    assert session.video.segments_labeled == 0


def test_clear_and_cancel(session):
    _mark(session, 1.0, 2.0, action_id=3)
    assert session.handle(Command(CommandKind.CLEAR_MARKS)).title == "Selection cleared"
    assert session.marks.mark_in is None
    assert session.marks.selected_action.id == 3
    session.handle(Command(CommandKind.CANCEL_SELECTION))
    assert session.marks.selected_action is None


def test_navigation_commands_are_not_session_commands(session):
    with pytest.raises(ValueError):
        session.handle(Command(CommandKind.NEXT_VIDEO))


def test_loaded_segments_and_export(session):
    cfg = session.config
    video = VideoItem(video_id="2", filename="b.mp4", duration=30.0, fps=25.0)
    prior = [Segment(id=5, action_id=4, start_time=2.0, end_time=3.0, start_frame=50, end_frame=75)]
    s = LabelingSession(cfg, cfg.catalog(), video, prior)
    doc = s.export_document(export_date=date(2024, 5, 1))
    assert doc["video_file"] == "b.mp4"
    assert doc["labeled_by"] == "coach"
    assert doc["segments"][0]["action"] == "L_HOOK_H"
    assert s.store.allocate_id() == 6
