import pytest

from strike_annote.domain import Segment
from strike_annote.timeutils import (
    MAX_ZOOM,
    MIN_ZOOM,
    TimelineView,
    clamp_zoom,
    compute_tick_marks,
    format_time_precise,
    format_time_range,
    format_time_short,
    frames_to_seconds,
    percent_to_time,
    seconds_to_frames,
    segment_span,
    span_between,
    time_to_percent,
)


def _seg(start, end):
    return Segment(id=1, action_id=0, start_time=start, end_time=end,
                   start_frame=int(round(start * 30)), end_frame=int(round(end * 30)))


# ---------------- formatting / conversion ----------------

def test_format_time_short():
    assert format_time_short(0) == "0:00"
    assert format_time_short(75) == "1:15"
    assert format_time_short(-3) == "0:00"
    assert format_time_short(None) == "0:00"


def test_format_time_precise():
    assert format_time_precise(3.25) == "0:03.25"
    assert format_time_precise(75.5) == "1:15.50"
    assert format_time_range(1.5, 2.0) == "0:01.50 → 0:02.00"


def test_frame_conversion():
    assert seconds_to_frames(1.5, 30) == 45
    assert seconds_to_frames(5.2, 30) == 156
    assert frames_to_seconds(45, 30) == pytest.approx(1.5)
    # non-positive fps falls back to 30
    assert seconds_to_frames(1.0, 0) == 30
    assert frames_to_seconds(60, -1) == pytest.approx(2.0)


def test_half_frames_round_up():
    assert seconds_to_frames(0.1875, 24) == 5  # 4.5 frames
    assert seconds_to_frames(0.5, 1) == 1
    assert seconds_to_frames(2.5, 1) == 3
    assert seconds_to_frames(0.375, 4) == 2


# ---------------- zoom / view window ----------------

def test_clamp_zoom():
    assert clamp_zoom(15) == MAX_ZOOM == 10
    assert clamp_zoom(0) == MIN_ZOOM == 1
    assert clamp_zoom(2.5) == 2.5


def test_view_is_centered_on_current_time():
    view = TimelineView(total_duration=120.0, zoom=4.0, current_time=60.0)
    assert view.visible_duration == pytest.approx(30.0)
    assert view.scroll_offset == pytest.approx(45.0)
    assert view.to_percent(60.0) == pytest.approx(50.0)


def test_view_does_not_scroll_before_zero():
    view = TimelineView(total_duration=120.0, zoom=4.0, current_time=5.0)
    assert view.scroll_offset == 0.0
    assert view.to_percent(5.0) == pytest.approx(5.0 / 30.0 * 100.0)


def test_view_zoom_is_clamped():
    assert TimelineView(total_duration=100.0, zoom=50.0).visible_duration == pytest.approx(10.0)


def test_unusable_view_without_duration():
    assert not TimelineView(total_duration=0.0).is_usable()
    assert TimelineView(total_duration=1.0).is_usable()


@pytest.mark.parametrize("scroll,visible", [(0.0, 120.0), (45.0, 30.0), (12.5, 7.25)])
def test_percent_mapping_round_trip(scroll, visible):
    for i in range(11):
        t = scroll + visible * i / 10.0
        pct = time_to_percent(t, scroll, visible)
        assert percent_to_time(pct, scroll, visible) == pytest.approx(t)


def test_seek_time_from_click_fraction():
    view = TimelineView(total_duration=120.0, zoom=4.0, current_time=60.0)
    assert view.seek_time(0.5) == pytest.approx(60.0)
    assert view.seek_time(0.0) == pytest.approx(45.0)


def test_seek_time_is_clamped_to_video():
    view = TimelineView(total_duration=120.0, zoom=1.0, current_time=0.0)
    assert view.seek_time(-0.5) == 0.0
    assert view.seek_time(1.5) == 120.0


# ---------------- tick marks ----------------

def test_tick_marks_full_view():
    ticks = compute_tick_marks(120.0, 120.0, 0.0)
    assert ticks == [float(t) for t in range(0, 121, 12)]


def test_tick_marks_zoomed_window():
    ticks = compute_tick_marks(120.0, 30.0, 45.0)
    assert ticks[0] == 45.0
    assert ticks[-1] == 78.0
    assert all(b - a == 3.0 for a, b in zip(ticks, ticks[1:]))


def test_tick_marks_first_tick_at_or_before_scroll():
    ticks = compute_tick_marks(100.0, 20.0, 13.0)
    assert ticks[0] == 12.0
    assert ticks[0] <= 13.0
    assert ticks[-1] >= 13.0 + 20.0


def test_tick_interval_is_at_least_one_second():
    ticks = compute_tick_marks(5.0, 5.0, 0.0)
    assert ticks == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]


def test_tick_marks_stop_at_last_multiple_inside_duration():
    # 125s at zoom 1: interval 12, so the last tick is 120 rather than 125.
    ticks = compute_tick_marks(125.0, 125.0, 0.0)
    assert ticks[-1] == 120.0
    assert ticks == sorted(ticks)


def test_view_tick_marks_delegate():
    view = TimelineView(total_duration=120.0, zoom=4.0, current_time=60.0)
    assert view.tick_marks() == compute_tick_marks(120.0, 30.0, 45.0)


# ---------------- spans ----------------

def test_span_inside_window():
    view = TimelineView(total_duration=100.0)
    span = segment_span(_seg(10.0, 20.0), view)
    assert span.start_percent == pytest.approx(10.0)
    assert span.width_percent == pytest.approx(10.0)
    assert span.end_percent == pytest.approx(20.0)
    assert not span.clipped_left and not span.clipped_right


def test_span_truncated_on_the_left():
    view = TimelineView(total_duration=100.0, zoom=4.0, current_time=50.0)  # window 37.5..62.5
    span = segment_span(_seg(30.0, 40.0), view)
    assert span.start_percent == 0.0
    assert span.width_percent == pytest.approx(10.0)
    assert span.clipped_left


def test_span_truncated_on_the_right():
    view = TimelineView(total_duration=100.0, zoom=4.0, current_time=50.0)
    span = segment_span(_seg(60.0, 70.0), view)
    assert span.start_percent == pytest.approx(90.0)
    assert span.end_percent == pytest.approx(100.0)
    assert span.clipped_right


def test_span_fully_outside_is_omitted():
    view = TimelineView(total_duration=100.0, zoom=4.0, current_time=50.0)
    assert segment_span(_seg(0.0, 10.0), view) is None
    assert segment_span(_seg(63.0, 70.0), view) is None


def test_span_between_accepts_reversed_bounds():
    view = TimelineView(total_duration=100.0)
    span = span_between(20.0, 10.0, view)
    assert span.start_percent == pytest.approx(10.0)
    assert span.width_percent == pytest.approx(10.0)
