import pytest

from strike_annote.playback import PlaybackClock


def test_tick_advances_by_speed():
    clock = PlaybackClock(10.0, base_step=0.1)
    assert clock.tick() == 0.0  # paused
    clock.play()
    assert clock.tick() == pytest.approx(0.1)
    clock.set_speed(2.0)
    assert clock.tick() == pytest.approx(0.3)


def test_tick_stops_at_end():
    clock = PlaybackClock(1.0, base_step=0.4)
    clock.play()
    clock.tick()
    clock.tick()
    assert clock.tick() == 1.0
    assert not clock.playing
    assert clock.at_end()
    # no implicit restart at the end
    assert clock.play() is False


def test_play_without_duration():
    clock = PlaybackClock(0.0)
    assert clock.toggle() is False


def test_toggle():
    clock = PlaybackClock(5.0)
    assert clock.toggle() is True
    assert clock.toggle() is False


def test_seek_and_jump_are_clamped():
    clock = PlaybackClock(10.0)
    assert clock.seek(12.0) == 10.0
    assert clock.seek(-1.0) == 0.0
    clock.seek(0.5)
    assert clock.jump(-1.0) == 0.0
    assert clock.jump(1.0) == pytest.approx(1.0)


def test_step_frames():
    clock = PlaybackClock(10.0)
    clock.seek(1.0)
    assert clock.step_frames(1, 30) == pytest.approx(1.0 + 1 / 30.0)
    assert clock.step_frames(-2, 30) == pytest.approx(1.0 - 1 / 30.0)
    assert clock.current_frame(30) == 29


def test_speed_must_be_configured():
    clock = PlaybackClock(10.0, speeds=[0.5, 1.0])
    with pytest.raises(ValueError):
        clock.set_speed(2.0)
    assert clock.speed == 1.0
