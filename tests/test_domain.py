import pytest

from strike_annote.domain import (
    BOXING_ACTIONS,
    CATEGORY_COLORS,
    KEYBOARD_SHORTCUTS,
    Action,
    ActionCatalog,
    ActionCategory,
    AppConfig,
    VideoItem,
    VideoQueue,
    VideoStatus,
    category_color_hex,
)


def test_builtin_catalog():
    catalog = ActionCatalog()
    assert len(catalog) == 13
    assert catalog.lookup(0).short_name == "JAB-H"
    assert [a.id for a in catalog.by_category(ActionCategory.HOOK)] == [4, 5, 6, 7]
    assert catalog.lookup(None) is None
    assert catalog.lookup(42) is None
    assert 12 in catalog and 13 not in catalog


def test_hotkeys_are_case_insensitive():
    catalog = ActionCatalog()
    assert catalog.find_by_hotkey("o").id == 10
    assert catalog.find_by_hotkey("O").id == 10
    assert catalog.find_by_hotkey("0").id == 9
    assert catalog.find_by_hotkey("x") is None
    assert catalog.find_by_hotkey("") is None
    assert sorted(catalog.hotkeys()) == sorted("1234567890odi")


def test_catalog_rejects_duplicate_hotkeys():
    with pytest.raises(ValueError):
        ActionCatalog([
            Action(0, "A", "A", "a", ActionCategory.OTHER),
            Action(1, "B", "B", "A", ActionCategory.OTHER),
        ])


def test_catalog_rejects_duplicate_ids_and_bad_hotkeys():
    with pytest.raises(ValueError):
        ActionCatalog([BOXING_ACTIONS[0], BOXING_ACTIONS[0]])
    with pytest.raises(ValueError):
        ActionCatalog([Action(0, "A", "A", "ab", ActionCategory.OTHER)])
    with pytest.raises(ValueError):
        ActionCatalog([Action(-1, "A", "A", "a", ActionCategory.OTHER)])


def test_action_dict_round_trip():
    a = BOXING_ACTIONS[4]
    assert Action.from_dict(a.to_dict()) == a


def test_category_colors():
    assert category_color_hex(ActionCategory.HOOK) == CATEGORY_COLORS[ActionCategory.HOOK]
    assert set(CATEGORY_COLORS) == set(ActionCategory)


def test_shortcut_table_sections():
    assert set(KEYBOARD_SHORTCUTS) == {"Playback", "Segment", "Navigation"}
    keys = [k for entries in KEYBOARD_SHORTCUTS.values() for k, _ in entries]
    assert "[" in keys and "]" in keys and "?" in keys


# ---------------- videos / queue ----------------

def _queue(n=3):
    return VideoQueue(videos=[VideoItem(video_id=str(i + 1), filename=f"bout_{i + 1}.mp4", duration=60.0)
                              for i in range(n)])


def test_video_item_round_trip():
    v = VideoItem(video_id="1", filename="a.mp4", duration=12.5, fps=25.0, width=1280, height=720,
                  bitrate=4000, codec="h264", status=VideoStatus.IN_PROGRESS, segments_labeled=3)
    assert VideoItem.from_dict(v.to_dict()) == v
    assert v.resolution == "1280x720"
    assert v.total_frames == 312


def test_video_item_unknown_status_falls_back():
    v = VideoItem.from_dict({"video_id": "1", "filename": "a.mp4", "status": "weird"})
    assert v.status == VideoStatus.NOT_STARTED
    assert v.fps == 30.0


def test_queue_navigation_clamps_at_the_ends():
    q = _queue()
    assert q.previous() is None
    assert q.current().video_id == "1"
    assert q.next().video_id == "2"
    assert q.next().video_id == "3"
    assert q.next() is None
    assert q.current().video_id == "3"


def test_queue_select_and_add():
    q = _queue()
    assert q.select("2").filename == "bout_2.mp4"
    assert q.select("9") is None
    assert q.current_index == 1
    assert q.next_video_id() == "4"
    with pytest.raises(ValueError):
        q.add(VideoItem(video_id="1", filename="dup.mp4"))


def test_queue_progress():
    q = _queue(4)
    assert q.progress_percent() == 0.0
    q.videos[0].status = VideoStatus.COMPLETE
    assert q.completed_count() == 1
    assert q.progress_percent() == pytest.approx(25.0)
    assert VideoQueue().progress_percent() == 0.0
    assert VideoQueue().current() is None


# ---------------- config ----------------

def test_config_round_trip_with_custom_actions():
    cfg = AppConfig(data_root="/data", annotator="coach", min_segment_frames=8,
                    actions=[Action(0, "Feint", "FEINT", "f", ActionCategory.OTHER)])
    back = AppConfig.from_dict(cfg.to_dict())
    assert back == cfg
    assert len(back.catalog()) == 1


def test_config_defaults():
    cfg = AppConfig.from_dict({})
    assert cfg.annotator == "annotator_username"
    assert cfg.min_segment_frames == 5
    assert cfg.playback_speeds == [0.25, 0.5, 1.0, 2.0]
    assert len(cfg.catalog()) == len(BOXING_ACTIONS)
    assert "actions" not in cfg.to_dict()
