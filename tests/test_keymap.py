import pytest

from strike_annote.domain import Action, ActionCatalog, ActionCategory
from strike_annote.keymap import Command, CommandKind, resolve_key


@pytest.fixture
def catalog():
    return ActionCatalog()


@pytest.mark.parametrize("key,kind", [
    ("space", CommandKind.TOGGLE_PLAY),
    ("[", CommandKind.MARK_IN),
    ("]", CommandKind.MARK_OUT),
    ("enter", CommandKind.COMMIT),
    ("backspace", CommandKind.CLEAR_MARKS),
    ("delete", CommandKind.CLEAR_MARKS),
    ("escape", CommandKind.CANCEL_SELECTION),
    ("n", CommandKind.NEXT_VIDEO),
    ("P", CommandKind.PREVIOUS_VIDEO),
    ("?", CommandKind.TOGGLE_HELP),
])
def test_fixed_bindings(catalog, key, kind):
    assert resolve_key(key, False, catalog) == Command(kind)


def test_arrows_step_frames_or_jump(catalog):
    assert resolve_key("left", False, catalog) == Command(CommandKind.STEP_FRAME, -1)
    assert resolve_key("right", False, catalog) == Command(CommandKind.STEP_FRAME, 1)
    assert resolve_key("left", True, catalog) == Command(CommandKind.JUMP, -1.0)
    assert resolve_key("right", True, catalog) == Command(CommandKind.JUMP, 1.0)


def test_action_hotkeys(catalog):
    assert resolve_key("1", False, catalog) == Command(CommandKind.SELECT_ACTION, 0)
    assert resolve_key("0", False, catalog) == Command(CommandKind.SELECT_ACTION, 9)
    assert resolve_key("D", True, catalog) == Command(CommandKind.SELECT_ACTION, 11)
    assert resolve_key("i", False, catalog) == Command(CommandKind.SELECT_ACTION, 12)


def test_unbound_keys(catalog):
    assert resolve_key("x", False, catalog) is None
    assert resolve_key("", False, catalog) is None
    assert resolve_key("f5", False, catalog) is None


def test_fixed_bindings_win_over_catalog_hotkeys():
    catalog = ActionCatalog([Action(0, "Nod", "NOD", "n", ActionCategory.OTHER)])
    assert resolve_key("n", False, catalog) == Command(CommandKind.NEXT_VIDEO)
