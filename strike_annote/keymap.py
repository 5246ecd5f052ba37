# strike_annote/keymap.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .domain import ActionCatalog


class CommandKind(str, Enum):
    TOGGLE_PLAY = "toggle_play"
    STEP_FRAME = "step_frame"        # arg: +1 / -1 frames
    JUMP = "jump"                    # arg: +1.0 / -1.0 seconds
    MARK_IN = "mark_in"
    MARK_OUT = "mark_out"
    COMMIT = "commit"
    CLEAR_MARKS = "clear_marks"
    CANCEL_SELECTION = "cancel_selection"
    NEXT_VIDEO = "next_video"
    PREVIOUS_VIDEO = "previous_video"
    TOGGLE_HELP = "toggle_help"
    SELECT_ACTION = "select_action"  # arg: action id


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    arg: Union[int, float, None] = None


# Normalized key names, as produced by the window's key translation.
KEY_SPACE = "space"
KEY_LEFT = "left"
KEY_RIGHT = "right"
KEY_ENTER = "enter"
KEY_BACKSPACE = "backspace"
KEY_DELETE = "delete"
KEY_ESCAPE = "escape"

_FIXED = {
    KEY_SPACE: Command(CommandKind.TOGGLE_PLAY),
    "[": Command(CommandKind.MARK_IN),
    "]": Command(CommandKind.MARK_OUT),
    KEY_ENTER: Command(CommandKind.COMMIT),
    KEY_BACKSPACE: Command(CommandKind.CLEAR_MARKS),
    KEY_DELETE: Command(CommandKind.CLEAR_MARKS),
    KEY_ESCAPE: Command(CommandKind.CANCEL_SELECTION),
    "n": Command(CommandKind.NEXT_VIDEO),
    "p": Command(CommandKind.PREVIOUS_VIDEO),
    "?": Command(CommandKind.TOGGLE_HELP),
}


def resolve_key(key: str, shift: bool, catalog: ActionCatalog) -> Optional[Command]:
    """
    Map one key press to a command, or None if the key is not bound.

    Hotkey matching is case-insensitive. Fixed bindings win over catalog hotkeys
    so a catalog can never shadow n/p/? or the marking keys.
    """
    if not key:
        return None
    k = key.lower()

    if k == KEY_LEFT:
        return Command(CommandKind.JUMP, -1.0) if shift else Command(CommandKind.STEP_FRAME, -1)
    if k == KEY_RIGHT:
        return Command(CommandKind.JUMP, 1.0) if shift else Command(CommandKind.STEP_FRAME, 1)

    cmd = _FIXED.get(k)
    if cmd is not None:
        return cmd

    action = catalog.find_by_hotkey(k)
    if action is not None:
        return Command(CommandKind.SELECT_ACTION, action.id)
    return None
