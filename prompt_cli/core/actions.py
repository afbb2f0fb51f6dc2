"""Map decoded keystrokes to the semantic actions prompts understand."""

from enum import Enum
from typing import Dict, NamedTuple

from .keys import KeyEvent


class Action(Enum):
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    FIRST = "first"
    LAST = "last"
    NEXT = "next"
    RESET = "reset"
    SUBMIT = "submit"
    ABORT = "abort"
    DELETE = "delete"
    DELETE_FORWARD = "delete_forward"
    CHAR_INPUT = "char_input"
    NOOP = "noop"


class KeyAction(NamedTuple):
    """An action plus the character it carries (``CHAR_INPUT`` only)."""

    action: Action
    char: str = ""


_CTRL_ACTIONS: Dict[str, Action] = {
    "a": Action.FIRST,
    "c": Action.ABORT,
    "d": Action.ABORT,
    "e": Action.LAST,
    "g": Action.RESET,
}

# Vim-style movement, only for list prompts
_LIST_ACTIONS: Dict[str, Action] = {
    "j": Action.MOVE_DOWN,
    "k": Action.MOVE_UP,
}

_NAMED_ACTIONS: Dict[str, Action] = {
    "return": Action.SUBMIT,
    "enter": Action.SUBMIT,  # ctrl+j
    "backspace": Action.DELETE,
    "delete": Action.DELETE_FORWARD,
    "escape": Action.ABORT,
    "tab": Action.NEXT,
    # Reserved until a prompt grows paging or home/end handling
    "pagedown": Action.NOOP,
    "pageup": Action.NOOP,
    "home": Action.NOOP,
    "end": Action.NOOP,
    "up": Action.MOVE_UP,
    "down": Action.MOVE_DOWN,
    "right": Action.MOVE_RIGHT,
    "left": Action.MOVE_LEFT,
}

NOOP = KeyAction(Action.NOOP)


def map_key(key: KeyEvent, list_style: bool = False) -> KeyAction:
    """Return the action *key* triggers; first matching rule wins."""
    if key.meta and key.name != "escape":
        return NOOP

    if key.ctrl and key.name in _CTRL_ACTIONS:
        return KeyAction(_CTRL_ACTIONS[key.name])

    if list_style and key.name in _LIST_ACTIONS:
        return KeyAction(_LIST_ACTIONS[key.name])

    if key.name in _NAMED_ACTIONS:
        return KeyAction(_NAMED_ACTIONS[key.name])

    if key.printable and not key.ctrl:
        return KeyAction(Action.CHAR_INPUT, key.char)

    return NOOP
