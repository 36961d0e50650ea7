from enum import StrEnum

from pydantic import BaseModel

from tui.screen import Vector


class EventType(StrEnum):
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    SELECT = "select"
    DESELECT = "deselect"
    TOGGLE_EXPAND = "toggle_expand"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    RESIZE = "resize"
    QUIT = "quit"


class Event(BaseModel):
    type: EventType
    size: Vector | None = None


KEY_BINDINGS: dict[str, EventType] = {
    # arrows, posix and windows
    "\x1b[A": EventType.MOVE_UP,
    "\xe0H": EventType.MOVE_UP,
    "k": EventType.MOVE_UP,
    "\x1b[B": EventType.MOVE_DOWN,
    "\xe0P": EventType.MOVE_DOWN,
    "j": EventType.MOVE_DOWN,
    "\x1b[C": EventType.SELECT,
    "\r": EventType.SELECT,
    "\n": EventType.SELECT,
    "l": EventType.SELECT,
    "\x1b[D": EventType.DESELECT,
    "\x1b": EventType.DESELECT,
    "\x7f": EventType.DESELECT,
    "\x08": EventType.DESELECT,
    "h": EventType.DESELECT,
    "\t": EventType.TOGGLE_EXPAND,
    "o": EventType.TOGGLE_EXPAND,
    "\x1b[5~": EventType.SCROLL_UP,
    "\xe0I": EventType.SCROLL_UP,
    "u": EventType.SCROLL_UP,
    "\x1b[6~": EventType.SCROLL_DOWN,
    "\xe0Q": EventType.SCROLL_DOWN,
    "d": EventType.SCROLL_DOWN,
    "q": EventType.QUIT,
    "\x03": EventType.QUIT,
}


def event_for_key(key: str) -> Event | None:
    """Map a key read from the terminal to an event, None for unbound keys."""

    event_type = KEY_BINDINGS.get(key)
    if event_type is None:
        return None
    return Event(type=event_type)
