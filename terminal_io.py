"""Turn the blessed key stream into key, resize and mouse events."""

from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass
from enum import Enum, auto

from blessed import Terminal

from logger_utils import setup_logger

logger = setup_logger(__name__)


class KeyCode(Enum):
    CHAR = auto()
    ENTER = auto()
    ESC = auto()
    BACKSPACE = auto()
    UP = auto()
    DOWN = auto()
    LEFT = auto()
    RIGHT = auto()
    OTHER = auto()


BLESSED_NAMES = {
    "KEY_ENTER": KeyCode.ENTER,
    "KEY_ESCAPE": KeyCode.ESC,
    "KEY_BACKSPACE": KeyCode.BACKSPACE,
    "KEY_DELETE": KeyCode.BACKSPACE,
    "KEY_UP": KeyCode.UP,
    "KEY_DOWN": KeyCode.DOWN,
    "KEY_LEFT": KeyCode.LEFT,
    "KEY_RIGHT": KeyCode.RIGHT,
}


@dataclass(frozen=True)
class KeyEvent:
    code: KeyCode
    char: str = ""

    @classmethod
    def of(cls, char: str) -> "KeyEvent":
        return cls(KeyCode.CHAR, char)


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


class MouseKind(Enum):
    DOWN = auto()
    DRAG = auto()
    UP = auto()
    SCROLL_UP = auto()
    SCROLL_DOWN = auto()


@dataclass(frozen=True)
class MouseEvent:
    kind: MouseKind
    column: int
    row: int


# Only the left button and the wheel are bound; modified clicks are ignored.
MOUSE_NAMES = {
    "MOUSE_LEFT": MouseKind.DOWN,
    "MOUSE_LEFT_MOTION": MouseKind.DRAG,
    "MOUSE_LEFT_RELEASED": MouseKind.UP,
    "MOUSE_RELEASED": MouseKind.UP,
    "MOUSE_SCROLL_UP": MouseKind.SCROLL_UP,
    "MOUSE_SCROLL_DOWN": MouseKind.SCROLL_DOWN,
}


def is_mouse(keystroke) -> bool:
    name = keystroke.name
    return bool(name) and name.startswith("MOUSE_")


def mouse_event(keystroke) -> MouseEvent | None:
    """Map a blessed mouse keystroke to a :class:`MouseEvent` (0-based cells)."""
    kind = MOUSE_NAMES.get(keystroke.name)
    if kind is None:
        return None
    row, column = keystroke.mouse_yx
    return MouseEvent(kind, column, row)


def key_event(keystroke) -> KeyEvent | None:
    if keystroke.is_sequence:
        code = BLESSED_NAMES.get(keystroke.name)
        return KeyEvent(code) if code else KeyEvent(KeyCode.OTHER)
    char = str(keystroke)
    if not char:
        return None
    if char in ("\r", "\n"):
        return KeyEvent(KeyCode.ENTER)
    if char in ("\x7f", "\x08"):
        return KeyEvent(KeyCode.BACKSPACE)
    if char == "\x1b":
        return KeyEvent(KeyCode.ESC)
    if not char.isprintable():
        return KeyEvent(KeyCode.OTHER)
    return KeyEvent.of(char)


class TerminalEvents:
    """Polls one event at a time from a :class:`blessed.Terminal`.

    Used as a context manager it turns on blessed's mouse reporting with drag
    tracking, so clicks arrive as decoded ``MOUSE_*`` keystrokes.
    """

    def __init__(self, term: Terminal | None = None, mouse: bool = True):
        self.term = term or Terminal()
        self.mouse = mouse
        self._size = (self.term.width, self.term.height)
        self._modes = ExitStack()

    def __enter__(self):
        if self.mouse:
            self._modes.enter_context(self.term.mouse_enabled(report_drag=True))
        return self

    def __exit__(self, exc_type, exc, tb):
        self._modes.close()
        return False

    def poll(self, timeout: float):
        """Wait up to ``timeout`` seconds; return an event or ``None``."""
        size = (self.term.width, self.term.height)
        if size != self._size:
            self._size = size
            return ResizeEvent(*size)

        keystroke = self.term.inkey(timeout=max(0.0, timeout))
        if not keystroke:
            return None
        if is_mouse(keystroke):
            event = mouse_event(keystroke)
            if event is None:
                logger.debug("Ignoring mouse report %s", keystroke.name)
            return event
        return key_event(keystroke)
