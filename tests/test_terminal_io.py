import unittest
import os
import sys
from unittest.mock import MagicMock

from blessed.dec_modes import DecPrivateMode
from blessed.keyboard import Keystroke
from blessed.mouse import RE_PATTERN_MOUSE_SGR

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from terminal_io import (
    KeyCode,
    KeyEvent,
    MouseEvent,
    MouseKind,
    ResizeEvent,
    TerminalEvents,
    key_event,
    mouse_event,
)

ESCAPE = Keystroke("\x1b", 361, "KEY_ESCAPE")


def sgr_report(report):
    """A keystroke as blessed decodes it once SGR mouse mode is enabled."""
    return Keystroke(
        report, mode=DecPrivateMode.MOUSE_EXTENDED_SGR, match=RE_PATTERN_MOUSE_SGR.match(report)
    )


def fake_term(keys, width=80, height=24):
    term = MagicMock()
    term.width = width
    term.height = height
    term.inkey.side_effect = list(keys) + [Keystroke("")] * 5
    return term


class MouseEventTest(unittest.TestCase):
    def test_left_press_is_zero_based(self):
        self.assertEqual(mouse_event(sgr_report("\x1b[<0;10;5M")), MouseEvent(MouseKind.DOWN, 9, 4))

    def test_drag_release_and_wheel(self):
        self.assertEqual(mouse_event(sgr_report("\x1b[<32;10;6M")).kind, MouseKind.DRAG)
        self.assertEqual(mouse_event(sgr_report("\x1b[<0;10;6m")).kind, MouseKind.UP)
        self.assertEqual(mouse_event(sgr_report("\x1b[<64;1;1M")).kind, MouseKind.SCROLL_UP)
        self.assertEqual(mouse_event(sgr_report("\x1b[<65;1;1M")).kind, MouseKind.SCROLL_DOWN)

    def test_right_button_is_unbound(self):
        self.assertIsNone(mouse_event(sgr_report("\x1b[<2;1;1M")))


class KeyEventTest(unittest.TestCase):
    def test_printable(self):
        self.assertEqual(key_event(Keystroke("a")), KeyEvent.of("a"))

    def test_named_sequences(self):
        self.assertEqual(key_event(Keystroke("\x1b[A", 259, "KEY_UP")), KeyEvent(KeyCode.UP))
        self.assertEqual(key_event(ESCAPE), KeyEvent(KeyCode.ESC))
        self.assertEqual(key_event(Keystroke("\x1bOP", 265, "KEY_F1")), KeyEvent(KeyCode.OTHER))

    def test_raw_control_characters(self):
        self.assertEqual(key_event(Keystroke("\r")), KeyEvent(KeyCode.ENTER))
        self.assertEqual(key_event(Keystroke("\x7f")), KeyEvent(KeyCode.BACKSPACE))


class TerminalEventsTest(unittest.TestCase):
    def test_click_arrives_as_one_mouse_event(self):
        events = TerminalEvents(fake_term([sgr_report("\x1b[<0;3;4M")]))
        self.assertEqual(events.poll(0.25), MouseEvent(MouseKind.DOWN, 2, 3))
        self.assertIsNone(events.poll(0.25))

    def test_drag_sequence(self):
        term = fake_term(
            [sgr_report("\x1b[<0;3;4M"), sgr_report("\x1b[<32;3;9M"), sgr_report("\x1b[<0;3;9m")]
        )
        events = TerminalEvents(term)
        kinds = [events.poll(0.25).kind for _ in range(3)]
        self.assertEqual(kinds, [MouseKind.DOWN, MouseKind.DRAG, MouseKind.UP])

    def test_unbound_button_is_swallowed(self):
        term = fake_term([sgr_report("\x1b[<2;3;4M"), Keystroke("<")])
        events = TerminalEvents(term)
        self.assertIsNone(events.poll(0.25))
        self.assertEqual(events.poll(0.25), KeyEvent.of("<"))

    def test_escape_key(self):
        self.assertEqual(TerminalEvents(fake_term([ESCAPE])).poll(0.25), KeyEvent(KeyCode.ESC))

    def test_resize_is_reported_first(self):
        term = fake_term([Keystroke("a")])
        events = TerminalEvents(term)
        term.width = 100
        self.assertEqual(events.poll(0.25), ResizeEvent(100, 24))
        self.assertEqual(events.poll(0.25), KeyEvent.of("a"))

    def test_timeout_returns_none(self):
        self.assertIsNone(TerminalEvents(fake_term([])).poll(0.1))

    def test_context_enables_drag_reporting(self):
        term = fake_term([])
        with TerminalEvents(term, mouse=True):
            term.mouse_enabled.assert_called_once_with(report_drag=True)
            term.mouse_enabled.return_value.__exit__.assert_not_called()
        term.mouse_enabled.return_value.__exit__.assert_called_once()

    def test_no_mouse_leaves_modes_alone(self):
        term = fake_term([])
        with TerminalEvents(term, mouse=False):
            pass
        term.mouse_enabled.assert_not_called()


if __name__ == "__main__":
    unittest.main()
