import unittest
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from errors import ParseError
from lyrics_sync import LineStyle, LyricState, Rect, parse_timestamp_line
from terminal_io import MouseEvent, MouseKind

SYNCED = """[ti:Some Song]
[00:20.00]Third
[00:05.10]First
not a timed line
[00:10.00][00:30.00]Chorus
"""


def timed_state(count=10, step=1000, height=4):
    text = "\n".join(f"[00:{i * step // 1000:02d}.00]line {i}" for i in range(count))
    state = LyricState(area=Rect(0, 0, 40, height))
    state.ingest(text, is_synced=True)
    return state


class ParseTest(unittest.TestCase):
    def test_minutes_and_fraction(self):
        self.assertEqual(parse_timestamp_line("[01:02.50]Hello"), ([62500], "Hello"))

    def test_whole_seconds(self):
        self.assertEqual(parse_timestamp_line("[00:05]Go"), ([5000], "Go"))

    def test_untimed_line_raises(self):
        with self.assertRaises(ParseError):
            parse_timestamp_line("just words")


class IngestTest(unittest.TestCase):
    def test_synced_lines_are_ordered_and_unique(self):
        state = LyricState()
        state.ingest(SYNCED, is_synced=True)
        self.assertEqual(state.ordered_timestamps, [5100, 10000, 20000, 30000])
        self.assertEqual(state.ordered_timestamps, sorted(state.timed_lyrics))
        self.assertEqual(state.length, 4)
        self.assertEqual(state.timed_lyrics[30000], "Chorus")
        stamps = state.ordered_timestamps
        self.assertTrue(all(a < b for a, b in zip(stamps, stamps[1:])))

    def test_plain_lyrics_count_lines(self):
        state = LyricState()
        state.ingest("one\ntwo\nthree", is_synced=False)
        self.assertEqual(state.length, 3)
        self.assertIsNone(state.ordered_timestamps)
        self.assertEqual([style for _, style in state.styled_lines()], [None, None, None])

    def test_reingest_resets_offset(self):
        state = timed_state()
        state.offset = 5
        state.ingest("a\nb", is_synced=False)
        self.assertEqual(state.offset, 0)


class StyleTest(unittest.TestCase):
    def setUp(self):
        self.state = LyricState()
        self.state.ingest("[00:01.00]a\n[00:02.00]b\n[00:03.00]c", is_synced=True)

    def test_styles_mid_song(self):
        styles = [self.state.line_style(i, 2500) for i in range(3)]
        self.assertEqual(styles, [LineStyle.SUNG, LineStyle.ACTIVE, LineStyle.UPCOMING])

    def test_before_first_line(self):
        self.assertIsNone(self.state.active_line(500))
        self.assertEqual(self.state.line_style(0, 500), LineStyle.UPCOMING)

    def test_last_line_stays_active(self):
        self.assertEqual(self.state.line_style(2, 60000), LineStyle.ACTIVE)
        self.assertEqual(self.state.active_line(60000), 2)

    def test_active_line_is_monotonic(self):
        seen = [self.state.active_line(t) for t in range(0, 5000, 250)]
        indices = [-1 if i is None else i for i in seen]
        self.assertEqual(indices, sorted(indices))

    def test_time_does_not_move_offset(self):
        self.state.offset = 1
        self.state.update_time(2500)
        self.assertEqual(self.state.offset, 1)
        self.assertEqual(self.state.active_line(), 1)


class MouseTest(unittest.TestCase):
    def setUp(self):
        self.state = timed_state(height=20)

    def test_drag_moves_by_row_delta(self):
        self.state.handle_mouse(MouseEvent(MouseKind.DOWN, 5, 5))
        self.state.handle_mouse(MouseEvent(MouseKind.DRAG, 5, 8))
        self.assertEqual(self.state.offset, 3)
        self.state.handle_mouse(MouseEvent(MouseKind.DRAG, 5, 7))
        self.assertEqual(self.state.offset, 2)

    def test_drag_is_clamped(self):
        self.state.handle_mouse(MouseEvent(MouseKind.DOWN, 5, 5))
        self.state.handle_mouse(MouseEvent(MouseKind.DRAG, 5, 60))
        self.assertEqual(self.state.offset, self.state.length)
        self.state.handle_mouse(MouseEvent(MouseKind.DRAG, 5, 0))
        self.assertEqual(self.state.offset, 0)

    def test_release_ends_drag(self):
        self.state.handle_mouse(MouseEvent(MouseKind.DOWN, 5, 5))
        self.state.handle_mouse(MouseEvent(MouseKind.UP, 5, 5))
        self.state.handle_mouse(MouseEvent(MouseKind.DRAG, 5, 9))
        self.assertEqual(self.state.offset, 0)

    def test_press_outside_viewport_is_ignored(self):
        self.state.handle_mouse(MouseEvent(MouseKind.DOWN, 100, 5))
        self.state.handle_mouse(MouseEvent(MouseKind.DRAG, 100, 9))
        self.assertEqual(self.state.offset, 0)

    def test_wheel(self):
        self.state.handle_mouse(MouseEvent(MouseKind.SCROLL_DOWN, 1, 1))
        self.state.handle_mouse(MouseEvent(MouseKind.SCROLL_DOWN, 1, 1))
        self.state.handle_mouse(MouseEvent(MouseKind.SCROLL_UP, 1, 1))
        self.assertEqual(self.state.offset, 1)


class RecenterTest(unittest.TestCase):
    def test_active_line_goes_to_the_middle(self):
        state = timed_state(height=4)
        state.update_time(6500)
        state.recenter()
        self.assertEqual(state.offset, 4)

    def test_nothing_sung_yet(self):
        state = timed_state(height=4)
        state.offset = 3
        state.update_time(0)
        state.recenter()
        self.assertEqual(state.offset, 0)


if __name__ == "__main__":
    unittest.main()
