import io
import os
import sys
import unittest
from unittest.mock import MagicMock

from PIL import Image
from rich.console import Console

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from app_state import AppState
from image_utils import AsciiImage, TruePixelImage, WindowSize
from lyrics_sync import Rect
from models import Album, Artist, Device, Page, PlaybackContext, Playlist, Track
from navigation import Pane, PlaylistState, ResultItem, ResultSet, SelectedPlaylist, Tab
from ui import (
    Renderer,
    ascii_title,
    format_ms,
    render_half_blocks,
    render_progress_bar,
    render_volume,
    visible_window,
)


def track(n):
    return Track(
        id=f"t{n}",
        name=f"Track {n}",
        uri=f"spotify:track:t{n}",
        duration_ms=185000,
        artists=[Artist(id="ar", name="Band", uri="spotify:artist:ar")],
        album=Album(id="al", name="LP", uri="spotify:album:al"),
    )


class HelperTest(unittest.TestCase):
    def test_format_ms(self):
        self.assertEqual(format_ms(185000), "03:05")
        self.assertEqual(format_ms(-5), "00:00")

    def test_visible_window_follows_selection(self):
        self.assertEqual(visible_window(10, 7, 5), range(3, 8))
        self.assertEqual(visible_window(3, None, 5), range(0, 3))

    def test_volume_bar(self):
        self.assertEqual(render_volume(55).plain, "█ " * 5 + "▄")
        self.assertEqual(render_volume(0).plain, "")

    def test_progress_bar_width(self):
        bar = render_progress_bar(50, 100, 10, "red")
        self.assertEqual(bar.plain, "━" * 5 + "─" * 5)

    def test_ascii_title_folds_accents(self):
        self.assertEqual(ascii_title("Café"), "Cafe")
        self.assertEqual(ascii_title("東京"), "東京")

    def test_half_blocks(self):
        image = Image.new("RGB", (4, 4), (255, 0, 0))
        art = TruePixelImage(image=image, image_url="u", rendered_at=WindowSize(24, 80))
        self.assertEqual(render_half_blocks(art, 3, 2).plain, "▀▀▀\n▀▀▀")


class RendererTest(unittest.TestCase):
    def setUp(self):
        self.console = Console(file=io.StringIO(), width=120, height=40, force_terminal=True)
        self.live = MagicMock()
        self.renderer = Renderer(self.console, self.live)
        self.state = AppState(
            client=MagicMock(),
            device=Device(id="dev", name="Desk", volume_percent=40),
            playlists=PlaylistState(playlists=[Playlist(id="p", name="Chill", uri="u")]),
        )
        self.state.resize(120, 40)
        self.state.player.context = PlaybackContext(item=track(1), progress_ms=60000, is_playing=True)
        self.state.player.image = AsciiImage(ascii="#+\n=-\n", image_url="u", rendered_at=WindowSize(40, 120))

    def output(self):
        self.console.print(self.renderer.create_layout(self.state))
        return self.console.file.getvalue()

    def test_draw_updates_live(self):
        self.renderer.draw(self.state)
        self.live.update.assert_called_once()
        self.assertTrue(self.live.update.call_args.kwargs["refresh"])

    def test_home_records_lyric_viewport(self):
        self.state.lyrics.ingest("[00:01.00]First line\n[00:02.00]Second", is_synced=True)
        text = self.output()
        area = self.state.lyrics.area
        self.assertGreater(area.x, 0)
        self.assertEqual(area.y, 3)
        self.assertGreater(area.width, 0)
        self.assertIn("First line", text)
        self.assertIn("Chill", text)
        self.assertIn("Volume 40%", text)

    def test_search_results_view(self):
        results = ResultSet(tracks=ResultItem.from_page(Page(items=[track(2)])))
        self.state.search.results = results
        self.state.tab = Tab.SEARCH_RESULTS
        self.state.set_active_pane(Pane.SONGS)
        text = self.output()
        self.assertIn("Track 2", text)
        self.assertIn("[s] Songs", text)

    def test_leaving_home_clears_lyric_viewport(self):
        self.output()
        self.assertNotEqual(self.state.lyrics.area, Rect())
        self.state.search.results = ResultSet(tracks=ResultItem.from_page(Page(items=[track(2)])))
        self.state.tab = Tab.SEARCH_RESULTS
        self.output()
        self.assertEqual(self.state.lyrics.area, Rect())

    def test_playlist_view(self):
        self.state.playlists.selected_playlist = SelectedPlaylist(
            playlist=Playlist(id="p", name="Chill", uri="u", total_tracks=30),
            tracks=Page(items=[track(i) for i in range(3)], total=30),
            offset=20,
            offset_step=10,
        )
        self.state.tab = Tab.PLAYLIST_PAGE
        text = self.output()
        self.assertIn("21", text)
        self.assertIn("of 30", text)

    def test_nothing_playing(self):
        self.state.player.context = None
        self.assertIn("Nothing playing", self.output())


if __name__ == "__main__":
    unittest.main()
