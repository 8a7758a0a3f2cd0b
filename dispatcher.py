"""Key handling and the network-backed actions it triggers.

Every collaborator call runs synchronously on the loop thread. Failures are
logged, shown as a notification and leave the state untouched.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from app_state import AppState
from errors import NotFoundError, OrpheusError
from image_utils import ImageExtractor, TruePixelImage
from logger_utils import setup_logger
from lyrics_client import LyricsClient
from lyrics_sync import LyricState
from models import Track
from navigation import Pane, ResultItem, ResultSet, SelectedPlaylist, Tab
from terminal_io import KeyCode, KeyEvent, MouseEvent, ResizeEvent

logger = setup_logger(__name__)

FAILED = object()
VOLUME_STEP = 10
SEARCH_LIMIT = 20


@contextmanager
def log_if_slow(label: str, threshold_ms: float) -> Iterator[None]:
    """Log a warning when the wrapped block exceeds ``threshold_ms``."""

    start = time.monotonic()
    try:
        yield
    finally:
        elapsed_ms = (time.monotonic() - start) * 1000.0
        if elapsed_ms >= threshold_ms:
            logger.warning("SLOW: %s took %.1fms", label, elapsed_ms)


class Dispatcher:
    def __init__(
        self,
        state: AppState,
        lyrics_client: LyricsClient,
        extractor: ImageExtractor,
        slow_call_ms: float = 750.0,
    ):
        self.state = state
        self.lyrics_client = lyrics_client
        self.extractor = extractor
        self.slow_call_ms = slow_call_ms
        self.grayscale = False

    @property
    def client(self):
        return self.state.client

    def _request(self, label, method, *args, **kwargs):
        """Run one collaborator call; return ``FAILED`` after reporting an error."""
        with log_if_slow(label, self.slow_call_ms):
            try:
                return method(*args, **kwargs)
            except OrpheusError as e:
                logger.error("%s failed: %s", label, e)
                self.state.notify(f"❌ {label.capitalize()} failed", style="red")
                return FAILED

    # --- events -----------------------------------------------------------

    def handle_event(self, event) -> None:
        if isinstance(event, KeyEvent):
            self.handle_key(event)
        elif isinstance(event, ResizeEvent):
            if self.state.resize(event.width, event.height):
                self.reload_playlist_page()
            self.refresh_artwork()
        elif isinstance(event, MouseEvent):
            # lyrics are only on screen on the home tab
            if self.state.tab is Tab.HOME:
                self.state.lyrics.handle_mouse(event)

    def handle_key(self, key: KeyEvent) -> None:
        if self.state.search.input_active:
            self._handle_input(key)
            return

        if key.code is KeyCode.CHAR:
            self._handle_char(key.char)
        elif key.code is KeyCode.UP:
            cursor = self.state.active_cursor()
            if cursor:
                cursor.previous()
        elif key.code is KeyCode.DOWN:
            cursor = self.state.active_cursor()
            if cursor:
                cursor.next()
        elif key.code in (KeyCode.LEFT, KeyCode.RIGHT):
            if self.state.tab is Tab.PLAYLIST_PAGE:
                self.page_playlist(1 if key.code is KeyCode.RIGHT else -1)
        elif key.code is KeyCode.ENTER:
            pane = self.state.active_pane()
            if pane is not None:
                self.play_selected(pane)
        elif key.code is KeyCode.ESC:
            self.state.set_active_pane(None)

    def _handle_input(self, key: KeyEvent) -> None:
        search = self.state.search
        if key.code is KeyCode.CHAR:
            search.insert(key.char)
        elif key.code is KeyCode.BACKSPACE:
            search.backspace()
        elif key.code is KeyCode.LEFT:
            search.move_left()
        elif key.code is KeyCode.RIGHT:
            search.move_right()
        elif key.code is KeyCode.ENTER:
            self.commit_search()
        elif key.code is KeyCode.ESC:
            search.input_active = False

    def _handle_char(self, char: str) -> None:
        state = self.state
        if char == "q":
            state.should_quit = True
        elif char in ("e", "/"):
            state.search.input_active = True
            state.search.cursor = len(state.search.text)
        elif char == "1":
            state.toggle_pane(Pane.SIDEBAR)
        elif char in ("s", "a", "d"):
            if state.search.results is not None:
                pane = {"s": Pane.SONGS, "a": Pane.ALBUMS, "d": Pane.ARTISTS}[char]
                state.toggle_pane(pane)
                if state.active_pane() is pane:
                    state.tab = Tab.SEARCH_RESULTS
        elif char == "p":
            if state.playlists.selected_playlist is not None:
                state.toggle_pane(Pane.PLAYLIST)
                if state.active_pane() is Pane.PLAYLIST:
                    state.tab = Tab.PLAYLIST_PAGE
        elif char == " ":
            self.toggle_playback()
        elif char == "+":
            self.change_volume(VOLUME_STEP)
        elif char == "-":
            self.change_volume(-VOLUME_STEP)
        elif char == ">":
            self.skip(forward=True)
        elif char == "<":
            self.skip(forward=False)
        elif char == "i":
            kind = self.extractor.toggle_kind()
            state.notify(f"🖼 Artwork: {kind.value}", style="cyan")
            self.refresh_artwork()
        elif char == "g":
            self.toggle_grayscale()
        elif char == "c":
            state.lyrics.recenter()

    # --- search -----------------------------------------------------------

    def commit_search(self) -> None:
        search = self.state.search
        search.input_active = False
        query = search.query()
        if not query:
            return

        pages = {}
        for search_type in ("track", "album", "artist"):
            page = self._request(
                f"searching {search_type}s", self.client.search, query, search_type, SEARCH_LIMIT
            )
            if page is FAILED:
                return
            pages[search_type] = page

        search.results = ResultSet(
            tracks=ResultItem.from_page(pages["track"]),
            albums=ResultItem.from_page(pages["album"]),
            artists=ResultItem.from_page(pages["artist"]),
        )
        self.state.tab = Tab.SEARCH_RESULTS
        self.state.set_active_pane(Pane.SONGS)
        logger.info(
            "Search %r: %d tracks, %d albums, %d artists",
            query,
            len(pages["track"].items),
            len(pages["album"].items),
            len(pages["artist"].items),
        )

    # --- playlists --------------------------------------------------------

    def open_playlist(self) -> None:
        summary = self.state.playlists.highlighted()
        if summary is None:
            return
        full = self._request("fetching playlist", self.client.playlist, summary.id)
        if full is FAILED:
            return
        step = self.state.offset_step
        page = self._request("fetching playlist tracks", self.client.playlist_tracks, summary.id, 0, step)
        if page is FAILED:
            return

        self.state.playlists.selected_playlist = SelectedPlaylist(
            playlist=full.playlist, tracks=page, offset=0, offset_step=step
        )
        self.state.tab = Tab.PLAYLIST_PAGE
        self.state.set_active_pane(Pane.PLAYLIST)

    def page_playlist(self, direction: int) -> None:
        selected = self.state.playlists.selected_playlist
        if selected is None:
            return
        if direction > 0 and not selected.can_advance():
            return
        if direction < 0 and not selected.can_retreat():
            return

        step = selected.offset_step
        offset = max(0, selected.offset + direction * step)
        page = self._request(
            "fetching playlist tracks", self.client.playlist_tracks, selected.playlist.id, offset, step
        )
        if page is FAILED:
            return
        selected.replace_page(page, offset)

    def reload_playlist_page(self) -> None:
        """Re-request the open page at the nearest multiple of the current step."""
        selected = self.state.playlists.selected_playlist
        if selected is None:
            return
        step = selected.offset_step
        offset = selected.offset // step * step
        page = self._request(
            "fetching playlist tracks", self.client.playlist_tracks, selected.playlist.id, offset, step
        )
        if page is FAILED:
            return
        selected.replace_page(page, offset)

    # --- playback ---------------------------------------------------------

    def play_selected(self, pane: Pane) -> None:
        state = self.state
        device_id = state.device.id
        if pane is Pane.SIDEBAR:
            self.open_playlist()
            return

        if pane is Pane.PLAYLIST:
            selected = state.playlists.selected_playlist
            if selected is None or selected.cursor.selected is None:
                return
            kwargs = {
                "context_uri": selected.playlist.uri,
                "offset": selected.offset + selected.cursor.selected,
            }
        else:
            results = state.search.results
            if results is None:
                return
            item = {
                Pane.SONGS: results.tracks,
                Pane.ALBUMS: results.albums,
                Pane.ARTISTS: results.artists,
            }[pane].selected_item()
            if item is None:
                return
            if pane is Pane.SONGS:
                kwargs = {"uris": [item.uri]}
            else:
                kwargs = {"context_uri": item.uri}

        if self._request("starting playback", self.client.start_playback, device_id, **kwargs) is FAILED:
            return
        self.refresh_playback()

    def toggle_playback(self) -> None:
        ctx = self.state.player.context
        device_id = self.state.device.id
        if ctx and ctx.is_playing:
            if self._request("pausing playback", self.client.pause_playback, device_id) is FAILED:
                return
            ctx.is_playing = False
            self.state.notify("⏸ Paused playback", style="yellow")
        else:
            if self._request("resuming playback", self.client.resume_playback, device_id) is FAILED:
                return
            if ctx:
                ctx.is_playing = True
            self.state.notify("▶️ Resumed playback", style="yellow")

    def skip(self, forward: bool) -> None:
        device_id = self.state.device.id
        if forward:
            result = self._request("skipping to next track", self.client.next_track, device_id)
        else:
            result = self._request("going to previous track", self.client.previous_track, device_id)
        if result is not FAILED:
            self.refresh_playback()

    def change_volume(self, delta: int) -> None:
        device = self.state.device
        target = min(100, max(0, device.volume_percent + delta))
        volume = self._request("setting volume", self.client.set_volume, device.id, target)
        if volume is FAILED:
            return
        device.volume_percent = volume

    # --- polling ----------------------------------------------------------

    def refresh_playback(self) -> None:
        ctx = self._request("fetching playback", self.client.current_playback)
        if ctx is FAILED:
            return

        player = self.state.player
        previous_id = player.track_id
        player.context = ctx
        if ctx is None:
            return

        if ctx.device and ctx.device.id == self.state.device.id:
            self.state.device.volume_percent = ctx.device.volume_percent
        self.state.lyrics.update_time(ctx.progress_ms)

        if player.track_id != previous_id:
            if ctx.item:
                self.state.notify(f"🔄 Track changed: {ctx.item.name} by {ctx.item.artist_name}", style="cyan")
            self.load_lyrics(ctx.item)
            self.refresh_artwork()

    def load_lyrics(self, track: Track | None) -> None:
        area = self.state.lyrics.area
        if track is None or not track.name:
            self.state.lyrics = LyricState(area=area)
            return

        album = track.album.name if track.album else ""
        try:
            with log_if_slow("fetching lyrics", self.slow_call_ms):
                text, is_synced = self.lyrics_client.lyrics(
                    track.artist_name, track.name, album, track.duration_ms
                )
        except NotFoundError as e:
            logger.info("%s", e)
            self.state.lyrics = LyricState.not_found()
            self.state.lyrics.area = area
            return
        except OrpheusError as e:
            logger.error("fetching lyrics failed: %s", e)
            self.state.notify("❌ Fetching lyrics failed", style="red")
            self.state.lyrics = LyricState.not_found()
            self.state.lyrics.area = area
            return

        lyrics = LyricState(area=area)
        lyrics.ingest(text, is_synced)
        ctx = self.state.player.context
        if ctx:
            lyrics.update_time(ctx.progress_ms)
        self.state.lyrics = lyrics

    def refresh_artwork(self) -> None:
        ctx = self.state.player.context
        url = ctx.item.image_url if ctx and ctx.item else None
        if not url:
            self.state.player.image = None
            return
        window = self.state.window
        if self.extractor.is_current(url, window) and self.state.player.image is not None:
            return

        result = self._request("loading artwork", self.extractor.extract, url, window)
        if result is FAILED:
            return
        colour, image = result
        if isinstance(image, TruePixelImage):
            image.grayscale = self.grayscale
        self.state.colour = colour
        self.state.player.image = image

    def toggle_grayscale(self) -> None:
        self.grayscale = not self.grayscale
        image = self.state.player.image
        if isinstance(image, TruePixelImage):
            image.grayscale = self.grayscale
