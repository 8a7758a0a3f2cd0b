"""The single mutable state tree shared by the loop, dispatcher and renderer."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from image_utils import DEFAULT_ACCENT, PlayerImage, Rgb, WindowSize
from lyrics_sync import LyricState
from models import Device, PlaybackContext
from navigation import Pane, PlaylistState, SearchState, SelectionCursor, Tab

# rows taken by the header, table borders and column titles
PLAYLIST_CHROME_ROWS = 8
MAX_NOTIFICATIONS = 3


@dataclass
class PlayerState:
    context: PlaybackContext | None = None
    image: PlayerImage | None = None

    @property
    def track_id(self) -> str | None:
        if self.context and self.context.item:
            return self.context.item.id or self.context.item.uri
        return None

    def tick_progress(self, elapsed_ms: int) -> None:
        """Advance local progress between polls, never past the duration."""
        ctx = self.context
        if not ctx or not ctx.is_playing or not ctx.item:
            return
        ctx.progress_ms = min(ctx.progress_ms + int(elapsed_ms), ctx.duration_ms)


@dataclass
class Notification:
    message: str
    style: str = "yellow"


@dataclass
class AppState:
    client: object
    device: Device
    playlists: PlaylistState = field(default_factory=PlaylistState)
    search: SearchState = field(default_factory=SearchState)
    player: PlayerState = field(default_factory=PlayerState)
    lyrics: LyricState = field(default_factory=LyricState)
    window: WindowSize = WindowSize(24, 80)
    tab: Tab = Tab.HOME
    colour: Rgb = DEFAULT_ACCENT
    notifications: deque = field(default_factory=lambda: deque(maxlen=MAX_NOTIFICATIONS))
    should_quit: bool = False

    def __post_init__(self):
        self.playlists.cursor.set_active(True)

    @property
    def offset_step(self) -> int:
        return max(1, self.window.height - PLAYLIST_CHROME_ROWS)

    def cursor_for(self, pane: Pane) -> SelectionCursor | None:
        if pane is Pane.SIDEBAR:
            return self.playlists.cursor
        if pane is Pane.PLAYLIST:
            selected = self.playlists.selected_playlist
            return selected.cursor if selected else None
        results = self.search.results
        if results is None:
            return None
        return {
            Pane.SONGS: results.tracks.cursor,
            Pane.ALBUMS: results.albums.cursor,
            Pane.ARTISTS: results.artists.cursor,
        }[pane]

    def active_pane(self) -> Pane | None:
        for pane in Pane:
            cursor = self.cursor_for(pane)
            if cursor is not None and cursor.active:
                return pane
        return None

    def active_cursor(self) -> SelectionCursor | None:
        pane = self.active_pane()
        return self.cursor_for(pane) if pane else None

    def set_active_pane(self, pane: Pane | None) -> None:
        """Activate ``pane`` and deactivate every other cursor."""
        for other in Pane:
            cursor = self.cursor_for(other)
            if cursor is not None:
                cursor.set_active(other is pane)

    def toggle_pane(self, pane: Pane) -> None:
        if self.active_pane() is pane:
            self.set_active_pane(None)
        else:
            self.set_active_pane(pane)

    def resize(self, width: int, height: int) -> bool:
        """Record the new size; return True when the open playlist page size changed."""
        self.window = WindowSize(height=height, width=width)
        selected = self.playlists.selected_playlist
        if selected is None or selected.offset_step == self.offset_step:
            return False
        selected.offset_step = self.offset_step
        return True

    def notify(self, message: str, style: str = "yellow") -> None:
        self.notifications.append(Notification(message, style))
