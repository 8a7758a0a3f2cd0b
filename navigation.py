"""Selection cursors and the per-view navigation state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from models import Album, Artist, Page, Playlist, Track

T = TypeVar("T")


class Tab(Enum):
    HOME = "home"
    SEARCH_RESULTS = "search"
    PLAYLIST_PAGE = "playlist"


class Pane(Enum):
    SIDEBAR = "sidebar"
    SONGS = "songs"
    ALBUMS = "albums"
    ARTISTS = "artists"
    PLAYLIST = "playlist"


@dataclass
class SelectionCursor:
    """Wrapping cursor over a list of ``length`` rows."""

    length: int = 0
    selected: int | None = None
    active: bool = False

    def next(self) -> None:
        if self.length == 0:
            return
        self.selected = 0 if self.selected is None else (self.selected + 1) % self.length

    def previous(self) -> None:
        if self.length == 0:
            return
        if self.selected is None:
            self.selected = self.length - 1
        else:
            self.selected = (self.selected - 1) % self.length

    def select(self, index: int | None) -> None:
        if index is None or self.length == 0:
            self.selected = None
        else:
            self.selected = min(max(0, index), self.length - 1)

    def reset(self, length: int) -> None:
        self.length = max(0, length)
        self.selected = 0 if self.length else None

    def set_active(self, active: bool) -> None:
        self.active = active


@dataclass
class SelectedPlaylist:
    playlist: Playlist
    tracks: Page[Track]
    cursor: SelectionCursor = field(default_factory=SelectionCursor)
    offset: int = 0
    offset_step: int = 1

    def __post_init__(self):
        if not self.cursor.length:
            self.cursor.reset(len(self.tracks.items))

    @property
    def total(self) -> int:
        return self.tracks.total or self.playlist.total_tracks

    def can_advance(self) -> bool:
        return self.offset + self.offset_step < self.total

    def can_retreat(self) -> bool:
        return self.offset > 0

    def replace_page(self, page: Page[Track], offset: int) -> None:
        self.tracks = page
        self.offset = offset
        self.cursor.reset(len(page.items))

    def selected_track(self) -> Track | None:
        if self.cursor.selected is None:
            return None
        return self.tracks.items[self.cursor.selected]


@dataclass
class PlaylistState:
    playlists: list[Playlist] = field(default_factory=list)
    cursor: SelectionCursor = field(default_factory=SelectionCursor)
    selected_playlist: SelectedPlaylist | None = None

    def __post_init__(self):
        if self.playlists and not self.cursor.length:
            self.cursor.length = len(self.playlists)

    def highlighted(self) -> Playlist | None:
        if self.cursor.selected is None:
            return None
        return self.playlists[self.cursor.selected]


@dataclass
class ResultItem(Generic[T]):
    items: list[T] = field(default_factory=list)
    cursor: SelectionCursor = field(default_factory=SelectionCursor)

    @classmethod
    def from_page(cls, page: Page[T]) -> "ResultItem[T]":
        item = cls(items=list(page.items))
        item.cursor.reset(len(item.items))
        return item

    def selected_item(self) -> T | None:
        if self.cursor.selected is None:
            return None
        return self.items[self.cursor.selected]


@dataclass
class ResultSet:
    tracks: ResultItem[Track] = field(default_factory=ResultItem)
    albums: ResultItem[Album] = field(default_factory=ResultItem)
    artists: ResultItem[Artist] = field(default_factory=ResultItem)

    def is_empty(self) -> bool:
        return not (self.tracks.items or self.albums.items or self.artists.items)


@dataclass
class SearchState:
    """The search input buffer; ``cursor`` counts characters, not bytes."""

    text: str = ""
    cursor: int = 0
    input_active: bool = False
    results: ResultSet | None = None

    def insert(self, char: str) -> None:
        self.text = self.text[: self.cursor] + char + self.text[self.cursor :]
        self.cursor += len(char)

    def backspace(self) -> None:
        if self.cursor == 0:
            return
        self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
        self.cursor -= 1

    def move_left(self) -> None:
        self.cursor = max(0, self.cursor - 1)

    def move_right(self) -> None:
        self.cursor = min(len(self.text), self.cursor + 1)

    def query(self) -> str:
        return self.text.strip()
