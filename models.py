"""Typed views over the Spotify Web API payloads returned by spotipy."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


def _first_image(images: list[dict] | None) -> str | None:
    if not images:
        return None
    return images[0].get("url")


@dataclass
class Artist:
    id: str
    name: str
    uri: str

    @classmethod
    def from_api(cls, data: dict) -> "Artist":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "Unknown",
            uri=data.get("uri") or "",
        )


@dataclass
class Album:
    id: str
    name: str
    uri: str
    artists: list[Artist] = field(default_factory=list)
    image_url: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Album":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            uri=data.get("uri") or "",
            artists=[Artist.from_api(a) for a in data.get("artists") or []],
            image_url=_first_image(data.get("images")),
        )

    @property
    def artist_names(self) -> str:
        return ", ".join(artist.name for artist in self.artists[:3])


@dataclass
class Track:
    """A playable item: a track, or an episode mapped onto the same shape."""

    id: str
    name: str
    uri: str
    duration_ms: int
    artists: list[Artist] = field(default_factory=list)
    album: Album | None = None
    is_episode: bool = False

    @classmethod
    def from_api(cls, data: dict) -> "Track":
        if data.get("type") == "episode":
            show = data.get("show") or {}
            publisher = Artist(
                id=show.get("id") or "",
                name=show.get("publisher") or show.get("name") or "Unknown",
                uri=show.get("uri") or "",
            )
            album = Album(
                id=show.get("id") or "",
                name=show.get("name") or "",
                uri=show.get("uri") or "",
                artists=[publisher],
                image_url=_first_image(data.get("images") or show.get("images")),
            )
            return cls(
                id=data.get("id") or "",
                name=data.get("name") or "Unknown",
                uri=data.get("uri") or "",
                duration_ms=int(data.get("duration_ms") or 0),
                artists=[publisher],
                album=album,
                is_episode=True,
            )

        album = data.get("album")
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "Unknown",
            uri=data.get("uri") or "",
            duration_ms=int(data.get("duration_ms") or 0),
            artists=[Artist.from_api(a) for a in data.get("artists") or []],
            album=Album.from_api(album) if album else None,
        )

    @classmethod
    def unavailable(cls) -> "Track":
        """Placeholder for playlist rows whose track was removed or is local."""
        return cls(id="", name="(unavailable)", uri="", duration_ms=0)

    @property
    def artist_name(self) -> str:
        return self.artists[0].name if self.artists else "Unknown"

    @property
    def artist_names(self) -> str:
        return ", ".join(artist.name for artist in self.artists[:3])

    @property
    def image_url(self) -> str | None:
        return self.album.image_url if self.album else None


@dataclass
class Device:
    id: str
    name: str
    volume_percent: int = 0
    is_active: bool = False

    @classmethod
    def from_api(cls, data: dict) -> "Device":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "Unknown device",
            volume_percent=int(data.get("volume_percent") or 0),
            is_active=bool(data.get("is_active")),
        )


@dataclass
class PlaybackContext:
    item: Track | None
    progress_ms: int = 0
    is_playing: bool = False
    device: Device | None = None
    context_uri: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "PlaybackContext":
        item = data.get("item")
        device = data.get("device")
        context = data.get("context") or {}
        return cls(
            item=Track.from_api(item) if item else None,
            progress_ms=int(data.get("progress_ms") or 0),
            is_playing=bool(data.get("is_playing")),
            device=Device.from_api(device) if device else None,
            context_uri=context.get("uri"),
        )

    @property
    def duration_ms(self) -> int:
        return self.item.duration_ms if self.item else 0


@dataclass
class Playlist:
    id: str
    name: str
    uri: str
    owner: str = ""
    total_tracks: int = 0

    @classmethod
    def from_api(cls, data: dict) -> "Playlist":
        owner = data.get("owner") or {}
        tracks = data.get("tracks") or data.get("items") or {}
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            uri=data.get("uri") or "",
            owner=owner.get("display_name") or owner.get("id") or "",
            total_tracks=int(tracks.get("total") or 0),
        )


@dataclass
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    total: int = 0
    offset: int = 0
    limit: int = 0

    @classmethod
    def from_api(cls, data: dict, parse: Callable[[dict], Any]) -> "Page":
        items = [parse(item) for item in data.get("items") or [] if item is not None]
        return cls(
            items=items,
            total=int(data.get("total") or len(items)),
            offset=int(data.get("offset") or 0),
            limit=int(data.get("limit") or len(items)),
        )


def playlist_item_to_track(data: dict) -> Track:
    """Unwrap a playlist row, keeping a placeholder for removed tracks."""
    track = data.get("track") or data.get("item")
    if not track:
        return Track.unavailable()
    return Track.from_api(track)


@dataclass
class FullPlaylist:
    playlist: Playlist
    tracks: Page[Track]

    @classmethod
    def from_api(cls, data: dict) -> "FullPlaylist":
        tracks = data.get("tracks") or data.get("items") or {}
        return cls(
            playlist=Playlist.from_api(data),
            tracks=Page.from_api(tracks, playlist_item_to_track),
        )
