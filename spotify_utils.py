# spotify_utils.py
import requests
import spotipy
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from errors import TransportError
from logger_utils import setup_logger
from models import (
    Album,
    Artist,
    Device,
    FullPlaylist,
    Page,
    PlaybackContext,
    Playlist,
    Track,
    playlist_item_to_track,
)

SCOPES = (
    "user-read-playback-state "
    "user-modify-playback-state "
    "user-read-currently-playing "
    "user-read-private "
    "playlist-read-private "
    "playlist-read-collaborative "
    "user-library-read"
)

SEARCH_PARSERS = {
    "track": Track.from_api,
    "album": Album.from_api,
    "artist": Artist.from_api,
}

# Spotify rejects larger pages on the playlist items endpoint
MAX_PAGE_LIMIT = 100


class SpotifyController:
    def __init__(self, config):
        self.sp = spotipy.Spotify(
            auth_manager=SpotifyOAuth(
                scope=SCOPES,
                client_id=config.client_id,
                client_secret=config.client_secret,
                redirect_uri=config.redirect_uri,
            ),
            requests_timeout=config.request_timeout,
        )
        self.logger = setup_logger(self.__class__.__name__)

    def _call(self, label, method, *args, **kwargs):
        try:
            return method(*args, **kwargs)
        except spotipy.SpotifyException as e:
            self.logger.error("Error %s: %s", label, e)
            raise TransportError(f"{label} failed: {e.msg or e.http_status}") from e
        except (SpotifyOauthError, requests.RequestException) as e:
            self.logger.error("Error %s: %s", label, e)
            raise TransportError(f"{label} failed: {e}") from e

    def current_user_playlists(self, limit=50):
        result = self._call(
            "fetching playlists", self.sp.current_user_playlists, limit=limit
        )
        return Page.from_api(result or {}, Playlist.from_api)

    def current_playback(self):
        current = self._call(
            "fetching playback",
            self.sp.current_playback,
            additional_types="track,episode",
        )
        if not current:
            return None
        return PlaybackContext.from_api(current)

    def search(self, query, search_type, limit=20):
        result = self._call(
            f"searching {search_type}s",
            self.sp.search,
            q=query,
            limit=limit,
            offset=0,
            type=search_type,
        )
        section = (result or {}).get(f"{search_type}s", {})
        return Page.from_api(section, SEARCH_PARSERS[search_type])

    def playlist(self, playlist_id):
        result = self._call(
            "fetching playlist",
            self.sp.playlist,
            playlist_id,
            additional_types=("track", "episode"),
        )
        return FullPlaylist.from_api(result or {})

    def playlist_tracks(self, playlist_id, offset, limit):
        limit = max(1, min(limit, MAX_PAGE_LIMIT))
        result = self._call(
            "fetching playlist tracks",
            self.sp.playlist_items,
            playlist_id,
            limit=limit,
            offset=offset,
            additional_types=("track", "episode"),
        )
        return Page.from_api(result or {}, playlist_item_to_track)

    def start_playback(self, device_id, context_uri=None, uris=None, offset=None):
        """Play ``uris`` or ``context_uri``; ``offset`` is a position in the context."""
        position = {"position": offset} if offset is not None else None
        self._call(
            "starting playback",
            self.sp.start_playback,
            device_id=device_id,
            context_uri=context_uri,
            uris=uris,
            offset=position,
        )
        self.logger.info("Playback started (context=%s uris=%s offset=%s)", context_uri, uris, offset)

    def pause_playback(self, device_id):
        self._call("pausing playback", self.sp.pause_playback, device_id=device_id)

    def resume_playback(self, device_id):
        self._call("resuming playback", self.sp.start_playback, device_id=device_id)

    def next_track(self, device_id):
        self._call("skipping to next track", self.sp.next_track, device_id=device_id)

    def previous_track(self, device_id):
        self._call(
            "going to previous track", self.sp.previous_track, device_id=device_id
        )

    def set_volume(self, device_id, vol_percent):
        vol_percent = min(100, max(0, int(vol_percent)))
        self._call(
            "setting volume", self.sp.volume, vol_percent, device_id=device_id
        )
        self.logger.info("Volume set to %d%%", vol_percent)
        return vol_percent

    def list_devices(self):
        result = self._call("listing devices", self.sp.devices)
        return [Device.from_api(d) for d in (result or {}).get("devices", [])]
