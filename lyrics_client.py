"""Fetch lyrics from LRCLIB, falling back to Genius for plain text."""

import json

import lyricsgenius
import requests

from errors import DecodeError, NotFoundError, TransportError
from logger_utils import setup_logger

logger = setup_logger(__name__)


def clean_title(title: str) -> str:
    """Drop " - Remastered 2011" style suffixes that LRCLIB never matches."""
    return title.split(" - ")[0].strip() or title


class LyricsClient:
    API_URL = "https://lrclib.net/api/get"
    USER_AGENT = "orpheus/0.1.0"

    def __init__(self, session=None, timeout=5.0, genius_token=None):
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.USER_AGENT})
        self.timeout = timeout
        self.genius_token = genius_token
        self._genius = None
        self.logger = logger

    def lyrics(self, artist, title, album="", duration_ms=0):
        """Return ``(text, is_synced)`` or raise :class:`NotFoundError`."""
        try:
            return self.fetch_lrclib(artist, title, album, duration_ms)
        except NotFoundError:
            if not self.genius_token:
                raise
            self.logger.info("LRCLIB has no lyrics for %s - %s, asking Genius", artist, title)
            return self.fetch_genius(artist, title), False

    def fetch_lrclib(self, artist, title, album="", duration_ms=0):
        params = {"artist_name": artist, "track_name": clean_title(title)}
        if album:
            params["album_name"] = album
        # LRCLIB matches on whole seconds and ignores sub-second tracks
        if duration_ms >= 1000:
            params["duration"] = max(1, min(duration_ms // 1000, 3600))
        self.logger.debug("Requesting LRC: %s with %s", self.API_URL, params)

        try:
            resp = self.session.get(self.API_URL, params=params, timeout=self.timeout)
        except requests.RequestException as err:
            self.logger.error("LRC fetch error: %s", err)
            raise TransportError(f"lyrics request failed: {err}") from err

        self.logger.debug("HTTP %s %s", resp.status_code, resp.url)
        if resp.status_code == 404:
            raise NotFoundError(f"No lyrics for '{title}' by '{artist}'")
        try:
            resp.raise_for_status()
        except requests.HTTPError as err:
            raise TransportError(f"lyrics request failed: {err}") from err

        try:
            data = resp.json()
        except (json.JSONDecodeError, ValueError) as err:
            raise DecodeError(f"LRCLIB returned malformed JSON: {err}") from err

        synced = (data or {}).get("syncedLyrics")
        if synced and synced.strip():
            return synced, True
        plain = (data or {}).get("plainLyrics")
        if plain and plain.strip():
            return plain, False
        raise NotFoundError(f"No lyrics for '{title}' by '{artist}'")

    def fetch_genius(self, artist, title):
        """
        Fetch raw (unsynced) lyrics from Genius as a fallback.
        """
        if self._genius is None:
            self._genius = lyricsgenius.Genius(
                self.genius_token,
                skip_non_songs=True,
                excluded_terms=["(Remix)", "(Live)"],
                timeout=int(self.timeout) or 10,
                verbose=False,
            )
        try:
            song = self._genius.search_song(clean_title(title), artist)
        except requests.RequestException as err:
            self.logger.error("Genius error: %s", err)
            raise TransportError(f"Genius request failed: {err}") from err
        if song and song.lyrics:
            return song.lyrics
        raise NotFoundError(f"Genius has no lyrics for '{title}' by '{artist}'")
