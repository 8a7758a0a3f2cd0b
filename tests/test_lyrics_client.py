import unittest
import os
import sys
from unittest.mock import MagicMock

import requests

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from errors import DecodeError, NotFoundError, TransportError
from lyrics_client import LyricsClient, clean_title


def response(status=200, payload=None, json_error=None):
    resp = MagicMock()
    resp.status_code = status
    resp.url = "https://lrclib.net/api/get"
    if json_error:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


class LyricsClientTest(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.client = LyricsClient(session=self.session, timeout=3)

    def test_prefers_synced_lyrics(self):
        self.session.get.return_value = response(
            payload={"syncedLyrics": "[00:01.00]hi", "plainLyrics": "hi"}
        )
        text, synced = self.client.lyrics("Band", "Song - 2011 Remaster", "LP", 215400)
        self.assertEqual((text, synced), ("[00:01.00]hi", True))
        _, kwargs = self.session.get.call_args
        self.assertEqual(
            kwargs["params"],
            {"artist_name": "Band", "track_name": "Song", "album_name": "LP", "duration": 215},
        )
        self.assertEqual(kwargs["timeout"], 3)

    def test_plain_lyrics_fallback(self):
        self.session.get.return_value = response(payload={"syncedLyrics": None, "plainLyrics": "la la"})
        self.assertEqual(self.client.lyrics("Band", "Song"), ("la la", False))

    def test_unknown_duration_is_omitted(self):
        self.session.get.return_value = response(payload={"plainLyrics": "x"})
        self.client.lyrics("Band", "Song", duration_ms=500)
        _, kwargs = self.session.get.call_args
        self.assertNotIn("duration", kwargs["params"])
        self.assertNotIn("album_name", kwargs["params"])

    def test_not_found(self):
        self.session.get.return_value = response(status=404)
        with self.assertRaises(NotFoundError):
            self.client.lyrics("Band", "Song")

    def test_empty_payload_is_not_found(self):
        self.session.get.return_value = response(payload={"syncedLyrics": "", "plainLyrics": "  "})
        with self.assertRaises(NotFoundError):
            self.client.lyrics("Band", "Song")

    def test_server_error(self):
        self.session.get.return_value = response(status=503)
        with self.assertRaises(TransportError):
            self.client.lyrics("Band", "Song")

    def test_connection_error(self):
        self.session.get.side_effect = requests.ConnectionError("offline")
        with self.assertRaises(TransportError):
            self.client.lyrics("Band", "Song")

    def test_malformed_json(self):
        self.session.get.return_value = response(json_error=ValueError("bad json"))
        with self.assertRaises(DecodeError):
            self.client.lyrics("Band", "Song")

    def test_genius_fallback(self):
        client = LyricsClient(session=self.session, genius_token="token")
        client._genius = MagicMock()
        client._genius.search_song.return_value = MagicMock(lyrics="verse")
        self.session.get.return_value = response(status=404)
        self.assertEqual(client.lyrics("Band", "Song - Live"), ("verse", False))
        client._genius.search_song.assert_called_with("Song", "Band")

    def test_clean_title(self):
        self.assertEqual(clean_title("Song - Remastered"), "Song")
        self.assertEqual(clean_title("Hyphen-ated"), "Hyphen-ated")


if __name__ == "__main__":
    unittest.main()
