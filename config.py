"""Runtime configuration loaded from the environment and ``.env``."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from errors import StartupError

DEFAULT_REDIRECT_URI = "http://localhost:8888/callback"
IMAGE_KINDS = ("ascii", "pixel")


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class Config:
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = DEFAULT_REDIRECT_URI
    # seconds between two render ticks
    tick_rate: float = 0.25
    # seconds between two playback polls
    poll_interval: float = 5.0
    image_kind: str = "ascii"
    mouse: bool = True
    request_timeout: float = 5.0
    slow_call_ms: float = 750.0
    genius_token: str | None = None

    @classmethod
    def from_env(cls, env_path: str | None = None) -> "Config":
        """Read ``SPOTIPY_*``, ``ORPHEUS_*`` and ``GENIUS_API_TOKEN``."""

        load_dotenv(env_path)
        image_kind = os.getenv("ORPHEUS_IMAGE_KIND", "ascii").strip().lower()
        if image_kind not in IMAGE_KINDS:
            image_kind = "ascii"
        return cls(
            client_id=os.getenv("SPOTIPY_CLIENT_ID", ""),
            client_secret=os.getenv("SPOTIPY_CLIENT_SECRET", ""),
            redirect_uri=os.getenv("SPOTIPY_REDIRECT_URI", DEFAULT_REDIRECT_URI),
            tick_rate=_env_float("ORPHEUS_TICK_RATE", 0.25),
            poll_interval=_env_float("ORPHEUS_POLL_INTERVAL", 5.0),
            image_kind=image_kind,
            mouse=_env_bool("ORPHEUS_MOUSE", default=True),
            request_timeout=_env_float("ORPHEUS_REQUEST_TIMEOUT", 5.0),
            slow_call_ms=_env_float("ORPHEUS_SLOW_CALL_MS", 750.0),
            genius_token=os.getenv("GENIUS_API_TOKEN") or None,
        )

    def validate(self) -> None:
        if not self.client_id or not self.client_secret:
            raise StartupError(
                "SPOTIPY_CLIENT_ID and SPOTIPY_CLIENT_SECRET must be set in .env"
            )
        if self.tick_rate <= 0:
            raise StartupError(f"Tick rate must be positive, got {self.tick_rate}")
        if self.poll_interval <= 0:
            raise StartupError(
                f"Poll interval must be positive, got {self.poll_interval}"
            )
