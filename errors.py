"""Exceptions raised by the collaborators and the core."""


class OrpheusError(Exception):
    """Base exception for orpheus."""


class TransportError(OrpheusError):
    """Network, HTTP status or authentication failure."""


class FetchError(TransportError):
    """An image download failed."""


class DecodeError(OrpheusError):
    """A payload (image bytes, provider JSON) could not be decoded."""


class NotFoundError(OrpheusError):
    """The requested resource (lyrics, device) does not exist."""


class ParseError(OrpheusError):
    """A time-coded lyric line is malformed."""


class StartupError(OrpheusError):
    """Unrecoverable failure before the event loop starts."""
