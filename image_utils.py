"""Cover-art download, accent colour extraction and thumbnail rendering."""

from __future__ import annotations

import hashlib
import io
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, NamedTuple, Union

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from errors import DecodeError, FetchError
from glyphs import brightness_to_ascii
from logger_utils import setup_logger

logger = setup_logger(__name__)

SAMPLE_STEP = 10
NEAR_BLACK = 0.15
NEAR_WHITE = 0.6
BRIGHTNESS_WEIGHT = 0.2
NEAR_WHITE_PENALTY = 0.3
PENALTY_BRIGHTNESS = 0.85


class Rgb(NamedTuple):
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


DEFAULT_ACCENT = Rgb(135, 75, 252)


class ImageKind(Enum):
    ASCII = "ascii"
    PIXEL = "pixel"


class WindowSize(NamedTuple):
    height: int
    width: int


@dataclass
class AsciiImage:
    ascii: str
    image_url: str
    rendered_at: WindowSize


@dataclass
class TruePixelImage:
    """Decoded artwork drawn as true-colour half blocks, two pixels per cell."""

    image: Image.Image = field(repr=False)
    image_url: str
    rendered_at: WindowSize
    grayscale: bool = False

    def pixels(self) -> Image.Image:
        if self.grayscale:
            return self.image.convert("L").convert("RGB")
        return self.image


PlayerImage = Union[AsciiImage, TruePixelImage]


def thumbnail_bounds(window: WindowSize) -> tuple[int, int]:
    """Return ``(width, height)`` in cells available to the cover art."""
    return window.width // 4, max(0, window.height - 7) // 2


def fetch_image_bytes(url: str, timeout: float = 5.0) -> bytes:
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as err:
        raise FetchError(f"Could not download {url}: {err}") from err
    return resp.content


def decode_image(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as err:
        raise DecodeError(f"Malformed image data: {err}") from err
    return image.convert("RGB")


def _brightness(colours: np.ndarray) -> np.ndarray:
    return colours.sum(axis=-1) / (3.0 * 255.0)


def _saturation(colours: np.ndarray) -> np.ndarray:
    high = colours.max(axis=-1) / 255.0
    low = colours.min(axis=-1) / 255.0
    return np.where(high > 0, (high - low) / np.where(high > 0, high, 1.0), 0.0)


def accent_colour(image: Image.Image, step: int = SAMPLE_STEP) -> Rgb:
    """Pick the most representative saturated colour of ``image``.

    Every ``step``-th pixel is sampled in both axes.  Near-black and near-white
    samples are dropped; each remaining distinct colour is scored by
    ``density * saturation + brightness * 0.2`` where density is the inverse of
    its summed distance to the other colours, so colours that sit inside a
    coherent cluster win over isolated outliers.
    """
    pixels = np.asarray(image.convert("RGB"), dtype=np.float64)
    samples = pixels[::step, ::step].reshape(-1, 3)
    if not len(samples):
        return DEFAULT_ACCENT

    brightness = _brightness(samples)
    kept = samples[(brightness >= NEAR_BLACK) & (brightness <= NEAR_WHITE)]
    if not len(kept):
        return DEFAULT_ACCENT

    colours = np.unique(kept, axis=0)
    density = np.empty(len(colours))
    for i, colour in enumerate(colours):
        distances = np.sqrt(((colours - colour) ** 2).sum(axis=1))
        density[i] = 1.0 / (distances.sum() + 1.0)

    brightness = _brightness(colours)
    scores = density * _saturation(colours) + brightness * BRIGHTNESS_WEIGHT
    scores = np.where(brightness > PENALTY_BRIGHTNESS, scores - NEAR_WHITE_PENALTY, scores)

    best = int(np.argmax(scores))
    if scores[best] <= 0:
        return DEFAULT_ACCENT
    r, g, b = (int(c) for c in colours[best])
    return Rgb(r, g, b)


def image_to_ascii(image: Image.Image, width: int, height: int) -> str:
    if width <= 0 or height <= 0:
        return ""
    small = image.resize((width, height), resample=Image.Resampling.NEAREST).convert("L")
    rows = []
    for y in range(height):
        rows.append(
            "".join(brightness_to_ascii(small.getpixel((x, y)) / 255.0) for x in range(width))
        )
    return "\n".join(rows) + "\n"


class ImageExtractor:
    """Turns a cover URL into ``(accent, image)``, skipping repeated work.

    The last result is reused while ``(url, height, width, kind)`` is
    unchanged, so polling the same track never downloads the art twice.
    """

    def __init__(
        self,
        kind: ImageKind = ImageKind.ASCII,
        fetch: Callable[[str], bytes] | None = None,
        timeout: float = 5.0,
    ):
        self.kind = kind
        self._fetch = fetch or (lambda url: fetch_image_bytes(url, timeout=timeout))
        self._last_key: tuple | None = None
        self._last_result: tuple[Rgb, PlayerImage] | None = None
        self._colours: dict[str, tuple[str, Rgb]] = {}

    def is_current(self, url: str, window: WindowSize) -> bool:
        return self._last_key == (url, window.height, window.width, self.kind)

    def extract(self, url: str, window: WindowSize) -> tuple[Rgb, PlayerImage]:
        key = (url, window.height, window.width, self.kind)
        if key == self._last_key and self._last_result is not None:
            return self._last_result

        data = self._fetch(url)
        image = decode_image(data)
        colour = self._accent_for(url, data, image)

        if self.kind is ImageKind.PIXEL:
            rendered: PlayerImage = TruePixelImage(image=image, image_url=url, rendered_at=window)
        else:
            width, height = thumbnail_bounds(window)
            rendered = AsciiImage(
                ascii=image_to_ascii(image, width, height),
                image_url=url,
                rendered_at=window,
            )

        self._last_key = key
        self._last_result = (colour, rendered)
        logger.debug("Rendered %s art for %s at %sx%s", self.kind.value, url, window.width, window.height)
        return self._last_result

    def _accent_for(self, url: str, data: bytes, image: Image.Image) -> Rgb:
        digest = hashlib.sha256(data).hexdigest()
        cached = self._colours.get(url)
        if cached and cached[0] == digest:
            return cached[1]
        colour = accent_colour(image)
        self._colours[url] = (digest, colour)
        return colour

    def toggle_kind(self) -> ImageKind:
        self.kind = ImageKind.PIXEL if self.kind is ImageKind.ASCII else ImageKind.ASCII
        return self.kind
