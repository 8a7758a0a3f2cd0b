"""Sub-cell block glyphs for big text and ASCII artwork.

A glyph is a sequence of row bitmasks; bit ``col`` of ``glyph[row]`` is the
pixel at ``(col, row)``.  Each terminal cell covers a small block of pixels
depending on :class:`Size` and is drawn with the Unicode block element whose
filled quadrants/sextants match the pixels that are set.
"""

from __future__ import annotations

import math
from enum import Enum
from functools import lru_cache
from typing import Sequence

from PIL import Image, ImageDraw, ImageFont

GLYPH_SIZE = 8
ASCII_CHARS = "#+=-|:. "

FULL_SYMBOLS = (" ", "█")
HALF_HEIGHT_SYMBOLS = (" ", "▀", "▄", "█")
HALF_WIDTH_SYMBOLS = (" ", "▌", "▐", "█")
QUADRANT_SYMBOLS = (
    " ", "▘", "▝", "▀", "▖", "▌", "▞", "▛",
    "▗", "▚", "▐", "▜", "▄", "▙", "▟", "█",
)


def _sextant(index: int) -> str:
    # U+1FB00.. skips the patterns that already exist as half/full blocks
    if index == 0:
        return " "
    if index == 21:
        return "▌"
    if index == 42:
        return "▐"
    if index == 63:
        return "█"
    return chr(0x1FB00 + index - 1 - (index > 21) - (index > 42))


SIXTH_SYMBOLS = tuple(_sextant(i) for i in range(64))


class Size(Enum):
    FULL = (1, 1)
    HALF_HEIGHT = (1, 2)
    HALF_WIDTH = (2, 1)
    QUARTER = (2, 2)
    SIXTH = (2, 3)

    @property
    def pixels_per_cell(self) -> tuple[int, int]:
        return self.value

    @property
    def cell_width(self) -> int:
        """Cells needed for one glyph horizontally."""
        return math.ceil(GLYPH_SIZE / self.value[0])

    @property
    def cell_height(self) -> int:
        return math.ceil(GLYPH_SIZE / self.value[1])


def _bit(glyph: Sequence[int], row: int, col: int) -> int:
    if row < 0 or row >= len(glyph) or col < 0:
        return 0
    return (glyph[row] >> col) & 1


def symbol(glyph: Sequence[int], row: int, col: int, size: Size) -> str:
    """Return the block character for the cell whose top-left pixel is ``(col, row)``."""
    if size is Size.FULL:
        return FULL_SYMBOLS[_bit(glyph, row, col)]
    if size is Size.HALF_HEIGHT:
        index = _bit(glyph, row, col) | _bit(glyph, row + 1, col) << 1
        return HALF_HEIGHT_SYMBOLS[index]
    if size is Size.HALF_WIDTH:
        index = _bit(glyph, row, col) | _bit(glyph, row, col + 1) << 1
        return HALF_WIDTH_SYMBOLS[index]
    if size is Size.QUARTER:
        index = (
            _bit(glyph, row, col)
            | _bit(glyph, row, col + 1) << 1
            | _bit(glyph, row + 1, col) << 2
            | _bit(glyph, row + 1, col + 1) << 3
        )
        return QUADRANT_SYMBOLS[index]
    if size is Size.SIXTH:
        index = (
            _bit(glyph, row, col)
            | _bit(glyph, row, col + 1) << 1
            | _bit(glyph, row + 1, col) << 2
            | _bit(glyph, row + 1, col + 1) << 3
            | _bit(glyph, row + 2, col) << 4
            | _bit(glyph, row + 2, col + 1) << 5
        )
        return SIXTH_SYMBOLS[index]
    raise ValueError(f"Unknown glyph size: {size!r}")


def render_glyph(glyph: Sequence[int], size: Size) -> list[str]:
    """Render one 8x8 glyph into ``size.cell_height`` strings."""
    step_x, step_y = size.pixels_per_cell
    return [
        "".join(symbol(glyph, row, col, size) for col in range(0, GLYPH_SIZE, step_x))
        for row in range(0, GLYPH_SIZE, step_y)
    ]


@lru_cache(maxsize=1)
def _font():
    return ImageFont.load_default()


@lru_cache(maxsize=512)
def glyph_for(char: str) -> tuple[int, ...]:
    """Rasterize ``char`` with Pillow's default font into an 8x8 bitmap."""
    if not char or char.isspace():
        return (0,) * GLYPH_SIZE

    font = _font()
    _, top, _, bottom = font.getbbox("Hgjy|")
    left, _, right, _ = font.getbbox(char)
    width = max(1, right - min(left, 0))
    height = max(1, bottom - top)
    if right <= left:
        return (0,) * GLYPH_SIZE

    canvas = Image.new("L", (width, height), 0)
    ImageDraw.Draw(canvas).text((-min(left, 0), -top), char, fill=255, font=font)
    cell = canvas.resize((GLYPH_SIZE, GLYPH_SIZE), resample=Image.Resampling.BOX)

    rows = []
    for y in range(GLYPH_SIZE):
        mask = 0
        for x in range(GLYPH_SIZE):
            if cell.getpixel((x, y)) >= 96:
                mask |= 1 << x
        rows.append(mask)
    return tuple(rows)


def big_text(
    text: str, size: Size = Size.QUARTER, width: int | None = None, align: str = "left"
) -> list[str]:
    """Lay ``text`` out as one row of big glyphs, ``size.cell_height`` lines tall."""
    cell_w = size.cell_width
    if width is not None:
        text = text[: max(0, width // cell_w)]

    lines = [""] * size.cell_height
    for char in text:
        for i, part in enumerate(render_glyph(glyph_for(char), size)):
            lines[i] += part

    if width is None:
        return lines
    used = len(text) * cell_w
    if align == "center":
        pad = max(0, width // 2 - used // 2)
    elif align == "right":
        pad = max(0, width - used)
    else:
        pad = 0
    return [(" " * pad + line).ljust(width) for line in lines]


def brightness_to_ascii(luma: float) -> str:
    """Map a 0.0-1.0 luma value onto the ASCII ramp (dark to light)."""
    luma = min(1.0, max(0.0, luma))
    return ASCII_CHARS[round(luma * (len(ASCII_CHARS) - 1))]
