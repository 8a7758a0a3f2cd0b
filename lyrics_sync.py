"""Time-coded lyric parsing and playback synchronization."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass, field
from enum import Enum

from errors import ParseError
from logger_utils import setup_logger
from terminal_io import MouseEvent, MouseKind

logger = setup_logger(__name__)

TIMESTAMP = re.compile(r"\[(\d+):(\d+(?:\.\d+)?)\]")


class LineStyle(Enum):
    ACTIVE = "active"
    SUNG = "sung"
    UPCOMING = "upcoming"


@dataclass
class Rect:
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def contains(self, column: int, row: int) -> bool:
        return (
            self.x <= column < self.x + self.width
            and self.y <= row < self.y + self.height
        )


def parse_timestamp_line(line: str) -> tuple[list[int], str]:
    """
    Split ``[mm:ss.ff][mm:ss.ff]text`` into its timestamps (ms) and text.
    """
    stamps = []
    pos = 0
    while True:
        match = TIMESTAMP.match(line, pos)
        if not match:
            break
        minutes = int(match.group(1))
        seconds = float(match.group(2))
        stamps.append(minutes * 60000 + round(seconds * 1000))
        pos = match.end()
    if not stamps:
        raise ParseError(f"Not a time-coded line: {line!r}")
    return stamps, line[pos:].strip()


@dataclass
class LyricState:
    text: str = ""
    timed_lyrics: dict[int, str] | None = None
    ordered_timestamps: list[int] | None = None
    length: int = 0
    offset: int = 0
    current_ms: int = 0
    missing: bool = False
    dragging: bool = False
    drag_start: int = 0
    area: Rect = field(default_factory=Rect)

    @classmethod
    def not_found(cls) -> "LyricState":
        return cls(missing=True)

    @property
    def is_synced(self) -> bool:
        return self.ordered_timestamps is not None

    def ingest(self, text: str, is_synced: bool) -> None:
        self.text = text
        self.offset = 0
        self.missing = False
        if not is_synced:
            self.timed_lyrics = None
            self.ordered_timestamps = None
            self.length = len(text.splitlines())
            return

        timed: dict[int, str] = {}
        for line in text.splitlines():
            if not line.strip():
                continue
            try:
                stamps, words = parse_timestamp_line(line)
            except ParseError as e:
                logger.debug("Skipping lyric line: %s", e)
                continue
            for stamp in stamps:
                timed[stamp] = words

        self.timed_lyrics = timed
        self.ordered_timestamps = sorted(timed)
        self.length = len(timed)

    def update_time(self, current_ms: int) -> None:
        self.current_ms = max(0, int(current_ms))

    def active_line(self, current_ms: int | None = None) -> int | None:
        if not self.ordered_timestamps:
            return None
        now = self.current_ms if current_ms is None else current_ms
        index = bisect.bisect_right(self.ordered_timestamps, now) - 1
        return index if index >= 0 else None

    def line_style(self, index: int, current_ms: int | None = None) -> LineStyle:
        stamps = self.ordered_timestamps or []
        now = self.current_ms if current_ms is None else current_ms
        if index >= len(stamps) or stamps[index] > now:
            return LineStyle.UPCOMING
        if index + 1 < len(stamps) and stamps[index + 1] <= now:
            return LineStyle.SUNG
        return LineStyle.ACTIVE

    def styled_lines(self, current_ms: int | None = None):
        """Yield ``(text, style)`` per line; style is ``None`` for plain lyrics."""
        if not self.is_synced:
            for line in self.text.splitlines():
                yield line, None
            return
        for index, stamp in enumerate(self.ordered_timestamps):
            yield self.timed_lyrics[stamp], self.line_style(index, current_ms)

    def scroll(self, delta: int) -> None:
        self.offset = min(max(0, self.offset + delta), self.length)

    def handle_mouse(self, event: MouseEvent) -> None:
        if event.kind is MouseKind.DOWN:
            if self.area.contains(event.column, event.row):
                self.dragging = True
                self.drag_start = event.row
        elif event.kind is MouseKind.DRAG:
            if self.dragging:
                self.scroll(event.row - self.drag_start)
                self.drag_start = event.row
        elif event.kind is MouseKind.UP:
            self.dragging = False
        elif event.kind is MouseKind.SCROLL_UP:
            if self.area.contains(event.column, event.row):
                self.scroll(-1)
        elif event.kind is MouseKind.SCROLL_DOWN:
            if self.area.contains(event.column, event.row):
                self.scroll(1)

    def recenter(self) -> None:
        active = self.active_line()
        if active is None:
            self.offset = 0
            return
        self.offset = min(max(0, active - self.area.height // 2), self.length)
