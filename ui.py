"""Rich layout for one frame of the player."""

from __future__ import annotations

import time
import unicodedata

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from app_state import AppState
from glyphs import Size, big_text
from image_utils import AsciiImage, TruePixelImage, thumbnail_bounds
from lyrics_sync import LineStyle, Rect
from navigation import SelectionCursor, Tab

TITLE_SIZE = Size.QUARTER
LINE_STYLES = {
    LineStyle.SUNG: Style(color="white"),
    LineStyle.UPCOMING: Style(color="grey50"),
}


def format_ms(ms: int) -> str:
    return time.strftime("%M:%S", time.gmtime(max(0, ms) // 1000))


def ascii_title(title: str) -> str:
    """Fold accents away so the big-text font can draw the title."""
    folded = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode()
    return folded.strip() or title


def visible_window(length: int, selected: int | None, rows: int) -> range:
    """Rows to draw so that the selection stays on screen."""
    rows = max(1, rows)
    start = 0
    if selected is not None and selected >= rows:
        start = selected - rows + 1
    return range(start, min(length, start + rows))


def render_progress_bar(progress_ms, duration_ms, width, colour) -> Text:
    percent = min(progress_ms / duration_ms, 1.0) if duration_ms else 0
    bar_length = max(1, width)
    filled = int(bar_length * percent)
    bar = Text("━" * filled, style=colour)
    bar.append("─" * (bar_length - filled), style="grey35")
    return bar


def render_volume(percent: int) -> Text:
    bar = "█ " * (percent // 10)
    if percent % 10 >= 5:
        bar += "▄"
    return Text(bar)


def render_half_blocks(image: TruePixelImage, width: int, height: int) -> Text:
    """Two vertically stacked pixels per cell: top as foreground, bottom as background."""
    out = Text()
    if width <= 0 or height <= 0:
        return out
    pixels = image.pixels().resize((width, height * 2)).load()
    for y in range(0, height * 2, 2):
        for x in range(width):
            r1, g1, b1 = pixels[x, y]
            r2, g2, b2 = pixels[x, y + 1]
            style = Style(color=f"#{r1:02x}{g1:02x}{b1:02x}", bgcolor=f"#{r2:02x}{g2:02x}{b2:02x}")
            out.append("▀", style=style)
        if y + 2 < height * 2:
            out.append("\n")
    return out


def _row_style(index: int, cursor: SelectionCursor, accent: str) -> str:
    if index != cursor.selected:
        return ""
    return f"bold {accent} reverse" if cursor.active else "bold"


def _border(cursor: SelectionCursor, accent: str) -> str:
    return accent if cursor.active else "grey50"


def _table(*columns: str) -> Table:
    table = Table(expand=True, box=None, header_style="bold", pad_edge=False)
    for name in columns:
        table.add_column(name, no_wrap=True, overflow="ellipsis")
    return table


class Renderer:
    def __init__(self, console: Console, live: Live):
        self.console = console
        self.live = live
        self._art_cache = None

    def draw(self, state: AppState) -> None:
        self.live.update(self.create_layout(state), refresh=True)

    def _regions(self, layout: Layout, state: AppState) -> dict:
        """Resolve each named layout's screen rectangle for the current window."""
        options = self.console.options.update_dimensions(state.window.width, state.window.height)
        render_map = layout.render(self.console, options)
        return {lay.name: render.region for lay, render in render_map.items() if lay.name}

    def create_layout(self, state: AppState) -> Layout:
        layout = Layout()
        layout.split(
            Layout(name="header", size=3),
            Layout(name="body"),
        )
        layout["body"].split_row(
            Layout(name="sidebar", ratio=4),
            Layout(name="main", ratio=11),
            Layout(name="player", ratio=5),
        )
        layout["player"].split(
            Layout(name="art", ratio=1),
            Layout(name="title", size=TITLE_SIZE.cell_height),
            Layout(name="artist", size=3),
            Layout(name="progress", size=2),
            Layout(name="volume", size=3),
        )
        regions = self._regions(layout, state)
        accent = state.colour.hex

        layout["header"].update(self.render_header(state, accent))
        layout["sidebar"].update(self.render_sidebar(state, accent, regions["sidebar"].height))
        layout["main"].update(self.render_main(state, accent, regions["main"]))
        self.render_player(layout, state, accent, regions)
        return layout

    def render_header(self, state: AppState, accent: str) -> Panel:
        search = state.search
        line = Text()
        if search.input_active:
            line.append(search.text[: search.cursor])
            line.append(search.text[search.cursor : search.cursor + 1] or " ", style="reverse")
            line.append(search.text[search.cursor + 1 :])
        elif search.text:
            line.append(search.text, style="dim")
        else:
            line.append("Press e or / to search", style="dim")

        subtitle = Text(" | ").join(
            Text(n.message, style=n.style) for n in state.notifications
        )
        return Panel(
            line,
            title="[bold]Orpheus[/bold]",
            title_align="left",
            subtitle=subtitle if state.notifications else None,
            subtitle_align="right",
            border_style=accent if search.input_active else "grey50",
        )

    def render_sidebar(self, state: AppState, accent: str, height: int) -> Panel:
        playlists = state.playlists
        cursor = playlists.cursor
        table = _table("Playlists")
        for i in visible_window(len(playlists.playlists), cursor.selected, height - 3):
            table.add_row(playlists.playlists[i].name, style=_row_style(i, cursor, accent))
        return Panel(table, title=Text("[1] Library"), border_style=_border(cursor, accent))

    def render_main(self, state: AppState, accent: str, region) -> Panel | Layout:
        if state.tab is Tab.SEARCH_RESULTS and state.search.results is not None:
            state.lyrics.area = Rect()
            return self.render_results(state, accent, region.height)
        if state.tab is Tab.PLAYLIST_PAGE and state.playlists.selected_playlist is not None:
            state.lyrics.area = Rect()
            return self.render_playlist(state, accent)
        state.lyrics.area = Rect(region.x, region.y, region.width, region.height)
        return self.render_lyrics(state, accent)

    def render_lyrics(self, state: AppState, accent: str) -> Panel:
        lyrics = state.lyrics
        text = Text()
        if lyrics.missing:
            text.append("No lyrics found", style="dim")
        elif not lyrics.text:
            text.append("Waiting for lyrics...", style="dim")
        else:
            lines = list(lyrics.styled_lines())
            for words, style in lines[lyrics.offset :]:
                if style is None or style is LineStyle.ACTIVE:
                    line_style = Style(color=accent, bold=style is LineStyle.ACTIVE)
                else:
                    line_style = LINE_STYLES[style]
                text.append(words + "\n", style=line_style)
        subtitle = f"{lyrics.offset}/{lyrics.length}" if lyrics.length else None
        return Panel(
            text,
            title="[bold]Lyrics[/bold]",
            subtitle=subtitle,
            subtitle_align="right",
            padding=(1, 2),
            border_style="grey50",
        )

    def render_results(self, state: AppState, accent: str, height: int) -> Layout:
        results = state.search.results
        rows = max(1, height // 3 - 3)

        songs = _table("Title", "Artist", "Album", "Time")
        cursor = results.tracks.cursor
        for i in visible_window(len(results.tracks.items), cursor.selected, rows):
            track = results.tracks.items[i]
            songs.add_row(
                track.name,
                track.artist_names,
                track.album.name if track.album else "",
                format_ms(track.duration_ms),
                style=_row_style(i, cursor, accent),
            )

        albums = _table("Album", "Artist")
        album_cursor = results.albums.cursor
        for i in visible_window(len(results.albums.items), album_cursor.selected, rows):
            album = results.albums.items[i]
            albums.add_row(album.name, album.artist_names, style=_row_style(i, album_cursor, accent))

        artists = _table("Artist")
        artist_cursor = results.artists.cursor
        for i in visible_window(len(results.artists.items), artist_cursor.selected, rows):
            artists.add_row(results.artists.items[i].name, style=_row_style(i, artist_cursor, accent))

        layout = Layout()
        layout.split(
            Layout(Panel(songs, title=Text("[s] Songs"), border_style=_border(cursor, accent))),
            Layout(Panel(albums, title=Text("[a] Albums"), border_style=_border(album_cursor, accent))),
            Layout(Panel(artists, title=Text("[d] Artists"), border_style=_border(artist_cursor, accent))),
        )
        return layout

    def render_playlist(self, state: AppState, accent: str) -> Panel:
        selected = state.playlists.selected_playlist
        cursor = selected.cursor
        table = _table("#", "Title", "Artist", "Album", "Time")
        table.columns[0].justify = "right"
        for i, track in enumerate(selected.tracks.items):
            table.add_row(
                str(selected.offset + i + 1),
                track.name,
                track.artist_names,
                track.album.name if track.album else "",
                format_ms(track.duration_ms),
                style=_row_style(i, cursor, accent),
            )
        last = min(selected.offset + len(selected.tracks.items), selected.total)
        return Panel(
            table,
            title=Text(f"[p] {selected.playlist.name}"),
            subtitle=f"← {selected.offset + 1}-{last} of {selected.total} →",
            subtitle_align="right",
            border_style=_border(cursor, accent),
        )

    def render_player(self, layout: Layout, state: AppState, accent: str, regions: dict) -> None:
        ctx = state.player.context
        layout["volume"].update(
            Panel(
                render_volume(state.device.volume_percent),
                title=f"Volume {state.device.volume_percent}%",
                border_style="grey50",
            )
        )
        if ctx is None or ctx.item is None:
            layout["art"].update(Panel(Text("Nothing playing", style="dim"), border_style="grey50"))
            for name in ("title", "artist", "progress"):
                layout[name].update(Text(""))
            return

        layout["art"].update(self.render_art(state, regions["art"]))

        width = regions["title"].width
        title = "\n".join(big_text(ascii_title(ctx.item.name), TITLE_SIZE, width=width, align="center"))
        layout["title"].update(Text(title, style="bold"))
        layout["artist"].update(Text(f"\n「 {ctx.item.artist_name} 」", justify="center"))

        label = f" {format_ms(ctx.progress_ms)} / {format_ms(ctx.duration_ms)}"
        bar_width = max(1, regions["progress"].width - len(label))
        colour = accent if ctx.is_playing else "grey70"
        bar = render_progress_bar(ctx.progress_ms, ctx.duration_ms, bar_width, colour)
        bar.append(label)
        layout["progress"].update(bar)

    def render_art(self, state: AppState, region) -> Panel:
        image = state.player.image
        playing = bool(state.player.context and state.player.context.is_playing)
        if isinstance(image, AsciiImage):
            body = Text(image.ascii, style="white" if playing else "grey70", no_wrap=True)
        elif isinstance(image, TruePixelImage):
            width, _ = thumbnail_bounds(state.window)
            width = min(width, region.width - 2)
            height = max(1, region.height - 2)
            key = (id(image.image), width, height, image.grayscale)
            if self._art_cache is None or self._art_cache[0] != key:
                self._art_cache = (key, render_half_blocks(image, width, height))
            body = self._art_cache[1]
        else:
            body = Text("")
        return Panel(body, border_style="grey50")