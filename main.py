"""Terminal Spotify player with cover art and synced lyrics.

Keys: ``e`` or ``/`` search, ``1`` library, ``s``/``a``/``d`` result tables,
``p`` open playlist, arrows navigate, Enter plays, space pauses, ``+``/``-``
volume, ``<``/``>`` previous/next, ``i`` art style, ``g`` grayscale, ``c``
recenter lyrics, ``q`` quits.
"""

import argparse
import sys

from blessed import Terminal
from rich.console import Console
from rich.live import Live

from app_state import AppState
from config import IMAGE_KINDS, Config
from dispatcher import Dispatcher
from errors import NotFoundError, OrpheusError, StartupError
from event_loop import EventLoop
from image_utils import ImageExtractor, ImageKind
from logger_utils import setup_logger
from lyrics_client import LyricsClient
from navigation import PlaylistState
from spotify_utils import SpotifyController
from terminal_io import TerminalEvents
from ui import Renderer

logger = setup_logger("OrpheusMain")
console = Console()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="orpheus", description=__doc__.splitlines()[0])
    parser.add_argument("--image", choices=IMAGE_KINDS, help="cover art style")
    parser.add_argument("--tick-rate", type=float, help="seconds between frames")
    parser.add_argument("--no-mouse", action="store_true", help="disable mouse reporting")
    parser.add_argument("--env-file", help="path to a .env file")
    return parser.parse_args(argv)


def load_config(args) -> Config:
    config = Config.from_env(args.env_file)
    if args.image:
        config.image_kind = args.image
    if args.tick_rate is not None:
        config.tick_rate = args.tick_rate
    if args.no_mouse:
        config.mouse = False
    config.validate()
    return config


def pick_device(devices):
    """Prefer the active device, otherwise the first one Spotify reports."""
    if not devices:
        raise NotFoundError("No Spotify device found. Open Spotify on any device and retry.")
    for device in devices:
        if device.is_active:
            return device
    return devices[0]


def build_state(controller: SpotifyController) -> AppState:
    try:
        devices = controller.list_devices()
        playlists = controller.current_user_playlists(limit=50)
    except OrpheusError as e:
        raise StartupError(f"Could not reach Spotify: {e}") from e

    device = pick_device(devices)
    logger.info("Using device %s (%s), %d playlists", device.name, device.id, len(playlists.items))
    return AppState(
        client=controller,
        device=device,
        playlists=PlaylistState(playlists=playlists.items),
    )


def run(config: Config) -> None:
    console.print("[green]🚀 Starting Orpheus...[/green]")
    controller = SpotifyController(config)
    state = build_state(controller)
    console.print(f"[dim]Playing on [bold]{state.device.name}[/bold]. Press q to quit.[/dim]")

    extractor = ImageExtractor(kind=ImageKind(config.image_kind), timeout=config.request_timeout)
    lyrics_client = LyricsClient(timeout=config.request_timeout, genius_token=config.genius_token)
    dispatcher = Dispatcher(state, lyrics_client, extractor, slow_call_ms=config.slow_call_ms)

    term = Terminal()
    state.resize(term.width, term.height)
    with term.cbreak(), term.hidden_cursor(), TerminalEvents(term, mouse=config.mouse) as events:
        with Live(console=console, screen=True, auto_refresh=False) as live:
            loop = EventLoop(
                state,
                dispatcher,
                events,
                Renderer(console, live),
                tick_rate=config.tick_rate,
                poll_interval=config.poll_interval,
            )
            loop.run()


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(args)
        run(config)
    except (StartupError, NotFoundError) as e:
        logger.error("Startup failed: %s", e)
        console.print(f"[red]❌ {e}[/red]")
        return 1
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.exception("Unexpected error in main loop")
        console.print(f"\n[red]❌ Unexpected error in main loop: {e}[/red]")
        return 1
    console.print("\n[bold red]⏹ Exiting Orpheus... Goodbye![/bold red]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
