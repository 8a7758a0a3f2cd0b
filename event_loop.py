"""Fixed-rate loop: draw, wait for input, dispatch, advance the clock."""

from __future__ import annotations

import time
from typing import Callable

from logger_utils import setup_logger

logger = setup_logger(__name__)


class EventLoop:
    def __init__(
        self,
        state,
        dispatcher,
        events,
        renderer,
        tick_rate: float = 0.25,
        poll_interval: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.state = state
        self.dispatcher = dispatcher
        self.events = events
        self.renderer = renderer
        self.tick_rate = tick_rate
        self.poll_interval = poll_interval
        self.clock = clock
        now = clock()
        self.last_tick = now
        self.last_poll = now

    def run(self) -> None:
        logger.info("Event loop started (tick=%.2fs poll=%.1fs)", self.tick_rate, self.poll_interval)
        self.dispatcher.refresh_playback()
        self.last_poll = self.clock()
        while not self.state.should_quit:
            self.step()
        logger.info("Event loop stopped")

    def step(self) -> None:
        """One iteration; never waits longer than what is left of the tick."""
        self.renderer.draw(self.state)

        timeout = max(0.0, self.tick_rate - (self.clock() - self.last_tick))
        event = self.events.poll(timeout)
        if event is not None:
            self.dispatcher.handle_event(event)
            if self.state.should_quit:
                return

        now = self.clock()
        if now - self.last_tick >= self.tick_rate:
            self.on_tick(now)

        if now - self.last_poll >= self.poll_interval:
            self.last_poll = now
            self.dispatcher.refresh_playback()

    def on_tick(self, now: float) -> None:
        elapsed_ms = int((now - self.last_tick) * 1000)
        self.last_tick = now
        player = self.state.player
        player.tick_progress(elapsed_ms)
        if player.context is not None:
            self.state.lyrics.update_time(player.context.progress_ms)
