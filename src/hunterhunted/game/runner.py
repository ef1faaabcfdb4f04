"""Drives one client through a game: GPS subscription, relay polling, countdown.

The three periodic activities share one event loop. Each relay poll runs as its
own task, so a slow relay never holds up the next poll; overlapping polls apply
their results in completion order. Ending the session cancels every task and
the GPS subscription before returning.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from hunterhunted.clock import Clock, system_clock
from hunterhunted.config import GameSettings
from hunterhunted.errors import NetworkError, ProviderError
from hunterhunted.game.engine import (
    evaluate_cycle,
    evaluate_survival,
    remaining_time,
    timer_level,
)
from hunterhunted.game.geo import format_accuracy, format_time
from hunterhunted.game.interfaces import (
    LocationProvider,
    LoggingNotifier,
    MapSurface,
    NoticeLevel,
    Notifier,
    Subscription,
    WatchOptions,
)
from hunterhunted.game.markers import MarkerLayer
from hunterhunted.game.relay_client import RelayClient
from hunterhunted.game.session import LocalGameSession, Outcome
from hunterhunted.models.types import PlayerRole, PositionSample, TimerLevel

logger = logging.getLogger(__name__)


class GameRunner:
    def __init__(
        self,
        relay: RelayClient,
        provider: LocationProvider,
        surface: MapSurface,
        *,
        settings: GameSettings | None = None,
        notifier: Notifier | None = None,
        clock: Clock = system_clock,
    ):
        self.relay = relay
        self.provider = provider
        self.settings = settings or GameSettings()
        self.notifier = notifier or LoggingNotifier()
        self.clock = clock
        self.session = LocalGameSession()
        self.markers = MarkerLayer(surface)

        self.accuracy_display: str | None = None
        self.timer_display: str | None = None
        self.timer_level: TimerLevel | None = None
        self.player_count: int | None = None
        self.last_update: int | None = None

        self._subscription: Subscription | None = None
        self._loops: list[asyncio.Task[None]] = []
        self._polls: set[asyncio.Task[None]] = set()
        self._ended = asyncio.Event()

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def start(self, player_name: str, game_code: str, role: PlayerRole | str) -> None:
        """Start a session and its periodic tasks. Must be called inside a running loop."""
        self.session.start(player_name, game_code, role, self.clock())
        self._ended = asyncio.Event()

        options = WatchOptions(
            enable_high_accuracy=True, timeout_ms=self.settings.gps_timeout_ms, maximum_age_ms=0
        )
        try:
            self._subscription = self.provider.watch(
                self._on_position, self._on_provider_error, options
            )
        except ProviderError as e:
            self._on_provider_error(e)

        self.tick()
        self._loops = [
            asyncio.create_task(self._poll_loop()),
            asyncio.create_task(self._tick_loop()),
        ]
        self.notifier.notify(f'Game started as {self.session.role}!', NoticeLevel.success)

    def leave(self) -> None:
        if self.session.is_active:
            self._end(Outcome.left())

    def reset(self) -> None:
        """Clear the ended game so ``start`` can be called again."""
        self.session.reset()
        self.markers.clear()
        self.accuracy_display = None
        self.timer_display = None
        self.timer_level = None
        self.player_count = None
        self.last_update = None

    @property
    def tasks(self) -> list[asyncio.Task[None]]:
        """The periodic loops and in-flight polls of the current session."""
        return [*self._loops, *self._polls]

    async def wait_ended(self) -> Outcome:
        await self._ended.wait()
        assert self.session.outcome is not None
        return self.session.outcome

    def refresh(self) -> None:
        """Poll immediately, e.g. when the app comes back to the foreground."""
        if self.session.is_active:
            self._spawn_poll()

    def _end(self, outcome: Outcome) -> None:
        self.session.end(outcome)
        current = asyncio.current_task()
        for task in [*self._loops, *self._polls]:
            if task is not current:
                task.cancel()
        self._loops = []
        self._polls.clear()
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        self._ended.set()

    # ── GPS ──────────────────────────────────────────────────────────────────

    def _on_position(self, sample: PositionSample) -> None:
        if not self.session.is_active:
            return
        self.accuracy_display = format_accuracy(sample.accuracy)
        accepted = self.session.accept_fix(
            sample, self.clock(), max_accuracy_m=self.settings.max_accuracy_m
        )
        if accepted:
            assert self.session.last_known_position is not None and self.session.role is not None
            self.markers.update_self(self.session.last_known_position, self.session.role)

    def _on_provider_error(self, error: ProviderError) -> None:
        logger.error('GPS error: %s (%s)', error.message, error.kind)
        self.notifier.notify(error.message, NoticeLevel.error)

    # ── Relay polling ────────────────────────────────────────────────────────

    async def _poll_loop(self) -> None:
        interval = self.settings.update_interval_ms / 1000
        while self.session.is_active:
            self._spawn_poll()
            await asyncio.sleep(interval)

    def _spawn_poll(self) -> None:
        task = asyncio.create_task(self._guarded(self.poll_once()))
        self._polls.add(task)
        task.add_done_callback(self._polls.discard)

    async def _guarded(self, coro: Coroutine[Any, Any, None]) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception('Poll cycle failed')

    async def poll_once(self) -> None:
        """Push the accepted fix, pull the snapshot, and evaluate it."""
        session = self.session
        if not session.is_active or session.game_code is None:
            return

        position = session.last_known_position
        if position is not None:
            try:
                await self.relay.update_location(session, position)
            except NetworkError as e:
                logger.warning('Error updating location: %s', e.message)
                self.notifier.notify('Failed to update location', NoticeLevel.error)

        try:
            snapshot = await self.relay.get_locations(session.game_code)
        except NetworkError as e:
            logger.warning('Error fetching locations: %s', e.message)
            return

        # The session may have ended while the request was in flight.
        if not session.is_active:
            return

        now = self.clock()
        result = evaluate_cycle(snapshot, session, now, self.settings)
        self.markers.sync(result.visible, result.opponent_ids)
        self.player_count = sum(1 for entry in snapshot if entry.game_code == session.game_code)
        self.last_update = now
        if result.outcome is not None:
            self._end(result.outcome)

    # ── Countdown ────────────────────────────────────────────────────────────

    async def _tick_loop(self) -> None:
        interval = self.settings.tick_interval_ms / 1000
        while self.session.is_active:
            await asyncio.sleep(interval)
            self.tick()

    def tick(self) -> None:
        """Refresh the countdown and end the game once time is up."""
        if not self.session.is_active:
            return
        now = self.clock()
        outcome = evaluate_survival(self.session, now, self.settings)
        if outcome is not None:
            self.timer_display = format_time(0)
            self.timer_level = TimerLevel.danger
            self._end(outcome)
            return
        remaining = remaining_time(self.session, now, self.settings)
        self.timer_display = format_time(remaining)
        self.timer_level = timer_level(remaining)
