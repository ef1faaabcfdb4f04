"""Capabilities the game consumes but does not own: GPS, the map, user notices."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from hunterhunted.errors import ProviderError
from hunterhunted.models.types import PlayerRole, PositionSample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WatchOptions:
    enable_high_accuracy: bool = True
    timeout_ms: int = 10_000
    maximum_age_ms: int = 0


class Subscription(Protocol):
    def cancel(self) -> None: ...


class LocationProvider(Protocol):
    def watch(
        self,
        on_position: Callable[[PositionSample], None],
        on_error: Callable[[ProviderError], None],
        options: WatchOptions,
    ) -> Subscription: ...


@dataclass(frozen=True)
class Marker:
    lat: float
    lon: float
    role: PlayerRole
    label: str
    accuracy_radius: float | None = None
    is_self: bool = False


class MapSurface(Protocol):
    def add_marker(self, marker_id: str, marker: Marker) -> None: ...

    def update_marker(self, marker_id: str, marker: Marker) -> None: ...

    def remove_marker(self, marker_id: str) -> None: ...


class NoticeLevel(StrEnum):
    info = 'info'
    success = 'success'
    warning = 'warning'
    error = 'error'


class Notifier(Protocol):
    def notify(self, message: str, level: NoticeLevel = NoticeLevel.info) -> None: ...


class LoggingNotifier:
    """Notifier that only writes to the log, for headless clients."""

    _LEVELS = {
        NoticeLevel.info: logging.INFO,
        NoticeLevel.success: logging.INFO,
        NoticeLevel.warning: logging.WARNING,
        NoticeLevel.error: logging.ERROR,
    }

    def notify(self, message: str, level: NoticeLevel = NoticeLevel.info) -> None:
        logger.log(self._LEVELS[level], message)
