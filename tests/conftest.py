from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from hunterhunted.config import RelaySettings
from hunterhunted.errors import ProviderError, ProviderErrorKind
from hunterhunted.game.interfaces import Marker, NoticeLevel, WatchOptions
from hunterhunted.game.session import LocalGameSession
from hunterhunted.main import create_app
from hunterhunted.models.types import OwnPosition, PlayerRole, PositionSample, SessionStatus
from hunterhunted.schemas.response import PlayerLocation

T0 = 1_760_000_000_000  # ms since epoch

ALLOWED_ORIGINS = ['https://hunt.example.org', 'http://localhost:8000']


class FakeClock:
    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def anyio_backend() -> str:
    return 'asyncio'


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> RelaySettings:
    return RelaySettings(allowed_origins=ALLOWED_ORIGINS)


@pytest.fixture
def app(settings: RelaySettings, clock: FakeClock) -> FastAPI:
    return create_app(settings, clock=clock)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as client:
        yield client


# ── Factory functions ─────────────────────────────────────────────────────────


def location_body(**overrides: Any) -> dict[str, Any]:
    defaults: dict[str, Any] = {
        'playerId': 'p_1_hunter',
        'playerName': 'Hunter',
        'role': 'hunter',
        'gameCode': 'ABC123',
        'lat': 51.5007,
        'lon': -0.1246,
        'accuracy': 10,
        'timestamp': T0,
    }
    defaults.update(overrides)
    return defaults


def make_location(**overrides: Any) -> PlayerLocation:
    defaults: dict[str, Any] = {
        'player_id': 'p_2_hunted',
        'player_name': 'Hunted',
        'role': PlayerRole.hunted,
        'game_code': 'ABC123',
        'lat': 51.5007,
        'lon': -0.1246,
        'accuracy': 10,
        'timestamp': T0,
    }
    defaults.update(overrides)
    return PlayerLocation(**defaults)


def make_session(**overrides: Any) -> LocalGameSession:
    defaults: dict[str, Any] = {
        'player_id': 'p_1_hunter',
        'player_name': 'Hunter',
        'role': PlayerRole.hunter,
        'game_code': 'ABC123',
        'start_time': T0,
        'status': SessionStatus.active,
    }
    defaults.update(overrides)
    return LocalGameSession(**defaults)


def own_position(lat: float = 51.5007, lon: float = -0.1246, accuracy: float = 10) -> OwnPosition:
    return OwnPosition(lat=lat, lon=lon, accuracy=accuracy, timestamp=T0)


# ── Collaborator fakes ────────────────────────────────────────────────────────


class FakeSubscription:
    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeProvider:
    """Geolocation provider driven by the test."""

    def __init__(self):
        self.subscription: FakeSubscription | None = None
        self.options: WatchOptions | None = None
        self._on_position: Callable[[PositionSample], None] | None = None
        self._on_error: Callable[[ProviderError], None] | None = None

    def watch(self, on_position, on_error, options: WatchOptions) -> FakeSubscription:
        self._on_position = on_position
        self._on_error = on_error
        self.options = options
        self.subscription = FakeSubscription()
        return self.subscription

    def emit(self, lat: float, lon: float, accuracy: float) -> None:
        assert self._on_position is not None
        self._on_position(PositionSample(lat=lat, lon=lon, accuracy=accuracy))

    def fail(self, kind: ProviderErrorKind) -> None:
        assert self._on_error is not None
        self._on_error(ProviderError(kind))


class RecordingSurface:
    """Map surface that remembers what is currently drawn."""

    def __init__(self):
        self.markers: dict[str, Marker] = {}
        self.calls: list[tuple[str, str]] = []

    def add_marker(self, marker_id: str, marker: Marker) -> None:
        assert marker_id not in self.markers
        self.markers[marker_id] = marker
        self.calls.append(('add', marker_id))

    def update_marker(self, marker_id: str, marker: Marker) -> None:
        assert marker_id in self.markers
        self.markers[marker_id] = marker
        self.calls.append(('update', marker_id))

    def remove_marker(self, marker_id: str) -> None:
        del self.markers[marker_id]
        self.calls.append(('remove', marker_id))


class RecordingNotifier:
    def __init__(self):
        self.notices: list[tuple[str, NoticeLevel]] = []

    def notify(self, message: str, level: NoticeLevel = NoticeLevel.info) -> None:
        self.notices.append((message, level))

    @property
    def messages(self) -> list[str]:
        return [message for message, _ in self.notices]
