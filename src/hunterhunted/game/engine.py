"""Opponent visibility and game outcome rules.

Everything here is a pure function of a relay snapshot, the local session and
the current instant, so the runner can call it on every poll and tick.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from hunterhunted.config import GameSettings
from hunterhunted.game.geo import haversine_distance
from hunterhunted.game.session import LocalGameSession, Outcome
from hunterhunted.models.types import OwnPosition, PlayerRole, TimerLevel
from hunterhunted.schemas.response import PlayerLocation

DEFAULT_SETTINGS = GameSettings()

WARNING_REMAINING_MS = 180_000
DANGER_REMAINING_MS = 60_000


@dataclass(frozen=True)
class VisibleOpponent:
    """An opponent's position old enough to be shown, with its age in ms."""

    position: PlayerLocation
    age: int

    @property
    def player_id(self) -> str:
        return self.position.player_id


@dataclass
class CycleResult:
    visible: list[VisibleOpponent] = field(default_factory=list)
    opponent_ids: set[str] = field(default_factory=set)
    outcome: Outcome | None = None


def is_opponent(entry: PlayerLocation, session: LocalGameSession) -> bool:
    """True for players of the opposite role, never for the local player."""
    if session.role is None or entry.player_id == session.player_id:
        return False
    return entry.role == session.role.opponent


def filter_visible_opponents(
    snapshot: Iterable[PlayerLocation],
    session: LocalGameSession,
    now: int,
    settings: GameSettings = DEFAULT_SETTINGS,
) -> list[VisibleOpponent]:
    """Opponents whose last position is at least ``position_delay_ms`` old.

    Younger positions are skipped for this call only; they show up once they
    age past the delay, since the relay does not restamp them.
    """
    visible: list[VisibleOpponent] = []
    for entry in snapshot:
        if not is_opponent(entry, session):
            continue
        age = now - entry.timestamp
        if age < settings.position_delay_ms:
            continue
        visible.append(VisibleOpponent(position=entry, age=age))
    return visible


def evaluate_capture(
    visible_opponents: Iterable[VisibleOpponent],
    own_position: OwnPosition | None,
    role: PlayerRole | None,
    settings: GameSettings = DEFAULT_SETTINGS,
) -> Outcome | None:
    """Victory over the first visible opponent within capture distance, hunters only.

    Uses the last accepted own fix as-is; without one the check is skipped.
    """
    if role != PlayerRole.hunter or own_position is None:
        return None
    for opponent in visible_opponents:
        distance = haversine_distance(
            own_position.lat, own_position.lon, opponent.position.lat, opponent.position.lon
        )
        if distance <= settings.capture_distance_m:
            return Outcome.victory(opponent.position)
    return None


def elapsed_time(session: LocalGameSession, now: int) -> int:
    if session.start_time is None:
        return 0
    return now - session.start_time


def remaining_time(
    session: LocalGameSession, now: int, settings: GameSettings = DEFAULT_SETTINGS
) -> int:
    return max(0, settings.game_duration_ms - elapsed_time(session, now))


def timer_level(remaining_ms: int) -> TimerLevel:
    if remaining_ms < DANGER_REMAINING_MS:
        return TimerLevel.danger
    if remaining_ms < WARNING_REMAINING_MS:
        return TimerLevel.warning
    return TimerLevel.normal


def evaluate_survival(
    session: LocalGameSession, now: int, settings: GameSettings = DEFAULT_SETTINGS
) -> Outcome | None:
    """Timeout once the match duration has elapsed, whatever the local role."""
    if session.start_time is None:
        return None
    if elapsed_time(session, now) >= settings.game_duration_ms:
        return Outcome.timeout()
    return None


def evaluate_cycle(
    snapshot: Iterable[PlayerLocation],
    session: LocalGameSession,
    now: int,
    settings: GameSettings = DEFAULT_SETTINGS,
) -> CycleResult:
    """Filter the snapshot, then check capture before timeout."""
    snapshot = list(snapshot)
    visible = filter_visible_opponents(snapshot, session, now, settings)
    outcome = evaluate_capture(visible, session.last_known_position, session.role, settings)
    if outcome is None:
        outcome = evaluate_survival(session, now, settings)
    return CycleResult(
        visible=visible,
        opponent_ids={entry.player_id for entry in snapshot if is_opponent(entry, session)},
        outcome=outcome,
    )
