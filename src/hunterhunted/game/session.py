"""The local player's game session: identity, accepted fix, and lifecycle.

A session moves ``idle -> active -> ended``. It leaves ``active`` through exactly
one outcome (victory, timeout or left) and only ``reset()`` brings it back to
``idle`` for a new game.
"""

from __future__ import annotations

import logging
import math
import random
import string
from dataclasses import dataclass

from hunterhunted.errors import SessionError
from hunterhunted.models.types import (
    OutcomeReason,
    OwnPosition,
    PlayerRole,
    PositionSample,
    SessionStatus,
)
from hunterhunted.schemas.common import normalize_game_code
from hunterhunted.schemas.response import PlayerLocation

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits

SURVIVAL_MESSAGE = "Time's up! Hunted players survived."
LEFT_MESSAGE = 'You left the game.'


def generate_player_id(now: int) -> str:
    """Generate a session-stable player id like ``p_1718000000000_k3j9x0a1b``."""
    return f'p_{now}_' + ''.join(random.choices(_ID_ALPHABET, k=9))


@dataclass(frozen=True)
class Outcome:
    reason: OutcomeReason
    message: str
    opponent: PlayerLocation | None = None

    @staticmethod
    def victory(opponent: PlayerLocation) -> Outcome:
        return Outcome(OutcomeReason.victory, f'You captured {opponent.player_name}!', opponent)

    @staticmethod
    def timeout() -> Outcome:
        return Outcome(OutcomeReason.timeout, SURVIVAL_MESSAGE)

    @staticmethod
    def left() -> Outcome:
        return Outcome(OutcomeReason.left, LEFT_MESSAGE)


@dataclass
class LocalGameSession:
    player_id: str | None = None
    player_name: str | None = None
    role: PlayerRole | None = None
    game_code: str | None = None
    start_time: int | None = None
    last_known_position: OwnPosition | None = None
    status: SessionStatus = SessionStatus.idle
    outcome: Outcome | None = None

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.active

    def start(
        self,
        player_name: str | None,
        game_code: str | None,
        role: PlayerRole | str | None,
        now: int,
    ) -> None:
        """Validate the join form and move ``idle -> active``."""
        if self.status != SessionStatus.idle:
            raise SessionError(f'Cannot start a session that is {self.status}.')
        name = (player_name or '').strip()
        code = normalize_game_code(game_code or '')
        if not name or not code or not role:
            raise SessionError('Please fill all fields')
        try:
            role = PlayerRole(role)
        except ValueError:
            raise SessionError(f'Unknown role: {role}') from None

        self.player_id = generate_player_id(now)
        self.player_name = name
        self.role = role
        self.game_code = code
        self.start_time = now
        self.last_known_position = None
        self.outcome = None
        self.status = SessionStatus.active
        logger.info('Session %s started as %s in game %s', self.player_id, role, code)

    def end(self, outcome: Outcome) -> None:
        """Move ``active -> ended`` with the given outcome."""
        if self.status != SessionStatus.active:
            raise SessionError(f'Cannot end a session that is {self.status}.')
        self.status = SessionStatus.ended
        self.outcome = outcome
        logger.info('Session %s ended: %s', self.player_id, outcome.reason)

    def reset(self) -> None:
        """Return an ended session to ``idle`` so a new game can start."""
        if self.status == SessionStatus.active:
            raise SessionError('Leave the current game before starting a new one.')
        self.player_id = None
        self.player_name = None
        self.role = None
        self.game_code = None
        self.start_time = None
        self.last_known_position = None
        self.outcome = None
        self.status = SessionStatus.idle

    def accept_fix(self, sample: PositionSample, now: int, *, max_accuracy_m: float) -> bool:
        """Accuracy gate: keep ``sample`` only if its uncertainty is within bounds.

        A rejected sample leaves the previously accepted fix in place.
        """
        if not all(math.isfinite(v) for v in (sample.lat, sample.lon, sample.accuracy)):
            logger.warning('Discarding non-finite GPS fix: %s', sample)
            return False
        if sample.accuracy > max_accuracy_m:
            logger.warning('GPS accuracy too low: %sm', sample.accuracy)
            return False
        self.last_known_position = OwnPosition(
            lat=sample.lat, lon=sample.lon, accuracy=sample.accuracy, timestamp=now
        )
        return True
