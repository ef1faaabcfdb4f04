from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

# ── Enums ──────────────────────────────────────────────────────────────────────


class PlayerRole(StrEnum):
    hunter = 'hunter'
    hunted = 'hunted'

    @property
    def opponent(self) -> PlayerRole:
        return PlayerRole.hunted if self is PlayerRole.hunter else PlayerRole.hunter


class SessionStatus(StrEnum):
    idle = 'idle'
    active = 'active'
    ended = 'ended'


class OutcomeReason(StrEnum):
    victory = 'victory'
    timeout = 'timeout'
    left = 'left'


class TimerLevel(StrEnum):
    normal = 'normal'
    warning = 'warning'
    danger = 'danger'


# ── Value objects ──────────────────────────────────────────────────────────────


class PositionSample(BaseModel):
    """A raw fix delivered by the geolocation provider."""

    lat: float
    lon: float
    accuracy: float


class OwnPosition(BaseModel):
    """A fix that passed the accuracy gate, stamped with the client clock (ms)."""

    lat: float
    lon: float
    accuracy: float
    timestamp: int
