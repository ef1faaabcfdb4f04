from __future__ import annotations

from hunterhunted.models.position import PlayerPosition
from hunterhunted.models.types import (
    OutcomeReason,
    OwnPosition,
    PlayerRole,
    PositionSample,
    SessionStatus,
    TimerLevel,
)

__all__ = [
    # Table models
    'PlayerPosition',
    # Enums
    'OutcomeReason',
    'PlayerRole',
    'SessionStatus',
    'TimerLevel',
    # Value objects
    'OwnPosition',
    'PositionSample',
]
