"""Response schemas for the relay API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from hunterhunted.models.types import PlayerRole
from hunterhunted.schemas.common import WireModel

if TYPE_CHECKING:
    from hunterhunted.models.position import PlayerPosition as PlayerPositionModel


# ── Location ──────────────────────────────────────────────────────────────────


class PlayerLocation(WireModel):
    """One player's stored position, as returned in a game snapshot."""

    player_id: str
    player_name: str
    role: PlayerRole
    game_code: str
    lat: float
    lon: float
    accuracy: float = 0
    timestamp: int = Field(description='Relay receipt time, ms since epoch.')

    @staticmethod
    def from_model(position: PlayerPositionModel) -> PlayerLocation:
        return PlayerLocation(
            player_id=position.player_id,
            player_name=position.player_name,
            role=position.role,
            game_code=position.game_code,
            lat=position.lat,
            lon=position.lon,
            accuracy=position.accuracy,
            timestamp=position.timestamp,
        )


class LocationUpdateResponse(WireModel):
    """Returned after a successful upsert."""

    success: bool = True
    message: str = 'Location updated'
    player_count: int = Field(description='Players currently stored for the game.')


class LocationListResponse(WireModel):
    """Snapshot of every stored position in a game. Empty for unknown codes."""

    locations: list[PlayerLocation]
    count: int


# ── Service ───────────────────────────────────────────────────────────────────


class HealthResponse(WireModel):
    status: str = 'ok'
    message: str = 'Hunter vs Hunted API'
    version: str
    active_games: int


class ErrorResponse(WireModel):
    error: str
