"""Request body schemas for the relay API."""

from __future__ import annotations

from pydantic import Field, field_validator

from hunterhunted.models.types import PlayerRole
from hunterhunted.schemas.common import (
    PLAYER_ID_MAX_LENGTH,
    PLAYER_NAME_MAX_LENGTH,
    WireModel,
    normalize_game_code,
)

# ── Location ──────────────────────────────────────────────────────────────────


class LocationUpdateRequest(WireModel):
    """A player's latest position. Over-long strings are truncated, not rejected."""

    player_id: str = Field(min_length=1, description='Client-generated id, stable per session.')
    player_name: str = Field(min_length=1, description='Display name, capped at 20 chars.')
    role: PlayerRole
    game_code: str = Field(min_length=1, description='Match code, uppercased, capped at 10.')
    lat: float = Field(ge=-90, le=90, strict=True, allow_inf_nan=False)
    lon: float = Field(ge=-180, le=180, strict=True, allow_inf_nan=False)
    accuracy: float | None = Field(
        default=0, ge=0, allow_inf_nan=False, description='GPS uncertainty in metres.'
    )
    timestamp: float | None = Field(
        default=None,
        description='Client clock reading. Accepted for compatibility; the relay stamps its own.',
    )

    @field_validator('player_id')
    @classmethod
    def _cap_player_id(cls, value: str) -> str:
        return value[:PLAYER_ID_MAX_LENGTH]

    @field_validator('player_name')
    @classmethod
    def _cap_player_name(cls, value: str) -> str:
        return value[:PLAYER_NAME_MAX_LENGTH]

    @field_validator('game_code')
    @classmethod
    def _normalize_game_code(cls, value: str) -> str:
        code = normalize_game_code(value)
        if not code:
            raise ValueError('game code is blank')
        return code

    @field_validator('accuracy')
    @classmethod
    def _default_accuracy(cls, value: float | None) -> float:
        return value or 0
