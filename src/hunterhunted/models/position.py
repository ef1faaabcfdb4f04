from __future__ import annotations

from sqlmodel import Field, SQLModel

from hunterhunted.models.types import PlayerRole


class PlayerPosition(SQLModel, table=True):
    __tablename__ = 'player_position'  # type: ignore[assignment]

    game_code: str = Field(primary_key=True, max_length=10)
    player_id: str = Field(primary_key=True, max_length=50)
    player_name: str = Field(max_length=20)
    role: PlayerRole
    lat: float
    lon: float
    accuracy: float = 0
    timestamp: int = Field(index=True)  # relay receipt time, ms since epoch


__all__ = ['PlayerPosition']
