"""Database query functions. Return SQLModel objects; callers handle transformation."""

from __future__ import annotations

from sqlalchemy import delete, func
from sqlmodel import Session, col, select

from hunterhunted.models.position import PlayerPosition
from hunterhunted.models.types import PlayerRole

# ── Positions ─────────────────────────────────────────────────────────────────


def upsert_position(
    session: Session,
    *,
    game_code: str,
    player_id: str,
    player_name: str,
    role: PlayerRole,
    lat: float,
    lon: float,
    accuracy: float,
    timestamp: int,
) -> PlayerPosition:
    """Create or wholesale-overwrite the row for (game_code, player_id), commit, and return it."""
    position = session.get(PlayerPosition, (game_code, player_id))
    if position is None:
        position = PlayerPosition(
            game_code=game_code,
            player_id=player_id,
            player_name=player_name,
            role=role,
            lat=lat,
            lon=lon,
            accuracy=accuracy,
            timestamp=timestamp,
        )
    else:
        position.player_name = player_name
        position.role = role
        position.lat = lat
        position.lon = lon
        position.accuracy = accuracy
        position.timestamp = timestamp
    session.add(position)
    session.commit()
    session.refresh(position)
    return position


def list_positions(session: Session, game_code: str) -> list[PlayerPosition]:
    """Return every stored position for a game. Empty for unknown codes."""
    return list(
        session.exec(select(PlayerPosition).where(PlayerPosition.game_code == game_code)).all()
    )


def count_players(session: Session, game_code: str) -> int:
    """Return the number of players currently stored for a game."""
    return session.exec(
        select(func.count())
        .select_from(PlayerPosition)
        .where(PlayerPosition.game_code == game_code)
    ).one()


def count_active_games(session: Session) -> int:
    """Return the number of game codes with at least one stored position."""
    return session.exec(select(func.count(func.distinct(PlayerPosition.game_code)))).one()


def delete_positions_older_than(session: Session, cutoff: int) -> int:
    """Delete positions received before ``cutoff`` (ms), commit, and return how many went."""
    result = session.exec(  # type: ignore[call-overload]
        delete(PlayerPosition).where(col(PlayerPosition.timestamp) < cutoff)
    )
    session.commit()
    return result.rowcount or 0
