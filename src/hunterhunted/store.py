"""The relay's ephemeral per-game position store."""

from __future__ import annotations

import logging
import threading

from sqlalchemy.engine import Engine
from sqlmodel import Session

from hunterhunted import queries
from hunterhunted.db import create_db_and_tables, make_engine
from hunterhunted.models.position import PlayerPosition
from hunterhunted.schemas.request import LocationUpdateRequest

logger = logging.getLogger(__name__)


class PositionStore:
    """Last-write-wins store of one position per (game code, player id).

    Rows are stamped with the relay's receipt time and purged by ``evict`` once
    older than ``max_age_ms``. A game exists only while it has rows.
    """

    def __init__(self, engine: Engine, *, max_age_ms: int):
        self.engine = engine
        self.max_age_ms = max_age_ms
        self._lock = threading.Lock()
        create_db_and_tables(engine)

    @classmethod
    def from_url(cls, database_url: str, *, max_age_ms: int) -> PositionStore:
        return cls(make_engine(database_url), max_age_ms=max_age_ms)

    def upsert(self, body: LocationUpdateRequest, *, received_at: int) -> int:
        """Store ``body`` stamped with ``received_at`` and return the game's player count."""
        with self._lock, Session(self.engine) as session:
            queries.upsert_position(
                session,
                game_code=body.game_code,
                player_id=body.player_id,
                player_name=body.player_name,
                role=body.role,
                lat=body.lat,
                lon=body.lon,
                accuracy=body.accuracy,
                timestamp=received_at,
            )
            return queries.count_players(session, body.game_code)

    def snapshot(self, game_code: str) -> list[PlayerPosition]:
        """Return the stored positions of a game in no particular order."""
        with self._lock, Session(self.engine) as session:
            return queries.list_positions(session, game_code)

    def active_games(self) -> int:
        with self._lock, Session(self.engine) as session:
            return queries.count_active_games(session)

    def evict(self, now: int) -> int:
        """Delete every position received more than ``max_age_ms`` before ``now``."""
        with self._lock, Session(self.engine) as session:
            removed = queries.delete_positions_older_than(session, now - self.max_age_ms)
        if removed:
            logger.info('Evicted %d stale position(s)', removed)
        return removed
