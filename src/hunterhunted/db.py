from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine


def make_engine(database_url: str) -> Engine:
    """Create the relay's engine. In-memory SQLite shares a single connection."""
    if database_url in ('sqlite://', 'sqlite:///:memory:'):
        return create_engine(
            database_url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
    if database_url.startswith('sqlite'):
        return create_engine(database_url, connect_args={'check_same_thread': False})
    return create_engine(database_url)


def create_db_and_tables(engine: Engine) -> None:
    import hunterhunted.models  # noqa: F401 (registers all tables on metadata)

    SQLModel.metadata.create_all(engine)
