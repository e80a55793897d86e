from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session

    from leavedesk.config import Settings


def create_db_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create a sync engine for the SQL document store.

    SQLite connections are shared across the server's worker threads, and an
    in-memory SQLite database is pinned to a single connection so every session
    sees the same data.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(url, echo=echo, pool_pre_ping=True)

    connect_args = {"check_same_thread": False}
    if url.database in (None, "", ":memory:"):
        return create_engine(url, echo=echo, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(url, echo=echo, connect_args=connect_args)


def engine_from_settings(settings: Settings) -> Engine:
    """Build the engine described by the application settings."""
    return create_db_engine(settings.database_url, echo=settings.debug)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to the given engine."""
    return sessionmaker(engine, expire_on_commit=False)
