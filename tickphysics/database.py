"""SQLModel database engine and session management."""

import logging

from sqlalchemy import text
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from tickphysics.config import settings

logger = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> dict:
    # SQLite needs check_same_thread=False; an in-memory DB must share one connection
    kwargs: dict = {"echo": False, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in url:
            kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))


def create_db_and_tables():
    """Create all tables. Called on startup when auto_create_tables is set."""
    # Import models so their tables are registered on the metadata
    import tickphysics.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def db_healthcheck() -> bool:
    """Return True when the database answers a trivial query."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database healthcheck failed: {e}")
        return False


def get_session() -> Session:
    """Dependency that yields a database session."""
    with Session(engine) as session:
        yield session
