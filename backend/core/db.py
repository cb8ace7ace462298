"""
Upkeep — Core database layer.

Provides the SQLAlchemy engine, session factory, declarative base,
and the FastAPI get_db dependency.

Schema changes are applied with Alembic (backend/alembic/); create_all()
in the app lifespan covers fresh databases.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from core.config import settings
from core.base import Base  # Single Base instance shared across all models

_IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _engine_options(database_url: str) -> dict:
    """Pick pool and connect args for the configured backend.

    An in-memory SQLite database lives and dies with its connection, so every
    session must share one (StaticPool). File databases get a fresh connection
    per session like any other backend.
    """
    if not database_url.startswith("sqlite"):
        return {}
    options = {"connect_args": {"check_same_thread": False}}
    options["poolclass"] = StaticPool if database_url in _IN_MEMORY_URLS else NullPool
    return options


engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url),
)
if settings.database_url.startswith("sqlite") and settings.database_url not in _IN_MEMORY_URLS:
    with engine.connect() as conn:
        conn.execute(text("PRAGMA journal_mode=WAL"))
        conn.execute(text("PRAGMA busy_timeout=5000"))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for database sessions."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create any missing tables for every imported model."""
    Base.metadata.create_all(bind=engine)
