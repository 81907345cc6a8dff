"""
Database configuration and session management.

Uses SQLite on-device by default; any SQLAlchemy URL works via
JOURNAL_DATABASE_URL / DATABASE_URL.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool

from config import database_config as config

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _engine_kwargs() -> dict:
    kwargs = dict(config.engine_kwargs)
    # An in-memory SQLite database lives and dies with its connection
    if config.database_url in IN_MEMORY_URLS:
        kwargs["poolclass"] = StaticPool
    return kwargs


# Create engine
engine = create_engine(config.database_url, **_engine_kwargs())

# Create session factory
session_factory = sessionmaker(bind=engine)

# Create scoped session for thread safety
Session = scoped_session(session_factory)

# Create declarative base for models
Base = declarative_base()


def init_database():
    """
    Initialize database tables.

    Safe to call multiple times (uses checkfirst=True).
    """
    from models import KeyValue

    KeyValue.__table__.create(engine, checkfirst=True)


def close_all_sessions():
    """Close all sessions (useful for cleanup)."""
    Session.remove()
