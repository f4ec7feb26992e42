"""
Embedded database configuration for the Arcade Market API.

Declares the SQLAlchemy base the models register on and builds the SQLite
engine used by the embedded executor.
"""

import os
import logging

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from arcade_market.config import Settings

logger = logging.getLogger(__name__)

# Base class for declarative models
Base = declarative_base()


def _is_memory_url(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def build_engine(settings: Settings) -> Engine:
    """
    Create the engine for ``settings.DATABASE_URL``.

    SQLite gets foreign keys switched on per connection so cascades behave
    like the hosted schema; in-memory databases share one connection.
    """
    url = settings.DATABASE_URL
    kwargs = {"echo": settings.DATABASE_ECHO}

    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_url(url):
            kwargs["poolclass"] = StaticPool
        else:
            # Create database directory if it doesn't exist
            db_dir = os.path.dirname(url.replace("sqlite:///", ""))
            if db_dir and not os.path.exists(db_dir):
                os.makedirs(db_dir, exist_ok=True)

    engine = create_engine(url, **kwargs)

    if url.startswith("sqlite"):

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            """Enable foreign key enforcement for SQLite."""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def load_metadata() -> MetaData:
    """
    Return the metadata with every model registered.
    """
    # Import models to ensure they're registered
    from arcade_market import models  # noqa: F401

    return Base.metadata
