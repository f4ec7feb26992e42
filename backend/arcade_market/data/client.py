"""
Database facade and backend selection.

``create_database`` runs once at startup and picks the executor; everything
else talks to the returned :class:`Database` and never branches on which
backend it received.
"""

import logging
from typing import Optional

from sqlalchemy.engine import Engine

from arcade_market.config import Settings
from arcade_market.data.embedded import EmbeddedExecutor
from arcade_market.data.executor import Executor
from arcade_market.data.query import Table
from arcade_market.data.remote import RemoteExecutor
from arcade_market.database import build_engine, load_metadata

logger = logging.getLogger(__name__)


class Database:
    """Backend-agnostic entry point: ``db.table("shops").select(...)``."""

    def __init__(self, executor: Executor):
        self._executor = executor

    @property
    def backend(self) -> str:
        """Name of the selected backend, for health reporting and logs."""
        return self._executor.name

    def table(self, name: str) -> Table:
        return Table(self._executor, name)

    from_ = table

    async def initialize(self) -> None:
        await self._executor.initialize()

    async def close(self) -> None:
        await self._executor.close()


def create_database(settings: Settings, engine: Optional[Engine] = None) -> Database:
    """
    Build the database for this process.

    The hosted backend is used when real credentials are configured;
    otherwise the embedded SQLite database at ``settings.DATABASE_URL``.
    """
    if settings.remote_backend_configured():
        logger.info(f"Using remote database at {settings.SUPABASE_PROJECT_URL}")
        executor = RemoteExecutor(
            settings.SUPABASE_PROJECT_URL,
            settings.SUPABASE_API_KEY,
            timeout=settings.SUPABASE_TIMEOUT,
        )
        return Database(executor)

    logger.info(f"Remote database not configured, using embedded database ({settings.DATABASE_URL})")
    executor = EmbeddedExecutor(engine or build_engine(settings), load_metadata())
    return Database(executor)
