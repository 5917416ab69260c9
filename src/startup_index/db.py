"""Local SQLite storage for saved startups and free analysis counters.

The database file is ``startups.db`` inside the configured data directory
(``~/.startup-index`` unless DATA_DIR is set). The engine is created lazily on
first use so that settings read from the environment take effect, and is
disposed by ``close_db`` when the server shuts down.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import get_settings

logger = logging.getLogger(__name__)

DB_FILENAME = "startups.db"

# Applied to every new connection. Foreign keys tie snapshots and pitch deck
# records to their startup; WAL lets tool calls read while another writes.
CONNECTION_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA busy_timeout=5000",
    "PRAGMA foreign_keys=ON",
)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def database_path() -> Path:
    """Path of the startups database, creating the data directory if needed."""
    data_dir = Path(get_settings().data_dir).expanduser()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / DB_FILENAME


def _apply_pragmas(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    for pragma in CONNECTION_PRAGMAS:
        cursor.execute(pragma)
    cursor.close()


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = create_async_engine(f"sqlite+aiosqlite:///{database_path()}")
        event.listen(_engine.sync_engine, "connect", _apply_pragmas)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory used by the store; one session per store operation."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def init_db():
    """Create the startup, snapshot, pitch deck and usage tables if missing."""
    from .sqlmodels import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Startup database ready at %s", database_path())


async def close_db():
    """Dispose of the engine. The next store call opens a fresh one."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
