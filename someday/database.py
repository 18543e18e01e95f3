"""
Someday — Async Database Engine

Builds a single async engine from ``DATABASE_URL`` the first time it is
needed; the SQL store builds its sessions on top of it.

Nothing here connects at import time, so the ORM models and the in-memory
store can be imported (and tested) without a reachable database.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from someday.config import get_settings

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------ #
# Declarative base for all ORM models
# ------------------------------------------------------------------ #

class Base(DeclarativeBase):
    """Shared declarative base.

    Every SQLAlchemy model in the project should inherit from this class::

        from someday.database import Base

        class Profile(Base):
            __tablename__ = "profiles"
            ...
    """
    pass


# ------------------------------------------------------------------ #
# Pool configuration
# ------------------------------------------------------------------ #

_POOL_KWARGS = {
    "pool_size": 10,
    "max_overflow": 5,
    "pool_timeout": 30,
    "pool_recycle": 1800,
    "pool_pre_ping": True,
}


def normalise_database_url(url: str) -> str:
    """Upgrade a plain ``postgresql://`` scheme to the asyncpg dialect so
    that developers do not need to remember the driver prefix."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``url``.

    Queue-pool tuning only applies to server databases; SQLite (used by the
    test-suite through ``aiosqlite``) keeps SQLAlchemy's default pool.
    """
    url = normalise_database_url(url)
    pool_kwargs = {} if url.startswith("sqlite") else _POOL_KWARGS
    return create_async_engine(url, echo=echo, **pool_kwargs)


# ------------------------------------------------------------------ #
# Process-wide engine (lazy-initialised)
# ------------------------------------------------------------------ #

@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    settings = get_settings()
    engine = build_engine(
        settings.DATABASE_URL,
        echo=(settings.LOG_LEVEL == "DEBUG"),
    )
    logger.info("Database engine created from DATABASE_URL")
    return engine

