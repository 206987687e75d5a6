"""
Velora Games — Async database engine and session factory

The engine is built on first use rather than at import time, so the
engines, stores and their tests can be imported without a reachable
database.  Two connection strategies:

1. **Cloud Run** – ``cloud-sql-python-connector`` with IAM authentication,
   used when ``CLOUD_SQL_USE_UNIX_SOCKET`` is set and an instance
   connection name is configured.
2. **Everywhere else** – plain ``asyncpg`` from ``DATABASE_URL``.

The session and compatibility stores, the match store and the identity
service all draw their sessions from ``get_session_factory()``.
"""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import get_settings

logger = structlog.get_logger("velora.database")


class Base(DeclarativeBase):
    """Declarative base for the users, matches, session and compatibility tables."""


# Each session document write is one short statement; the pool stays small.
_POOL_KWARGS = {
    "pool_size": 10,
    "max_overflow": 5,
    "pool_timeout": 30,
    "pool_recycle": 1800,
    "pool_pre_ping": True,
}

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _cloud_sql_engine() -> AsyncEngine:
    from google.cloud.sql.connector import Connector

    settings = get_settings()
    connector = Connector()

    async def _connect():
        return await connector.connect_async(
            settings.CLOUD_SQL_INSTANCE_CONNECTION,
            "asyncpg",
            user=settings.DB_USER,
            password=settings.DB_PASSWORD,
            db=settings.DB_NAME,
            enable_iam_auth=True,
            command_timeout=settings.DB_COMMAND_TIMEOUT_SECONDS,
        )

    logger.info("database_engine_cloud_sql", instance=settings.CLOUD_SQL_INSTANCE_CONNECTION)
    return create_async_engine(
        "postgresql+asyncpg://",
        async_creator=_connect,
        echo=settings.LOG_LEVEL == "DEBUG",
        **_POOL_KWARGS,
    )


def _url_engine() -> AsyncEngine:
    settings = get_settings()
    url = settings.DATABASE_URL
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    logger.info("database_engine_url")
    return create_async_engine(
        url,
        echo=settings.LOG_LEVEL == "DEBUG",
        connect_args={"command_timeout": settings.DB_COMMAND_TIMEOUT_SECONDS},
        **_POOL_KWARGS,
    )


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        settings = get_settings()
        if settings.CLOUD_SQL_USE_UNIX_SOCKET and settings.CLOUD_SQL_INSTANCE_CONNECTION:
            _engine = _cloud_sql_engine()
        else:
            _engine = _url_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def dispose_engine() -> None:
    """Close the pool; the next ``get_engine`` call builds a fresh one."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
