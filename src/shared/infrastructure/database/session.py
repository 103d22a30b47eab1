"""
Database engine and session factory.

One lazily created async engine per process. Request handlers receive an
AsyncSession through the ``get_db_session`` dependency; composite writes are
wrapped in a ``SQLAlchemyUnitOfWork`` on top of that session.
"""
from __future__ import annotations

from typing import AsyncGenerator, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.shared.config import get_settings
from src.shared.logging import get_logger

logger = get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _on_sqlite_connect(dbapi_connection, connection_record) -> None:
    # Driver-level transaction handling is off; _on_sqlite_begin emits BEGIN so SAVEPOINTs nest.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_sqlite_begin(conn) -> None:
    conn.exec_driver_sql("BEGIN")


def _create_engine() -> AsyncEngine:
    settings = get_settings()

    if settings.is_sqlite:
        # A single shared connection keeps ":memory:" databases alive across sessions.
        engine = create_async_engine(
            settings.database_url,
            echo=settings.debug and not settings.is_prod,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        event.listen(engine.sync_engine, "connect", _on_sqlite_connect)
        event.listen(engine.sync_engine, "begin", _on_sqlite_begin)
    else:
        engine = create_async_engine(
            settings.database_url,
            echo=settings.debug and not settings.is_prod,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=30,
            pool_recycle=3600,
            pool_pre_ping=True,
        )

    logger.info(
        "Database engine created",
        dialect=engine.dialect.name,
        pool_size=None if settings.is_sqlite else settings.database_pool_size,
    )
    return engine


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = _create_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one AsyncSession per request.

    Anything left uncommitted when the request ends is rolled back.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_models(*, drop: bool = False) -> None:
    """Create (optionally recreate) all tables. Used for local/dev/test runs only."""
    # Model modules register themselves on Base.metadata when imported.
    from src.shared.infrastructure.database.models import load_models
    from src.shared.infrastructure.database.base_model import Base

    load_models()
    async with get_engine().begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema synchronised", dropped=drop)


async def ping() -> None:
    """Round-trip a trivial statement; raises when the store is unreachable."""
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_factory = None
