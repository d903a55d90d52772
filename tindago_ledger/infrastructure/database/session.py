"""Async SQLAlchemy engine and session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tindago_ledger.core.config import get_settings
from tindago_ledger.infrastructure.database.base import Base

_engine: AsyncEngine | None = None
AsyncSessionFactory: async_sessionmaker[AsyncSession] | None = None


def _install_sqlite_transaction_hooks(engine: AsyncEngine) -> None:
    """Let SQLAlchemy own BEGIN so savepoints work and writers serialize.

    pysqlite defers BEGIN until the first DML statement and mishandles
    SAVEPOINT; taking over the BEGIN and issuing it as IMMEDIATE makes each
    session hold the write lock for its whole unit of work.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(
    database_url: str,
    *,
    echo: bool = False,
    connect_timeout: float = 5.0,
    pool_size: int | None = None,
    max_overflow: int | None = None,
) -> AsyncEngine:
    engine_kwargs: dict[str, Any] = {
        "echo": echo,
        "future": True,
        "connect_args": {"timeout": connect_timeout},
    }
    is_sqlite = database_url.startswith("sqlite")
    if not is_sqlite:
        if pool_size is not None:
            engine_kwargs["pool_size"] = pool_size
        if max_overflow is not None:
            engine_kwargs["max_overflow"] = max_overflow

    engine = create_async_engine(database_url, **engine_kwargs)
    if is_sqlite:
        _install_sqlite_transaction_hooks(engine)
    return engine


def _build_engine() -> AsyncEngine:
    settings = get_settings()
    return build_engine(
        settings.database_url,
        echo=settings.database.echo or settings.debug,
        connect_timeout=settings.database.connect_timeout,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
    )


def get_engine() -> AsyncEngine:
    global _engine, AsyncSessionFactory
    if _engine is None:
        _engine = _build_engine()
        AsyncSessionFactory = async_sessionmaker(
            bind=_engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _engine


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    if AsyncSessionFactory is None:
        get_engine()

    assert AsyncSessionFactory is not None  # for mypy
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create database tables in development mode (migrations preferred)."""
    # imported late so the models register on Base without a cycle
    from tindago_ledger.db import models  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
