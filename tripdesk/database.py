"""
TripDesk Backend — Database Engine & Session Management
=========================================================

What:  Async SQLAlchemy engine, session factory, and declarative base.
How:   A Database object owns one engine (connection pool) and one session
       factory. It is built once by the application factory and shared by
       the repository, the health check and schema initialization.
Who:   Constructed in main.create_app(); used by services.repository.

Connection Pooling:
    Server databases (Postgres via asyncpg) get an explicit pool:
        pool_size / max_overflow from settings, pool_recycle=3600.
    SQLite (aiosqlite) keeps SQLAlchemy's default pool for the dialect.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from tripdesk.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic reads as `target_metadata`.
    """
    pass


class Database:
    """Owns the async engine and hands out short-lived sessions."""

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        engine_kwargs: Dict[str, Any] = {
            "pool_pre_ping": pool_pre_ping,
            "echo": echo,
        }
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                {
                    "pool_size": pool_size,
                    "max_overflow": max_overflow,
                    "pool_recycle": 3600,
                }
            )
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False: rows stay readable after the session commits
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a session that commits on success and rolls back on error.

        Every repository call runs inside exactly one of these, so a call
        either commits fully or leaves no trace.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def dispose(self) -> None:
        """Close all pooled connections (application shutdown)."""
        await self.engine.dispose()
