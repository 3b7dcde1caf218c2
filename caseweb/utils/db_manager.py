"""
Case store connection management.

The ``cases`` table belongs to the case-management application; the gateway
only reads it. PostgreSQL connections are opened with read-only transactions
and sessions are never committed.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..settings import DatabaseDriver, Settings, settings
from ..utils.logger import logger


def engine_options(config: Settings) -> dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` for the configured driver."""
    if config.database_driver == DatabaseDriver.SQLITE:
        return {"connect_args": {"check_same_thread": False}, "echo": config.debug}
    return {
        "connect_args": {"server_settings": {"default_transaction_read_only": "on"}},
        "echo": config.debug,
        "pool_size": config.database_pool_size,
        "pool_pre_ping": True,
    }


class DatabaseManager:
    """Lazily created async engine and session factory for the case store."""

    def __init__(self, config: Settings = settings) -> None:
        self._config = config
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def async_engine(self) -> AsyncEngine:
        """Get or create the async engine."""
        if self._engine is None:
            self._engine = create_async_engine(
                self._config.async_database_url, **engine_options(self._config)
            )
            logger.info(f"Case store engine created ({self._config.database_driver.value})")
        return self._engine

    @property
    def async_session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.async_engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._session_factory

    @asynccontextmanager
    async def get_async_session_context(self) -> AsyncGenerator[AsyncSession]:
        """
        Open a session for reading case rows.

        Usage:
            async with db_manager.get_async_session_context() as session:
                case = await session.get(Case, case_id)

        Yields:
            AsyncSession bound to the case store
        """
        async with self.async_session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                logger.error(f"Case store error: {e}")
                await session.rollback()
                raise

    async def get_async_session(self) -> AsyncGenerator[AsyncSession]:
        async with self.get_async_session_context() as session:
            yield session

    async def close(self) -> None:
        """Dispose the engine and its connection pool."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Case store engine disposed")

    def __repr__(self) -> str:
        return (
            f"<DatabaseManager(driver={self._config.database_driver.value}, "
            f"connected={self._engine is not None})>"
        )


db_manager = DatabaseManager()
