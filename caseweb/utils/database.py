"""FastAPI dependency for case store sessions."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from .db_manager import db_manager


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a case store session for the duration of one request.

    Tests replace this dependency with a session on an in-memory database.
    """
    async for session in db_manager.get_async_session():
        yield session
