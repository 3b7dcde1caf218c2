"""Base repository with common read operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel


ModelT = TypeVar("ModelT", bound=SQLModel)


class BaseRepository(Generic[ModelT]):
    """Base repository providing read-only database operations."""

    def __init__(self, session: AsyncSession, model_class: type[ModelT]):
        """Initialize repository with session and model class.

        Args:
            session: Database session
            model_class: SQLModel class this repository operates on
        """
        self.session = session
        self.model_class = model_class

    async def get_optional(self, id: Any) -> ModelT | None:
        """Get entity by ID or return None.

        Args:
            id: Entity ID

        Returns:
            Found entity or None
        """
        return await self.session.get(self.model_class, id)
