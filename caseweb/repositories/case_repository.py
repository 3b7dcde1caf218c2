"""Repository for reading case rows from the case store."""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from caseweb.exceptions import CaseNotFoundError
from caseweb.models import Case
from caseweb.repositories.base import BaseRepository


class CaseRepository(BaseRepository[Case]):
    """Repository for Case lookups."""

    def __init__(self, session: AsyncSession):
        """Initialize case repository with session."""
        super().__init__(session, Case)

    async def get_optional(self, id: str | uuid.UUID) -> Case | None:
        """Get a case by identifier or return None.

        Identifiers that are not UUIDs cannot exist in the case store and are
        treated as unknown without querying it.
        """
        if not isinstance(id, uuid.UUID):
            try:
                id = uuid.UUID(id)
            except ValueError:
                return None
        return await super().get_optional(id)

    async def get(self, case_id: str | uuid.UUID) -> Case:
        """Get a case by identifier.

        Args:
            case_id: Case identifier

        Returns:
            The case row

        Raises:
            CaseNotFoundError: If no case has this identifier
        """
        case = await self.get_optional(case_id)
        if case is None:
            raise CaseNotFoundError(str(case_id))
        return case
