"""
Common dependencies for caseweb API endpoints.

The storage backend and case repository are built per request from objects
created in the application lifespan, so tests can substitute either one with
``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import MissingCaseIdError
from ..repositories import CaseRepository
from ..services.dicomweb import CaseDicomWebService
from ..services.storage import StorageBackend
from ..utils.database import get_async_session


def get_storage(request: Request) -> StorageBackend:
    """Get the storage backend created at application startup.

    Args:
        request: FastAPI request object

    Returns:
        The application's storage backend
    """
    return request.app.state.storage


async def get_case_repository(
    session: AsyncSession = Depends(get_async_session),
) -> CaseRepository:
    """Get a case repository bound to the request's session."""
    return CaseRepository(session)


def require_case_id(case_id: Annotated[str | None, Query(alias="caseId")] = None) -> str:
    """Read the mandatory ``caseId`` query parameter.

    Raises:
        MissingCaseIdError: If the parameter is absent or empty
    """
    if not case_id:
        raise MissingCaseIdError()
    return case_id


def get_dicomweb_service(
    repository: Annotated[CaseRepository, Depends(get_case_repository)],
    storage: Annotated[StorageBackend, Depends(get_storage)],
) -> CaseDicomWebService:
    """Build the DICOMweb service for one request."""
    return CaseDicomWebService(repository=repository, storage=storage)


CaseIdDep = Annotated[str, Depends(require_case_id)]
DicomWebServiceDep = Annotated[CaseDicomWebService, Depends(get_dicomweb_service)]
