"""
Exception handlers for converting domain exceptions to HTTP responses.

Error bodies use the ``{"error": message}`` shape expected by viewer clients.
Exceptions without a handler here are converted by
``caseweb.api.middleware.UnhandledErrorMiddleware``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request, status
from fastapi.responses import JSONResponse

from caseweb.utils.logger import logger

if TYPE_CHECKING:
    from fastapi import FastAPI


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def setup_exception_handlers(app: FastAPI) -> None:
    """Setup exception handlers using decorators.

    Args:
        app: FastAPI application instance
    """
    from caseweb.exceptions.domain import EntityNotFoundError, StorageError, ValidationError

    @app.exception_handler(ValidationError)
    async def handle_validation_error(_: Request, exc: ValidationError) -> JSONResponse:
        """Convert ValidationError to 400 response."""
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc) or "Invalid request")

    @app.exception_handler(EntityNotFoundError)
    async def handle_entity_not_found(_: Request, exc: EntityNotFoundError) -> JSONResponse:
        """Convert EntityNotFoundError to 404 response."""
        return error_response(status.HTTP_404_NOT_FOUND, str(exc) or "Resource not found")

    @app.exception_handler(StorageError)
    async def handle_storage_error(_: Request, exc: StorageError) -> JSONResponse:
        """Convert StorageError to 500 response."""
        logger.error(f"Storage failure: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Storage error")
