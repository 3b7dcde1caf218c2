"""
Main API application module for caseweb.

This module creates and configures the FastAPI application serving the
DICOMweb gateway, its middleware and exception handlers.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from caseweb.api.exception_handlers import setup_exception_handlers
from caseweb.api.middleware import CaseIdPathMiddleware, UnhandledErrorMiddleware
from caseweb.api.routers import dicomweb
from caseweb.services.storage import StorageBackend, create_storage_backend
from caseweb.settings import Settings, settings
from caseweb.utils.db_manager import db_manager
from caseweb.utils.logger import logger


def create_app(config: Settings = settings, storage: StorageBackend | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to build the application from
        storage: Storage backend to serve from; built from ``config`` at startup when omitted

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open the storage backend on startup and release connections on shutdown."""
        backend = storage or create_storage_backend(config)
        app.state.storage = backend
        logger.info(
            f"Serving DICOMweb from {config.storage_backend.value} storage "
            f"(bucket '{config.storage_bucket}')"
        )

        try:
            yield
        finally:
            await backend.close()
            await db_manager.close()
            logger.info("Application shutdown")

    app = FastAPI(
        title="caseweb",
        description="Read-only DICOMweb gateway over case files in object storage",
        version="0.1.0",
        debug=config.debug,
        lifespan=lifespan,
        root_path=config.root_url if config.root_url != "/" else "",
    )

    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(CaseIdPathMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "Content-Length"],
    )

    setup_exception_handlers(app)

    app.include_router(dicomweb.router, tags=["DICOMweb"])

    return app


app = create_app()
