"""
Main FastAPI application.

WHY: This is the entry point for the application. It configures middleware,
routes, exception handlers, and logging.
"""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from certledger.core.config import settings
from certledger.core.logging_config import setup_logging
from certledger.core.exceptions import AppException
from certledger.core.exception_handlers import (
    app_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    generic_exception_handler,
)
from certledger.db.session import create_tables
from certledger.middleware import RequestContextMiddleware
from certledger.api import certificates, ledger
from certledger.services.record_service import operations


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Certificate records on a key/value ledger",
        version=settings.VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_middleware(RequestContextMiddleware)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.VERSION,
        }

    @app.on_event("startup")
    async def startup_event():
        """Create the world state table for local databases."""
        if settings.CREATE_TABLES_ON_STARTUP:
            await create_tables()
            logger.info("World state tables ready")

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/api/docs",
            "operations": operations(),
        }

    app.include_router(ledger.router, prefix=settings.API_V1_PREFIX)
    app.include_router(certificates.router, prefix=settings.API_V1_PREFIX)

    return app


app = create_app()
