"""
Error handling middleware.

Maps domain exceptions to HTTP responses with a uniform body:
``{"error", "message", "type", "code"}``.
"""

import traceback

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from marketplace.config.logging import get_logger
from marketplace.domain.exceptions import (
    ConflictError,
    ExpiredError,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from marketplace.infrastructure.monitoring.metrics import record_error

logger = get_logger(__name__)


def _error_body(error: str, message: str, error_type: str, code=None) -> dict:
    return {"error": error, "message": message, "type": error_type, "code": code}


class ErrorHandlerMiddleware:
    """Error handling middleware for FastAPI."""

    def __init__(self, app: FastAPI):
        self.app = app
        self.add_error_handlers()

    def add_error_handlers(self) -> None:
        """Add custom error handlers to FastAPI app."""
        add_error_handlers(self.app)


def add_error_handlers(app: FastAPI) -> None:
    """Add custom error handlers to FastAPI app."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning("Validation error", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=400,
            content=_error_body(
                "Validation Error", str(exc), "validation_error", exc.code
            ),
        )

    @app.exception_handler(NotFoundError)
    async def not_found_error_handler(request: Request, exc: NotFoundError):
        logger.info("Not found", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=404,
            content=_error_body("Not Found", str(exc), "not_found", exc.code),
        )

    @app.exception_handler(ConflictError)
    async def conflict_error_handler(request: Request, exc: ConflictError):
        logger.info(
            "Conflict", error=str(exc), code=exc.code, path=request.url.path
        )
        return JSONResponse(
            status_code=409,
            content=_error_body("Conflict", str(exc), "conflict", exc.code),
        )

    @app.exception_handler(ExpiredError)
    async def expired_error_handler(request: Request, exc: ExpiredError):
        logger.info("Expired", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=410,
            content=_error_body("Expired", str(exc), "expired", exc.code),
        )

    @app.exception_handler(ProviderError)
    async def provider_error_handler(request: Request, exc: ProviderError):
        logger.error("Provider error", error=str(exc), path=request.url.path)
        record_error("provider_error", "api")
        return JSONResponse(
            status_code=502,
            content=_error_body(
                "Provider Error", str(exc), "provider_error", exc.code
            ),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error", error=str(exc), path=request.url.path)
        record_error("database_error", "api")
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "Database Error", "A database error occurred", "database_error"
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body("HTTP Error", str(exc.detail), "http_error"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            error=str(exc),
            path=request.url.path,
            traceback=traceback.format_exc(),
        )
        record_error(type(exc).__name__, "api")
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "Internal Server Error",
                "An unexpected error occurred",
                "internal_error",
            ),
        )
