"""
FastAPI application factory.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketplace.api.middleware.error_handler import ErrorHandlerMiddleware
from marketplace.api.middleware.logging import LoggingMiddleware
from marketplace.api.routes import (
    admin,
    contractor,
    health,
    jobs,
    payments,
    router,
    webhooks,
)
from marketplace.config.database import dispose_engine
from marketplace.config.logging import configure_logging, get_logger
from marketplace.config.settings import settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Application startup",
        environment=settings.ENVIRONMENT,
        payment_provider=settings.PAYMENT_PROVIDER,
    )
    yield
    await dispose_engine()
    logger.info("Application shutdown")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    configure_logging()

    docs_enabled = settings.DEBUG or settings.ENABLE_SWAGGER
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Job lifecycle, routing and escrow service for the marketplace",
        openapi_url=f"{settings.API_PREFIX}/openapi.json" if docs_enabled else None,
        docs_url=f"{settings.API_PREFIX}/docs" if docs_enabled else None,
        redoc_url=f"{settings.API_PREFIX}/redoc" if docs_enabled else None,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add custom middleware
    ErrorHandlerMiddleware(app)
    LoggingMiddleware(app)

    # Add routes
    app.include_router(health.router, prefix=settings.API_PREFIX)
    app.include_router(jobs.router, prefix=settings.API_PREFIX)
    app.include_router(router.router, prefix=settings.API_PREFIX)
    app.include_router(contractor.router, prefix=settings.API_PREFIX)
    app.include_router(payments.router, prefix=settings.API_PREFIX)
    app.include_router(admin.router, prefix=settings.API_PREFIX)
    app.include_router(webhooks.router, prefix=settings.API_PREFIX)

    return app
