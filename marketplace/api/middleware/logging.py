"""
Request/Response logging middleware.

The request id and the caller's X-User-Id are bound to structlog's context
for the lifetime of the request, so every service log line carries them.
"""

import time
import uuid
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response

from marketplace.config.logging import get_logger
from marketplace.infrastructure.monitoring.metrics import record_api_request

logger = get_logger(__name__)


def _route_template(request: Request) -> str:
    """Path template of the matched route, so metrics do not explode on ids."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class LoggingMiddleware:
    """Request/Response logging middleware for FastAPI."""

    def __init__(self, app: FastAPI):
        self.app = app
        self.add_logging_middleware()

    def add_logging_middleware(self) -> None:
        @self.app.middleware("http")
        async def logging_middleware(request: Request, call_next: Callable) -> Response:
            request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
            request.state.request_id = request_id

            structlog.contextvars.clear_contextvars()
            structlog.contextvars.bind_contextvars(
                request_id=request_id,
                actor_id=request.headers.get("x-user-id"),
            )
            started = time.perf_counter()
            logger.debug("Request started", method=request.method, path=request.url.path)

            try:
                response = await call_next(request)
            except Exception as e:
                elapsed = time.perf_counter() - started
                record_api_request(request.method, _route_template(request), 500, elapsed)
                logger.error(
                    "Request failed",
                    method=request.method,
                    path=request.url.path,
                    error=str(e),
                    process_time=f"{elapsed:.4f}s",
                )
                raise
            finally:
                structlog.contextvars.unbind_contextvars("request_id", "actor_id")

            elapsed = time.perf_counter() - started
            record_api_request(
                request.method, _route_template(request), response.status_code, elapsed
            )
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "Request completed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                process_time=f"{elapsed:.4f}s",
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{elapsed:.4f}"
            return response
