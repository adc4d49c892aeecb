"""
API routes package.
"""

from .admin import router as admin_router
from .contractor import router as contractor_router
from .health import router as health_router
from .jobs import router as jobs_router
from .payments import router as payments_router
from .router import router as router_router
from .webhooks import router as webhooks_router

__all__ = [
    "admin_router",
    "contractor_router",
    "health_router",
    "jobs_router",
    "payments_router",
    "router_router",
    "webhooks_router",
]
