"""
Configuration package.
"""

from .database import (
    create_engine,
    create_task_session_factory,
    dispose_engine,
    get_async_session_factory,
    get_db_session,
)
from .logging import configure_logging, get_logger
from .settings import settings

__all__ = [
    "settings",
    # Database
    "create_engine",
    "create_task_session_factory",
    "dispose_engine",
    "get_async_session_factory",
    "get_db_session",
    # Logging
    "configure_logging",
    "get_logger",
]
