"""
Database package.
"""

from .connection import get_database_health
from .utils import as_utc, dialect_insert

__all__ = [
    "as_utc",
    "dialect_insert",
    "get_database_health",
]
