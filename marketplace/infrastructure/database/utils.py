"""
Dialect helpers shared by the repositories.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_insert(session: AsyncSession, model):
    """Return an INSERT construct that supports ON CONFLICT for the bound dialect."""
    dialect_name = session.bind.dialect.name
    if dialect_name == "postgresql":
        return postgresql.insert(model)
    if dialect_name == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"ON CONFLICT inserts are not supported on {dialect_name}")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
