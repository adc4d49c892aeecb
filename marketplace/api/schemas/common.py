"""
Common API schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class BaseResponse(BaseModel):
    """Base response schema."""

    success: bool = True
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Body of every mapped domain error."""

    error: str
    message: str
    type: str
    code: Optional[str] = None


class TimestampMixin(BaseModel):
    """Mixin for timestamp fields."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
