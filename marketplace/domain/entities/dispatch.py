"""Dispatch domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from marketplace.domain.value_objects.dispatch_status import DispatchStatus


@dataclass
class Dispatch:
    """A time-boxed offer of a job to one contractor."""

    job_id: UUID
    contractor_id: UUID
    router_user_id: UUID
    token_hash: str
    expires_at: datetime
    id: UUID = field(default_factory=uuid4)
    status: DispatchStatus = DispatchStatus.PENDING
    responded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.status = DispatchStatus(self.status)
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)
        if not self.updated_at:
            self.updated_at = datetime.now(timezone.utc)

    def is_expired_at(self, now: datetime) -> bool:
        """Check if the offer window has closed."""
        return self.expires_at <= now

    def is_open_at(self, now: datetime) -> bool:
        """Check if the offer can still be answered."""
        return self.status == DispatchStatus.PENDING and not self.is_expired_at(now)
