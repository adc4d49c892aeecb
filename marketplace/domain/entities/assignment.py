"""Job assignment domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

ASSIGNED = "ASSIGNED"
COMPLETED = "COMPLETED"


@dataclass
class JobAssignment:
    """The single contractor that owns a job's work."""

    job_id: UUID
    contractor_id: UUID
    id: UUID = field(default_factory=uuid4)
    status: str = ASSIGNED
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None
