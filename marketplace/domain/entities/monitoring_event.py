"""Monitoring event domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from marketplace.domain.value_objects.monitoring import (
    MonitoringEventType,
    MonitoringRole,
)


@dataclass
class MonitoringEvent:
    """An append-only lifecycle observation; one per job and type."""

    job_id: UUID
    type: MonitoringEventType
    role: MonitoringRole
    user_id: Optional[UUID] = None
    id: UUID = field(default_factory=uuid4)
    created_at: Optional[datetime] = None
    handled_at: Optional[datetime] = None

    def __post_init__(self):
        self.type = MonitoringEventType(self.type)
        self.role = MonitoringRole(self.role)
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)


@dataclass(frozen=True)
class JobSummary:
    """Job fields shown next to a monitoring event."""

    job_id: UUID
    title: str
    status: str
    routing_status: str
    posted_at: Optional[datetime]
    routing_due_at: Optional[datetime]
    first_routed_at: Optional[datetime]


@dataclass(frozen=True)
class MonitoringEventView:
    """A monitoring event joined with its job summary."""

    event: MonitoringEvent
    job: Optional[JobSummary]
