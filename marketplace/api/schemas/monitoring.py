"""
SLA monitoring API schemas.
"""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from marketplace.application.services.sla_monitor import SlaEvaluationResult
from marketplace.domain.entities.monitoring_event import (
    MonitoringEvent,
    MonitoringEventView,
)
from marketplace.domain.value_objects.monitoring import (
    MonitoringEventType,
    MonitoringRole,
)


class JobSummarySchema(BaseModel):
    job_id: UUID
    title: str
    status: str
    routing_status: str
    posted_at: Optional[datetime] = None
    routing_due_at: Optional[datetime] = None
    first_routed_at: Optional[datetime] = None


class MonitoringEventSchema(BaseModel):
    id: UUID
    job_id: UUID
    type: MonitoringEventType
    role: MonitoringRole
    user_id: Optional[UUID] = None
    created_at: datetime
    handled_at: Optional[datetime] = None
    job: Optional[JobSummarySchema] = None

    @classmethod
    def from_event(
        cls, event: MonitoringEvent, job: Optional[JobSummarySchema] = None
    ) -> "MonitoringEventSchema":
        return cls(
            id=event.id,
            job_id=event.job_id,
            type=event.type,
            role=event.role,
            user_id=event.user_id,
            created_at=event.created_at,
            handled_at=event.handled_at,
            job=job,
        )

    @classmethod
    def from_view(cls, view: MonitoringEventView) -> "MonitoringEventSchema":
        job = None
        if view.job is not None:
            job = JobSummarySchema(
                job_id=view.job.job_id,
                title=view.job.title,
                status=view.job.status,
                routing_status=view.job.routing_status,
                posted_at=view.job.posted_at,
                routing_due_at=view.job.routing_due_at,
                first_routed_at=view.job.first_routed_at,
            )
        return cls.from_event(view.event, job)


class SlaEvaluationResponse(BaseModel):
    evaluated_at: datetime
    candidates: int
    emitted: Dict[MonitoringEventType, int]
    total_emitted: int

    @classmethod
    def from_result(cls, result: SlaEvaluationResult) -> "SlaEvaluationResponse":
        return cls(
            evaluated_at=result.evaluated_at,
            candidates=result.candidates,
            emitted=result.counts,
            total_emitted=result.total_emitted,
        )


class MonitoringEventsPage(BaseModel):
    items: List[MonitoringEventSchema]
    next_cursor: Optional[UUID] = None
    evaluation: Optional[SlaEvaluationResponse] = None
