"""
Routing SLA monitor.

Scans jobs and writes lifecycle monitoring events. Every candidate event is
offered to a single multi-row insert that ignores (job_id, type) conflicts,
so re-running an evaluation, or running two at once, never duplicates an
event.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from marketplace.application.interfaces.repositories import (
    JobRepositoryInterface,
    MonitoringEventRepositoryInterface,
)
from marketplace.application.services.sla_rules import (
    is_approaching_routing_deadline,
    is_job_completed,
    is_routing_overdue,
)
from marketplace.config.logging import get_logger
from marketplace.config.settings import settings
from marketplace.domain.entities.job import Job
from marketplace.domain.entities.monitoring_event import MonitoringEvent
from marketplace.domain.value_objects.job_status import RoutingStatus
from marketplace.domain.value_objects.monitoring import (
    MonitoringEventType,
    MonitoringRole,
)
from marketplace.infrastructure.monitoring.metrics import (
    SLA_EVALUATION_DURATION,
    record_monitoring_event,
)

logger = get_logger(__name__)


@dataclass
class SlaEvaluationResult:
    """Events written by one evaluation pass, counted per type."""

    evaluated_at: datetime
    counts: Dict[MonitoringEventType, int] = field(
        default_factory=lambda: {event_type: 0 for event_type in MonitoringEventType}
    )
    candidates: int = 0

    @property
    def total_emitted(self) -> int:
        return sum(self.counts.values())


class SlaMonitor:
    """Evaluates routing deadlines and lifecycle milestones."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        event_repo: MonitoringEventRepositoryInterface,
        approaching_hours: Optional[int] = None,
        window_hours: Optional[int] = None,
    ):
        self.job_repo = job_repo
        self.event_repo = event_repo
        self.approaching_hours = approaching_hours or settings.SLA_APPROACHING_HOURS
        self.window_hours = window_hours or settings.ROUTING_WINDOW_HOURS

    async def evaluate(self, now: Optional[datetime] = None) -> SlaEvaluationResult:
        """Run one evaluation pass at ``now``."""
        now = now or datetime.now(timezone.utc)
        started = time.perf_counter()

        candidates: List[MonitoringEvent] = []
        candidates.extend(await self._deadline_events(now))
        candidates.extend(await self._routed_events(now))
        candidates.extend(await self._completed_events(now))

        inserted = await self.event_repo.insert_ignoring_duplicates(candidates)

        result = SlaEvaluationResult(evaluated_at=now, candidates=len(candidates))
        for event in inserted:
            result.counts[event.type] += 1
            record_monitoring_event(event.type.value)

        SLA_EVALUATION_DURATION.observe(time.perf_counter() - started)
        logger.info(
            "SLA evaluation finished",
            evaluated_at=now.isoformat(),
            candidates=len(candidates),
            emitted=result.total_emitted,
            counts={k.value: v for k, v in result.counts.items()},
        )
        return result

    async def _deadline_events(self, now: datetime) -> List[MonitoringEvent]:
        events = []
        for job in await self.job_repo.find_unrouted_open():
            if is_routing_overdue(job, now, self.window_hours):
                events.append(
                    self._event(job, MonitoringEventType.JOB_OVERDUE_UNROUTED, now)
                )
            if is_approaching_routing_deadline(
                job, now, self.approaching_hours, self.window_hours
            ):
                events.append(
                    self._event(job, MonitoringEventType.JOB_APPROACHING_24H, now)
                )
        return events

    async def _routed_events(self, now: datetime) -> List[MonitoringEvent]:
        events = []
        for job in await self.job_repo.find_routed_missing_event():
            if job.routing_status == RoutingStatus.ROUTED_BY_ADMIN:
                role, user_id = MonitoringRole.ADMIN, job.admin_routed_by_id
            elif job.claimed_by_user_id is not None:
                role, user_id = MonitoringRole.ROUTER, job.claimed_by_user_id
            else:
                role, user_id = MonitoringRole.ADMIN, None
            events.append(
                self._event(job, MonitoringEventType.JOB_ROUTED, now, role, user_id)
            )
        return events

    async def _completed_events(self, now: datetime) -> List[MonitoringEvent]:
        events = []
        for job, assignment in await self.job_repo.find_completion_candidates():
            if not is_job_completed(job, assignment):
                continue
            if job.job_poster_user_id is not None:
                role, user_id = MonitoringRole.JOB_POSTER, job.job_poster_user_id
            else:
                role, user_id = MonitoringRole.ADMIN, None
            events.append(
                self._event(job, MonitoringEventType.JOB_COMPLETED, now, role, user_id)
            )
        return events

    @staticmethod
    def _event(
        job: Job,
        event_type: MonitoringEventType,
        now: datetime,
        role: MonitoringRole = MonitoringRole.ADMIN,
        user_id=None,
    ) -> MonitoringEvent:
        return MonitoringEvent(
            job_id=job.id, type=event_type, role=role, user_id=user_id, created_at=now
        )
