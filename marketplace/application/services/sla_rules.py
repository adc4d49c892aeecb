"""
Routing SLA rules.

Pure functions over a job and a clock reading. ``effective_routing_due_at``
is the only place the default routing window is applied.
"""

from datetime import datetime, timedelta
from typing import Optional

from marketplace.domain.entities.assignment import JobAssignment
from marketplace.domain.entities.job import Job
from marketplace.domain.value_objects.job_status import JobStatus, RoutingStatus

DEFAULT_ROUTING_WINDOW_HOURS = 24
DEFAULT_APPROACHING_HOURS = 20


def effective_routing_due_at(
    job: Job, window_hours: int = DEFAULT_ROUTING_WINDOW_HOURS
) -> Optional[datetime]:
    """Explicit routing deadline, or posted_at plus the routing window."""
    if job.routing_due_at is not None:
        return job.routing_due_at
    if job.posted_at is not None:
        return job.posted_at + timedelta(hours=window_hours)
    return None


def is_awaiting_routing(job: Job) -> bool:
    """Unrouted, live and visible to routers."""
    return (
        not job.archived
        and job.routing_status == RoutingStatus.UNROUTED
        and job.status.is_routable()
        and job.posted_at is not None
    )


def is_approaching_routing_deadline(
    job: Job,
    now: datetime,
    approaching_hours: int = DEFAULT_APPROACHING_HOURS,
    window_hours: int = DEFAULT_ROUTING_WINDOW_HOURS,
) -> bool:
    """Past the warning mark but not yet due."""
    if not is_awaiting_routing(job):
        return False
    if now < job.posted_at + timedelta(hours=approaching_hours):
        return False
    return now < effective_routing_due_at(job, window_hours)


def is_routing_overdue(
    job: Job, now: datetime, window_hours: int = DEFAULT_ROUTING_WINDOW_HOURS
) -> bool:
    """Strictly past an explicit deadline, or at/after the default one."""
    if not is_awaiting_routing(job):
        return False
    if job.routing_due_at is not None:
        return now > job.routing_due_at
    return now >= effective_routing_due_at(job, window_hours)


def is_job_completed(job: Job, assignment: Optional[JobAssignment]) -> bool:
    """Any of the three completion signals counts; none outranks another."""
    return (
        job.status == JobStatus.COMPLETED_APPROVED
        or job.customer_approved_at is not None
        or (assignment is not None and assignment.completed_at is not None)
    )
