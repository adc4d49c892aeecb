"""
Monitoring event value objects.
"""

from enum import Enum


class MonitoringEventType(str, Enum):
    """Lifecycle events recorded by the SLA monitor."""

    JOB_APPROACHING_24H = "JOB_APPROACHING_24H"
    JOB_OVERDUE_UNROUTED = "JOB_OVERDUE_UNROUTED"
    JOB_ROUTED = "JOB_ROUTED"
    JOB_COMPLETED = "JOB_COMPLETED"


class MonitoringRole(str, Enum):
    """Audience an event is attributed to."""

    ADMIN = "ADMIN"
    ROUTER = "ROUTER"
    JOB_POSTER = "JOB_POSTER"
