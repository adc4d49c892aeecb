"""
Domain entities package.
"""

from .assignment import JobAssignment
from .dispatch import Dispatch
from .job import Job
from .monitoring_event import JobSummary, MonitoringEvent, MonitoringEventView
from .payment_record import PaymentRecord

__all__ = [
    "Dispatch",
    "Job",
    "JobAssignment",
    "JobSummary",
    "MonitoringEvent",
    "MonitoringEventView",
    "PaymentRecord",
]
