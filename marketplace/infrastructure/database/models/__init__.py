"""
Database models package.
"""

from .base import Base, BaseModel
from .assignment import JobAssignmentModel
from .dispatch import DispatchModel
from .job import JobModel
from .monitoring_event import MonitoringEventModel
from .payment_record import PaymentRecordModel

__all__ = [
    "Base",
    "BaseModel",
    "DispatchModel",
    "JobAssignmentModel",
    "JobModel",
    "MonitoringEventModel",
    "PaymentRecordModel",
]
