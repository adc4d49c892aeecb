"""
Database repositories package.
"""

from .assignment_repository import AssignmentRepository
from .dispatch_repository import DispatchRepository
from .job_repository import JobRepository
from .monitoring_event_repository import MonitoringEventRepository
from .payment_record_repository import PaymentRecordRepository
from .transaction_repository import TransactionService

__all__ = [
    "AssignmentRepository",
    "DispatchRepository",
    "JobRepository",
    "MonitoringEventRepository",
    "PaymentRecordRepository",
    "TransactionService",
]
