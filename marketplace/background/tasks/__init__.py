"""
Background tasks package.
"""

from .monitoring_tasks import expire_stale_dispatches_task, run_sla_evaluation_task

__all__ = [
    "expire_stale_dispatches_task",
    "run_sla_evaluation_task",
]
