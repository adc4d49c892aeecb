"""
Celery application configuration and setup.
"""

from celery import Celery

from marketplace.config.settings import settings

celery_app = Celery(
    "marketplace",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["marketplace.background.tasks.monitoring_tasks"],
)

celery_app.conf.update(
    # Task routing
    task_routes={
        "run_sla_evaluation_task": {"queue": "monitoring"},
        "expire_stale_dispatches_task": {"queue": "monitoring"},
    },
    # Worker configuration
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
    worker_hijack_root_logger=False,
    # Task configuration
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    result_expires=3600,
    task_default_queue="default",
    # Task time limits
    task_soft_time_limit=settings.CELERY_TASK_SOFT_TIME_LIMIT,
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,
    task_acks_late=False,
    task_reject_on_worker_lost=settings.CELERY_TASK_REJECT_ON_WORKER_LOST,
    # Beat scheduler configuration
    beat_schedule={
        "run-sla-evaluation": {
            "task": "run_sla_evaluation_task",
            "schedule": float(settings.SLA_EVALUATION_INTERVAL_SECONDS),
            "options": {"queue": "monitoring"},
        },
        "expire-stale-dispatches": {
            "task": "expire_stale_dispatches_task",
            "schedule": float(settings.DISPATCH_EXPIRY_SWEEP_INTERVAL_SECONDS),
            "options": {"queue": "monitoring"},
        },
    },
)


if __name__ == "__main__":
    celery_app.start()
