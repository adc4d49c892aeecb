"""
Monitoring event SQLAlchemy model.
"""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
)

from .base import BaseModel


class MonitoringEventModel(BaseModel):
    """Append-only SLA monitoring event."""

    __tablename__ = "monitoring_events"

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False)
    type = Column(String(32), nullable=False)
    role = Column(String(16), nullable=False)
    user_id = Column(Uuid(as_uuid=True))
    handled_at = Column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("job_id", "type", name="uq_monitoring_events_job_type"),
        Index("idx_monitoring_events_created", "created_at", "id"),
        Index("idx_monitoring_events_type", "type", "handled_at"),
    )

    def __repr__(self) -> str:
        return f"<MonitoringEvent(job_id={self.job_id}, type={self.type})>"
