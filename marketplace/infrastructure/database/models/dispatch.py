"""
Job dispatch SQLAlchemy model.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import relationship

from marketplace.domain.value_objects.dispatch_status import DispatchStatus

from .base import BaseModel


class DispatchModel(BaseModel):
    """Contractor offer database model."""

    __tablename__ = "job_dispatches"

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False, index=True)
    contractor_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    router_user_id = Column(Uuid(as_uuid=True), nullable=False)
    status = Column(
        String(16), default=DispatchStatus.PENDING.value, nullable=False, index=True
    )
    token_hash = Column(String(64), nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    responded_at = Column(DateTime(timezone=True))

    job = relationship("JobModel", back_populates="dispatches")

    __table_args__ = (
        Index("idx_job_dispatches_job_status", "job_id", "status"),
        Index("idx_job_dispatches_status_expiry", "status", "expires_at"),
        # First accept wins: only one ACCEPTED offer per job
        Index(
            "uq_job_dispatches_single_accepted",
            "job_id",
            unique=True,
            postgresql_where=text("status = 'ACCEPTED'"),
            sqlite_where=text("status = 'ACCEPTED'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Dispatch(id={self.id}, job_id={self.job_id}, status={self.status})>"
