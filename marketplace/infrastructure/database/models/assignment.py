"""
Job assignment SQLAlchemy model.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from .base import BaseModel


class JobAssignmentModel(BaseModel):
    """Job assignment database model."""

    __tablename__ = "job_assignments"

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False, unique=True)
    contractor_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    status = Column(String(16), default="ASSIGNED", nullable=False)
    completed_at = Column(DateTime(timezone=True))

    job = relationship("JobModel", back_populates="assignment")
