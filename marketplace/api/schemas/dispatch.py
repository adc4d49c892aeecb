"""
Routing and dispatch API schemas.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from marketplace.application.services.dispatch_fanout_engine import (
    DispatchResponseResult,
    FanoutResult,
)
from marketplace.domain.entities.dispatch import Dispatch
from marketplace.domain.value_objects.dispatch_status import (
    DispatchDecision,
    DispatchStatus,
)

from .job import JobResponse


class ApplyRoutingRequest(BaseModel):
    job_id: UUID
    contractor_ids: List[UUID] = Field(..., description="1 to 5 contractor ids")


class AdminRouteRequest(BaseModel):
    contractor_ids: List[UUID] = Field(..., description="1 to 5 contractor ids")


class DispatchSchema(BaseModel):
    id: UUID
    job_id: UUID
    contractor_id: UUID
    router_user_id: UUID
    status: DispatchStatus
    expires_at: datetime
    responded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, dispatch: Dispatch) -> "DispatchSchema":
        return cls(
            id=dispatch.id,
            job_id=dispatch.job_id,
            contractor_id=dispatch.contractor_id,
            router_user_id=dispatch.router_user_id,
            status=dispatch.status,
            expires_at=dispatch.expires_at,
            responded_at=dispatch.responded_at,
            created_at=dispatch.created_at,
        )


class IssuedDispatchSchema(DispatchSchema):
    """A new offer; ``token`` is shown only in this response."""

    token: str


class FanoutResponse(BaseModel):
    job: JobResponse
    dispatches: List[IssuedDispatchSchema]
    skipped_contractor_ids: List[UUID] = []

    @classmethod
    def from_result(cls, result: FanoutResult) -> "FanoutResponse":
        return cls(
            job=JobResponse.from_entity(result.job),
            dispatches=[
                IssuedDispatchSchema(
                    **DispatchSchema.from_entity(issued.dispatch).model_dump(),
                    token=issued.token,
                )
                for issued in result.issued
            ],
            skipped_contractor_ids=result.skipped_contractor_ids,
        )


class DispatchRespondRequest(BaseModel):
    token: str = Field(..., min_length=1)
    decision: DispatchDecision
    estimated_completion_date: Optional[datetime] = None


class DispatchRespondResponse(BaseModel):
    dispatch: DispatchSchema
    job: Optional[JobResponse] = None
    assignment_id: Optional[UUID] = None
    expired_siblings: int = 0

    @classmethod
    def from_result(cls, result: DispatchResponseResult) -> "DispatchRespondResponse":
        return cls(
            dispatch=DispatchSchema.from_entity(result.dispatch),
            job=JobResponse.from_entity(result.job) if result.job else None,
            assignment_id=result.assignment.id if result.assignment else None,
            expired_siblings=result.expired_siblings,
        )


class ActiveClaimsResponse(BaseModel):
    router_id: UUID
    active_claims: int
