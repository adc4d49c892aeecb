"""
Job status transition table.

Every legal ``(from_status, event)`` pair is listed explicitly. Anything not
in the table is an illegal transition.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from marketplace.domain.value_objects.job_status import JobEvent, JobStatus


@dataclass(frozen=True)
class TransitionRule:
    """Target status and guards for one legal transition."""

    to_status: Optional[JobStatus]
    requires_escrow: bool = False
    requires_assignment: bool = False


_S = JobStatus
_E = JobEvent

TRANSITIONS: Dict[Tuple[JobStatus, JobEvent], TransitionRule] = {
    (_S.DRAFT, _E.PUBLISH): TransitionRule(_S.PUBLISHED),
    (_S.DRAFT, _E.OPEN_FOR_ROUTING): TransitionRule(
        _S.OPEN_FOR_ROUTING, requires_escrow=True
    ),
    (_S.PUBLISHED, _E.OPEN_FOR_ROUTING): TransitionRule(
        _S.OPEN_FOR_ROUTING, requires_escrow=True
    ),
    (_S.PUBLISHED, _E.ASSIGN): TransitionRule(_S.ASSIGNED, requires_assignment=True),
    (_S.OPEN_FOR_ROUTING, _E.ASSIGN): TransitionRule(
        _S.ASSIGNED, requires_assignment=True
    ),
    (_S.ASSIGNED, _E.START_WORK): TransitionRule(
        _S.IN_PROGRESS, requires_assignment=True
    ),
    (_S.ASSIGNED, _E.CONTRACTOR_COMPLETE): TransitionRule(
        _S.CONTRACTOR_COMPLETED, requires_escrow=True, requires_assignment=True
    ),
    (_S.IN_PROGRESS, _E.CONTRACTOR_COMPLETE): TransitionRule(
        _S.CONTRACTOR_COMPLETED, requires_escrow=True, requires_assignment=True
    ),
    (_S.CUSTOMER_REJECTED, _E.CONTRACTOR_COMPLETE): TransitionRule(
        _S.CONTRACTOR_COMPLETED, requires_escrow=True, requires_assignment=True
    ),
    (_S.CONTRACTOR_COMPLETED, _E.CUSTOMER_APPROVE): TransitionRule(
        _S.CUSTOMER_APPROVED
    ),
    (_S.CONTRACTOR_COMPLETED, _E.CUSTOMER_REJECT): TransitionRule(
        _S.CUSTOMER_REJECTED
    ),
    (_S.CONTRACTOR_COMPLETED, _E.FLAG_COMPLETION): TransitionRule(
        _S.COMPLETION_FLAGGED
    ),
    (_S.CUSTOMER_REJECTED, _E.FLAG_COMPLETION): TransitionRule(_S.COMPLETION_FLAGGED),
    (_S.CUSTOMER_APPROVED, _E.ROUTER_APPROVE): TransitionRule(_S.ROUTER_APPROVED),
    (_S.CUSTOMER_APPROVED, _E.FINALIZE): TransitionRule(_S.COMPLETED_APPROVED),
    (_S.ROUTER_APPROVED, _E.FINALIZE): TransitionRule(_S.COMPLETED_APPROVED),
    # Target is resolved from the job's stored pre-dispute status.
    (_S.DISPUTED, _E.RESOLVE_DISPUTE): TransitionRule(None),
}

for _status in JobStatus:
    if _status.is_disputable():
        TRANSITIONS[(_status, _E.OPEN_DISPUTE)] = TransitionRule(
            _S.DISPUTED, requires_escrow=True
        )


def find_transition(status: JobStatus, event: JobEvent) -> Optional[TransitionRule]:
    """Look up the rule for a transition, or None when it is illegal."""
    return TRANSITIONS.get((JobStatus(status), JobEvent(event)))


def allowed_events(status: JobStatus) -> list[JobEvent]:
    """Events that are legal from the given status."""
    return [event for (from_status, event) in TRANSITIONS if from_status == status]
