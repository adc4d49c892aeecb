"""Contractor endpoints: open offers and answering them."""

from typing import List

from fastapi import APIRouter, Depends

from marketplace.api.dependencies import (
    CurrentUserDep,
    get_list_offers_use_case,
    get_respond_use_case,
)
from marketplace.api.schemas.dispatch import (
    DispatchRespondRequest,
    DispatchRespondResponse,
    DispatchSchema,
)
from marketplace.application.use_cases import (
    ListOffersUseCase,
    RespondToDispatchRequest,
    RespondToDispatchUseCase,
)

router = APIRouter(prefix="/contractor", tags=["contractor"])


@router.get("/offers", response_model=List[DispatchSchema])
async def list_offers(
    contractor_id: CurrentUserDep,
    use_case: ListOffersUseCase = Depends(get_list_offers_use_case),
):
    """Pending, unexpired offers addressed to the caller."""
    offers = await use_case.execute(contractor_id)
    return [DispatchSchema.from_entity(offer) for offer in offers]


@router.post("/dispatches/respond", response_model=DispatchRespondResponse)
async def respond_to_dispatch(
    response: DispatchRespondRequest,
    use_case: RespondToDispatchUseCase = Depends(get_respond_use_case),
):
    """Accept or decline an offer by its token; the first accept wins."""
    result = await use_case.execute(
        RespondToDispatchRequest(
            token=response.token,
            decision=response.decision,
            estimated_completion_date=response.estimated_completion_date,
        )
    )
    return DispatchRespondResponse.from_result(result)
