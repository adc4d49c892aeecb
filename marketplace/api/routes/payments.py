"""Payment confirmation endpoint."""

from fastapi import APIRouter, Depends

from marketplace.api.dependencies import get_confirm_payment_use_case
from marketplace.api.schemas.payment import (
    ConfirmPaymentRequest,
    PaymentRecordResponse,
)
from marketplace.application.use_cases import ConfirmPaymentUseCase

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/confirm", response_model=PaymentRecordResponse)
async def confirm_payment(
    confirmation: ConfirmPaymentRequest,
    use_case: ConfirmPaymentUseCase = Depends(get_confirm_payment_use_case),
):
    """Capture a succeeded intent, lock escrow and open the job for routing."""
    record = await use_case.execute(
        confirmation.job_id, confirmation.provider_intent_id
    )
    return PaymentRecordResponse.from_entity(record)
