"""
Webhook endpoints for payment provider callbacks.
"""

import json
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from marketplace.api.dependencies import get_payment_webhook_use_case
from marketplace.api.schemas.payment import WebhookAckResponse
from marketplace.application.use_cases import HandlePaymentWebhookUseCase
from marketplace.config.logging import get_logger
from marketplace.config.settings import settings
from marketplace.domain.exceptions import ValidationError
from marketplace.infrastructure.providers.stripe.webhooks import verify_signature

router = APIRouter(prefix="/webhooks", tags=["webhooks"])
logger = get_logger(__name__)


@router.post("/payments", response_model=WebhookAckResponse)
async def payment_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    use_case: HandlePaymentWebhookUseCase = Depends(get_payment_webhook_use_case),
):
    """Handle payment intent events from the provider."""
    payload = await request.body()
    if settings.STRIPE_WEBHOOK_SECRET:
        verify_signature(payload, stripe_signature, settings.STRIPE_WEBHOOK_SECRET)

    try:
        event = json.loads(payload)
    except ValueError:
        raise ValidationError("Webhook body is not valid JSON")
    if not isinstance(event, dict):
        raise ValidationError("Webhook body must be a JSON object")

    logger.info("Payment webhook received", event_type=event.get("type"))
    outcome = await use_case.execute(event)
    return WebhookAckResponse(
        handled=bool(outcome.get("handled")),
        type=outcome.get("type", event.get("type")),
        reason=outcome.get("reason"),
    )
