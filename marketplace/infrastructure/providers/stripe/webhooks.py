"""
Stripe webhook signature verification.

The ``Stripe-Signature`` header carries a timestamp and one or more ``v1``
HMAC-SHA256 signatures of ``"{timestamp}.{payload}"``.
"""

import hashlib
import hmac
import time
from typing import List, Optional, Tuple

from marketplace.domain.exceptions.validation_error import ValidationError

DEFAULT_TOLERANCE_SECONDS = 300


class WebhookSignatureError(ValidationError):
    """Raised when a webhook payload cannot be authenticated."""

    code = "INVALID_SIGNATURE"


def _parse_header(header: str) -> Tuple[int, List[str]]:
    timestamp = None
    signatures = []
    for item in header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                raise WebhookSignatureError("Malformed signature timestamp")
        elif key == "v1":
            signatures.append(value)

    if timestamp is None or not signatures:
        raise WebhookSignatureError("Signature header is missing t or v1")
    return timestamp, signatures


def compute_signature(payload: bytes, timestamp: int, secret: str) -> str:
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


def verify_signature(
    payload: bytes,
    header: Optional[str],
    secret: str,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    now: Optional[float] = None,
) -> None:
    """Raise ``WebhookSignatureError`` unless the payload is authentic and fresh."""
    if not header:
        raise WebhookSignatureError("Missing Stripe-Signature header")

    timestamp, signatures = _parse_header(header)
    expected = compute_signature(payload, timestamp, secret)
    if not any(hmac.compare_digest(expected, sig) for sig in signatures):
        raise WebhookSignatureError("Signature mismatch")

    now = time.time() if now is None else now
    if abs(now - timestamp) > tolerance:
        raise WebhookSignatureError("Signature timestamp outside tolerance")
