"""
Unit tests for Stripe webhook signature verification.
"""

import json

import pytest

from marketplace.infrastructure.providers.stripe.webhooks import (
    WebhookSignatureError,
    compute_signature,
    verify_signature,
)

SECRET = "whsec_test_secret"
NOW = 1_767_000_000


@pytest.fixture
def payload() -> bytes:
    return json.dumps(
        {"id": "evt_1", "type": "payment_intent.succeeded", "data": {"object": {}}}
    ).encode()


class TestVerifySignature:
    """Test webhook signature verification."""

    def test_valid_signature(self, payload):
        """Test that a fresh, correctly signed payload passes."""
        # Arrange
        header = f"t={NOW},v1={compute_signature(payload, NOW, SECRET)}"

        # Act / Assert
        verify_signature(payload, header, SECRET, now=NOW + 10)

    def test_any_matching_v1_passes(self, payload):
        """Test that rolled secrets with several v1 entries are accepted."""
        good = compute_signature(payload, NOW, SECRET)
        header = f"t={NOW},v1=deadbeef,v1={good}"

        verify_signature(payload, header, SECRET, now=NOW)

    def test_missing_header(self, payload):
        with pytest.raises(WebhookSignatureError):
            verify_signature(payload, None, SECRET, now=NOW)

    def test_malformed_header(self, payload):
        """Test headers without a timestamp or signature."""
        with pytest.raises(WebhookSignatureError):
            verify_signature(payload, "v1=abc", SECRET, now=NOW)

        with pytest.raises(WebhookSignatureError):
            verify_signature(payload, f"t={NOW}", SECRET, now=NOW)

        with pytest.raises(WebhookSignatureError):
            verify_signature(payload, "t=notanumber,v1=abc", SECRET, now=NOW)

    def test_tampered_payload(self, payload):
        """Test that a changed body no longer matches its signature."""
        header = f"t={NOW},v1={compute_signature(payload, NOW, SECRET)}"

        with pytest.raises(WebhookSignatureError):
            verify_signature(payload + b" ", header, SECRET, now=NOW)

    def test_wrong_secret(self, payload):
        header = f"t={NOW},v1={compute_signature(payload, NOW, 'whsec_other')}"

        with pytest.raises(WebhookSignatureError):
            verify_signature(payload, header, SECRET, now=NOW)

    def test_stale_timestamp(self, payload):
        """Test that replays outside the tolerance window are rejected."""
        header = f"t={NOW},v1={compute_signature(payload, NOW, SECRET)}"

        with pytest.raises(WebhookSignatureError):
            verify_signature(payload, header, SECRET, tolerance=300, now=NOW + 301)

    def test_error_code(self, payload):
        with pytest.raises(WebhookSignatureError) as exc_info:
            verify_signature(payload, None, SECRET, now=NOW)

        assert exc_info.value.code == "INVALID_SIGNATURE"
