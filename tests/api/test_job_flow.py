"""
End-to-end API tests for the job lifecycle.
"""

from uuid import uuid4

import pytest

API = "/api/v1"


def as_user(user_id) -> dict:
    return {"X-User-Id": str(user_id)}


async def _create_funded_job(client, mock_payment_provider, poster_id, labor=30000):
    """Create a job, pay for it, and return its id."""
    created = await client.post(
        f"{API}/jobs",
        json={"title": "Replace kitchen sink", "labor_total_cents": labor},
        headers=as_user(poster_id),
    )
    job_id = created.json()["id"]

    intent = await client.post(f"{API}/jobs/{job_id}/payment-intent")
    intent_id = intent.json()["provider_intent_id"]
    mock_payment_provider.simulate_success(intent_id)

    confirmed = await client.post(
        f"{API}/payments/confirm",
        json={"job_id": job_id, "provider_intent_id": intent_id},
    )
    assert confirmed.status_code == 200
    return job_id


class TestJobEndpoints:
    """Test job and escrow endpoints."""

    async def test_create_job(self, client, poster_id):
        """Test that a new job is a DRAFT owned by the caller."""
        # Act
        response = await client.post(
            f"{API}/jobs",
            json={"title": "Paint fence", "labor_total_cents": 30000},
            headers=as_user(poster_id),
        )

        # Assert
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "DRAFT"
        assert body["routing_status"] == "UNROUTED"
        assert body["job_poster_user_id"] == str(poster_id)
        assert body["pricing"]["contractor_payout_cents"] == 22500
        assert body["pricing"]["router_earnings_cents"] == 4500
        assert body["pricing"]["platform_fee_cents"] == 3000

    async def test_create_job_requires_identity(self, client):
        response = await client.post(f"{API}/jobs", json={"title": "Paint fence"})

        assert response.status_code == 401

    async def test_create_job_rejects_negative_amount(self, client, poster_id):
        response = await client.post(
            f"{API}/jobs",
            json={"title": "Paint fence", "labor_total_cents": -1},
            headers=as_user(poster_id),
        )

        assert response.status_code == 422

    async def test_unknown_job(self, client):
        response = await client.get(f"{API}/jobs/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    async def test_illegal_transition(self, client, poster_id):
        """Test that an event outside the table maps to 409."""
        created = await client.post(
            f"{API}/jobs", json={"title": "Paint fence"}, headers=as_user(poster_id)
        )

        response = await client.post(
            f"{API}/jobs/{created.json()['id']}/transitions",
            json={"event": "FINALIZE"},
            headers=as_user(poster_id),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "ILLEGAL_TRANSITION"

    async def test_payment_intent_replaced_on_price_change(
        self, client, poster_id, mock_payment_provider
    ):
        """Test that repricing yields a new intent and cancels the old one."""
        # Arrange
        created = await client.post(
            f"{API}/jobs",
            json={"title": "Tile bathroom", "labor_total_cents": 30000},
            headers=as_user(poster_id),
        )
        job_id = created.json()["id"]
        first = await client.post(f"{API}/jobs/{job_id}/payment-intent")

        # Act
        repriced = await client.patch(
            f"{API}/jobs/{job_id}/pricing", json={"labor_total_cents": 35000}
        )
        second = await client.post(f"{API}/jobs/{job_id}/payment-intent")

        # Assert
        assert first.status_code == 201
        assert first.json()["amount_cents"] == 30000
        assert repriced.status_code == 200
        assert second.json()["amount_cents"] == 35000
        first_id = first.json()["provider_intent_id"]
        assert second.json()["provider_intent_id"] != first_id
        assert mock_payment_provider.intents[first_id].status == "canceled"

        status = await client.get(f"{API}/jobs/{job_id}/payment")
        assert status.json()["status"] == "PENDING"
        assert status.json()["amount_cents"] == 35000

    async def test_confirm_opens_job_for_routing(
        self, client, poster_id, mock_payment_provider
    ):
        job_id = await _create_funded_job(client, mock_payment_provider, poster_id)

        job = (await client.get(f"{API}/jobs/{job_id}")).json()
        assert job["status"] == "OPEN_FOR_ROUTING"
        assert job["escrow_locked_at"] is not None
        assert job["posted_at"] is not None

        # Pricing is frozen once escrow is locked
        repriced = await client.patch(
            f"{API}/jobs/{job_id}/pricing", json={"labor_total_cents": 1000}
        )
        assert repriced.status_code == 409


class TestRoutingEndpoints:
    """Test claims, fan-out and contractor responses over HTTP."""

    async def test_claim_route_and_accept(
        self, client, poster_id, router_id, mock_payment_provider
    ):
        """Router claims, fans out to A and B; B wins and A is refused."""
        # Arrange
        job_id = await _create_funded_job(client, mock_payment_provider, poster_id)
        contractor_a, contractor_b = uuid4(), uuid4()

        # Act: claim
        claimed = await client.post(
            f"{API}/router/jobs/{job_id}/claim", headers=as_user(router_id)
        )
        active = await client.get(f"{API}/router/claims/active", headers=as_user(router_id))

        # Assert
        assert claimed.status_code == 200
        assert claimed.json()["claimed_by_user_id"] == str(router_id)
        assert active.json()["active_claims"] == 1

        # Act: fan out
        routed = await client.post(
            f"{API}/router/apply-routing",
            json={"job_id": job_id, "contractor_ids": [str(contractor_a), str(contractor_b)]},
            headers=as_user(router_id),
        )
        assert routed.status_code == 201
        assert routed.json()["job"]["routing_status"] == "ROUTED_BY_ROUTER"
        tokens = {d["contractor_id"]: d["token"] for d in routed.json()["dispatches"]}

        offers = await client.get(f"{API}/contractor/offers", headers=as_user(contractor_b))
        assert [offer["job_id"] for offer in offers.json()] == [job_id]
        assert "token" not in offers.json()[0]

        # Act: B accepts, A tries afterwards
        accepted = await client.post(
            f"{API}/contractor/dispatches/respond",
            json={"token": tokens[str(contractor_b)], "decision": "ACCEPT"},
        )
        late = await client.post(
            f"{API}/contractor/dispatches/respond",
            json={"token": tokens[str(contractor_a)], "decision": "ACCEPT"},
        )

        # Assert
        assert accepted.status_code == 200
        assert accepted.json()["job"]["status"] == "ASSIGNED"
        assert accepted.json()["job"]["contractor_user_id"] == str(contractor_b)
        assert accepted.json()["expired_siblings"] == 1
        assert late.status_code == 409
        assert late.json()["code"] == "ALREADY_ASSIGNED"

        active = await client.get(f"{API}/router/claims/active", headers=as_user(router_id))
        assert active.json()["active_claims"] == 0

    async def test_second_claim_not_eligible(
        self, client, poster_id, router_id, mock_payment_provider
    ):
        j1 = await _create_funded_job(client, mock_payment_provider, poster_id)
        j2 = await _create_funded_job(client, mock_payment_provider, poster_id, labor=20000)
        await client.post(f"{API}/router/jobs/{j1}/claim", headers=as_user(router_id))

        response = await client.post(
            f"{API}/router/jobs/{j2}/claim", headers=as_user(router_id)
        )

        assert response.status_code == 409
        assert response.json()["code"] == "NOT_ELIGIBLE"

    async def test_too_many_contractors(
        self, client, poster_id, router_id, mock_payment_provider
    ):
        job_id = await _create_funded_job(client, mock_payment_provider, poster_id)

        response = await client.post(
            f"{API}/router/apply-routing",
            json={"job_id": job_id, "contractor_ids": [str(uuid4()) for _ in range(6)]},
            headers=as_user(router_id),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_CONTRACTOR_SELECTION"

    async def test_unknown_token(self, client):
        response = await client.post(
            f"{API}/contractor/dispatches/respond",
            json={"token": "not-a-token", "decision": "DECLINE"},
        )

        assert response.status_code == 404

    @pytest.mark.parametrize("decision", ["MAYBE", ""])
    async def test_invalid_decision(self, client, decision):
        response = await client.post(
            f"{API}/contractor/dispatches/respond",
            json={"token": "abc", "decision": decision},
        )

        assert response.status_code == 422
