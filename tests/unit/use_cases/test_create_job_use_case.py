"""
Unit tests for CreateJobUseCase.
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from marketplace.application.use_cases.create_job import (
    CreateJobRequest,
    CreateJobUseCase,
)
from marketplace.domain.exceptions.validation_error import ValidationError
from marketplace.domain.value_objects.job_status import JobStatus, RoutingStatus
from marketplace.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)


class TestCreateJobUseCase:
    """Test cases for CreateJobUseCase."""

    @pytest.fixture
    def transaction_service(self):
        """Transaction service that simply runs the operation."""
        service = AsyncMock(spec=TransactionService)

        async def run(operation):
            return await operation()

        service.execute_in_transaction.side_effect = run
        return service

    @pytest.fixture
    def use_case(self, mock_job_repository, transaction_service):
        async def create(job):
            return job

        mock_job_repository.create.side_effect = create
        return CreateJobUseCase(mock_job_repository, transaction_service)

    async def test_creates_draft_with_breakdown(self, use_case, mock_job_repository):
        """Test that a new job starts as an unrouted DRAFT with money columns filled."""
        # Arrange
        poster_id = uuid4()

        # Act
        job = await use_case.execute(
            CreateJobRequest(
                title="  Repair roof  ",
                job_poster_user_id=poster_id,
                labor_total_cents=30000,
                materials_total_cents=5000,
            )
        )

        # Assert
        assert job.title == "Repair roof"
        assert job.status == JobStatus.DRAFT
        assert job.routing_status == RoutingStatus.UNROUTED
        assert job.contractor_payout_cents == 22500 + 5000
        assert job.router_earnings_cents == 4500
        assert job.broker_fee_cents == 3000
        assert job.total_cents == 35000
        mock_job_repository.create.assert_awaited_once()

    async def test_blank_title(self, use_case, mock_job_repository):
        with pytest.raises(ValidationError):
            await use_case.execute(CreateJobRequest(title="   ", job_poster_user_id=uuid4()))

        mock_job_repository.create.assert_not_awaited()

    async def test_negative_amount(self, use_case, mock_job_repository):
        """Test that invalid money is reported as a validation error."""
        with pytest.raises(ValidationError):
            await use_case.execute(
                CreateJobRequest(
                    title="Repair roof",
                    job_poster_user_id=uuid4(),
                    labor_total_cents=-100,
                )
            )

        mock_job_repository.create.assert_not_awaited()
