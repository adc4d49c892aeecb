"""
Unit tests for DispatchFanoutEngine.
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from marketplace.application.interfaces.repositories import (
    AssignmentRepositoryInterface,
    DispatchRepositoryInterface,
    JobRepositoryInterface,
)
from marketplace.application.services.dispatch_fanout_engine import (
    DispatchFanoutEngine,
    generate_dispatch_token,
    hash_dispatch_token,
)
from marketplace.domain.exceptions.not_found_error import NotFoundError
from marketplace.domain.exceptions.validation_error import (
    InvalidContractorSelectionError,
)
from marketplace.domain.value_objects.dispatch_status import DispatchDecision


class TestDispatchFanoutEngine:
    """Test cases for DispatchFanoutEngine."""

    @pytest.fixture
    def dispatch_repo(self):
        return AsyncMock(spec=DispatchRepositoryInterface)

    @pytest.fixture
    def engine(self, dispatch_repo):
        return DispatchFanoutEngine(
            AsyncMock(spec=JobRepositoryInterface),
            dispatch_repo,
            AsyncMock(spec=AssignmentRepositoryInterface),
            max_contractors=5,
        )

    def test_normalize_deduplicates_in_order(self, engine):
        """Test that duplicates are dropped and order kept."""
        a, b, c = uuid4(), uuid4(), uuid4()

        assert engine.normalize_contractor_ids([a, b, a, c, b]) == [a, b, c]

    def test_normalize_rejects_empty(self, engine):
        with pytest.raises(InvalidContractorSelectionError):
            engine.normalize_contractor_ids([])

    def test_normalize_rejects_more_than_five(self, engine):
        """Test the upper contractor bound."""
        with pytest.raises(InvalidContractorSelectionError) as exc_info:
            engine.normalize_contractor_ids([uuid4() for _ in range(6)])

        assert exc_info.value.count == 6
        assert exc_info.value.maximum == 5

    def test_duplicates_do_not_count_against_limit(self, engine):
        ids = [uuid4() for _ in range(5)]

        assert engine.normalize_contractor_ids(ids + ids) == ids

    def test_token_hash_is_stable(self):
        """Test that only a deterministic digest of the token is stored."""
        token = generate_dispatch_token()

        assert hash_dispatch_token(token) == hash_dispatch_token(token)
        assert hash_dispatch_token(token) != token
        assert generate_dispatch_token() != token

    async def test_unknown_token(self, engine, dispatch_repo):
        """Test that an unknown token is reported as not found."""
        dispatch_repo.get_by_token_hash.return_value = None

        with pytest.raises(NotFoundError):
            await engine.respond("nope", DispatchDecision.ACCEPT)
