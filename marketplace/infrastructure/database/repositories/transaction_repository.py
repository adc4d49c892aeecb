"""
Transaction service for managing database transactions centrally.
"""

from typing import Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config.logging import get_logger
from marketplace.domain.exceptions import (
    ConflictError,
    ExpiredError,
    NotFoundError,
    ValidationError,
)

logger = get_logger(__name__)

T = TypeVar("T")

# Expected business outcomes; rolled back quietly
_EXPECTED_ERRORS = (ConflictError, ExpiredError, NotFoundError, ValidationError)


class TransactionService:
    """Centralized transaction management service."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = logger

    async def execute_in_transaction(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Execute an operation within a transaction.

        Every write issued by ``operation`` commits together or not at all.

        Args:
            operation: Async function to execute

        Returns:
            Result of the operation

        Raises:
            Exception: Any exception raised by the operation, after rollback
        """
        try:
            result = await operation()
            await self.session.commit()

            self.logger.debug("Transaction committed successfully")
            return result

        except _EXPECTED_ERRORS as e:
            await self.session.rollback()
            self.logger.info(
                "Transaction rolled back",
                reason=type(e).__name__,
                code=getattr(e, "code", None),
                error=str(e),
            )
            raise

        except Exception as e:
            await self.session.rollback()
            self.logger.error(
                "Transaction rolled back due to error", error=str(e), exc_info=True
            )
            raise

    async def commit(self) -> None:
        """Explicitly commit the current transaction."""
        await self.session.commit()
        self.logger.debug("Transaction committed")

    async def rollback(self) -> None:
        """Explicitly rollback the current transaction."""
        await self.session.rollback()
        self.logger.debug("Transaction rolled back")

    async def flush(self) -> None:
        """Flush pending changes to the database."""
        await self.session.flush()
        self.logger.debug("Changes flushed to database")
