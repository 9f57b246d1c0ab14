"""
PostgreSQL Unit of Work Implementation

Concrete implementation of IUnitOfWork using PostgreSQL database.
Manages transactions across the sale and reference data repositories so that
every use case persists atomically.
"""

# Standard library imports
import logging

# Third-party imports
from psycopg_pool import AsyncConnectionPool

# Local imports
from retail_sales.application.interfaces.exceptions import (
    TransactionAlreadyActiveError,
    TransactionCommitError,
    TransactionError,
    TransactionNotActiveError,
    TransactionRollbackError,
)
from retail_sales.application.interfaces.repositories import (
    IBranchRepository,
    ICustomerRepository,
    IProductRepository,
    ISaleRepository,
)
from retail_sales.application.interfaces.unit_of_work import IUnitOfWork, IUnitOfWorkFactory
from retail_sales.infrastructure.database.adapter import PostgreSQLAdapter

from .reference_repository import (
    PostgreSQLBranchRepository,
    PostgreSQLCustomerRepository,
    PostgreSQLProductRepository,
)
from .sale_repository import PostgreSQLSaleRepository

logger = logging.getLogger(__name__)


class PostgreSQLUnitOfWork(IUnitOfWork):
    """
    PostgreSQL implementation of IUnitOfWork.

    Manages database transactions across multiple repositories.
    Ensures all operations within a unit of work are atomic.
    """

    def __init__(self, adapter: PostgreSQLAdapter) -> None:
        """
        Initialize Unit of Work with database adapter.

        Args:
            adapter: PostgreSQL database adapter
        """
        self.adapter = adapter
        self._sales = PostgreSQLSaleRepository(adapter)
        self._customers = PostgreSQLCustomerRepository(adapter)
        self._branches = PostgreSQLBranchRepository(adapter)
        self._products = PostgreSQLProductRepository(adapter)

    @property
    def sales(self) -> ISaleRepository:
        """Get the sales repository."""
        return self._sales

    @property
    def customers(self) -> ICustomerRepository:
        """Get the customers repository."""
        return self._customers

    @property
    def branches(self) -> IBranchRepository:
        """Get the branches repository."""
        return self._branches

    @property
    def products(self) -> IProductRepository:
        """Get the products repository."""
        return self._products

    async def begin_transaction(self) -> None:
        """
        Begin a new database transaction.

        Raises:
            TransactionAlreadyActiveError: If a transaction is already active
            TransactionError: If transaction cannot be started
        """
        try:
            if self.adapter.has_active_transaction:
                raise TransactionAlreadyActiveError()

            await self.adapter.begin_transaction()
            logger.debug("Unit of Work transaction started")

        except TransactionAlreadyActiveError:
            raise
        except Exception as e:
            logger.error(f"Failed to begin transaction: {e}")
            raise TransactionError(f"Failed to begin transaction: {e}", e) from e

    async def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            TransactionNotActiveError: If no transaction is active
            TransactionCommitError: If commit fails
        """
        try:
            if not self.adapter.has_active_transaction:
                raise TransactionNotActiveError()

            await self.adapter.commit_transaction()
            logger.debug("Unit of Work transaction committed")

        except TransactionNotActiveError:
            raise
        except Exception as e:
            logger.error(f"Failed to commit transaction: {e}")
            raise TransactionCommitError(e) from e

    async def rollback(self) -> None:
        """
        Rollback the current transaction.

        Reverts all changes made within the transaction.

        Raises:
            TransactionRollbackError: If rollback fails
        """
        try:
            if not self.adapter.has_active_transaction:
                logger.warning("No active transaction to rollback")
                return

            await self.adapter.rollback_transaction()
            logger.debug("Unit of Work transaction rolled back")

        except Exception as e:
            logger.error(f"Failed to rollback transaction: {e}")
            raise TransactionRollbackError(e) from e

    async def is_active(self) -> bool:
        """
        Check if a transaction is currently active.

        Returns:
            True if transaction is active, False otherwise
        """
        return self.adapter.has_active_transaction

    async def __aenter__(self) -> "PostgreSQLUnitOfWork":
        """
        Async context manager entry.

        Automatically begins a transaction.

        Returns:
            Self for use in async with statement
        """
        await self.begin_transaction()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """
        Async context manager exit.

        Commits on success. Rolls back when the block raised, including
        when the awaiting task was cancelled; the original exception
        always propagates.
        """
        if exc_type is None:
            try:
                await self.commit()
            except Exception as commit_error:
                logger.error(f"Failed to commit in context manager: {commit_error}")
                try:
                    await self.rollback()
                except Exception as rollback_error:
                    logger.error(f"Failed to rollback after commit error: {rollback_error}")
                raise
        else:
            try:
                await self.rollback()
            except Exception as rollback_error:
                # Don't mask the original exception
                logger.error(f"Failed to rollback in context manager: {rollback_error}")

        return False


class PostgreSQLUnitOfWorkFactory(IUnitOfWorkFactory):
    """
    Factory for creating PostgreSQL Unit of Work instances.

    Every unit of work gets its own adapter over the shared connection pool,
    so concurrent use cases never share a transaction.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """
        Initialize the factory.

        Args:
            pool: Open psycopg3 connection pool
        """
        self._pool = pool

    def create_unit_of_work(self) -> IUnitOfWork:
        """
        Create a new Unit of Work instance.

        Returns:
            A new Unit of Work instance
        """
        uow = PostgreSQLUnitOfWork(PostgreSQLAdapter(self._pool))
        logger.debug("Created new PostgreSQL Unit of Work")
        return uow
