"""
Unit of Work Interface

Defines the contract for managing transactions across multiple repositories.
Implements the Unit of Work pattern for atomic operations.
"""

# Standard library imports
from abc import abstractmethod
from typing import Protocol

from .repositories import (
    IBranchRepository,
    ICustomerRepository,
    IProductRepository,
    ISaleRepository,
)


class IUnitOfWork(Protocol):
    """
    Unit of Work interface for transaction management.

    One instance covers one use-case invocation. Entering the context begins
    a transaction; leaving it commits, or rolls back if the block raised
    (including task cancellation).
    """

    # Repository access
    sales: ISaleRepository
    customers: ICustomerRepository
    branches: IBranchRepository
    products: IProductRepository

    @abstractmethod
    async def begin_transaction(self) -> None:
        """
        Begin a new database transaction.

        Raises:
            TransactionError: If transaction cannot be started
        """
        ...

    @abstractmethod
    async def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            TransactionError: If commit fails
        """
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """
        Rollback the current transaction.

        Reverts all changes made within the transaction.

        Raises:
            TransactionError: If rollback fails
        """
        ...

    @abstractmethod
    async def is_active(self) -> bool:
        """
        Check if a transaction is currently active.

        Returns:
            True if transaction is active, False otherwise
        """
        ...

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        """
        Async context manager entry.

        Automatically begins a transaction.

        Returns:
            Self for use in async with statement
        """
        ...

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """
        Async context manager exit.

        Automatically commits on success or rolls back on exception.
        """
        ...


class IUnitOfWorkFactory(Protocol):
    """
    Factory interface for creating Unit of Work instances.

    Allows for different implementations (e.g., for testing vs production).
    """

    @abstractmethod
    def create_unit_of_work(self) -> IUnitOfWork:
        """
        Create a new Unit of Work instance.

        Returns:
            A new Unit of Work instance
        """
        ...
