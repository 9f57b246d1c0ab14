"""
Application Interfaces - Repository and Event Contracts

This module defines the interface contracts that the infrastructure layer
must implement. Following the dependency inversion principle, the application
layer defines what it needs, and the infrastructure layer provides it.
"""

from .events import EventHandler, IEventBus, IEventPublisher
from .exceptions import (
    BranchNotFoundError,
    ConfigurationError,
    ConnectionError,
    CustomerNotFoundError,
    DuplicateEntityError,
    EntityNotFoundError,
    EventPublishError,
    IntegrityError,
    ProductNotFoundError,
    RepositoryError,
    SaleItemNotFoundError,
    SaleNotFoundError,
    TimeoutError,
    TransactionAlreadyActiveError,
    TransactionCommitError,
    TransactionError,
    TransactionNotActiveError,
    TransactionRollbackError,
)
from .repositories import (
    IBranchRepository,
    ICustomerRepository,
    IProductRepository,
    ISaleRepository,
    Page,
)
from .unit_of_work import IUnitOfWork, IUnitOfWorkFactory

__all__ = [
    # Repository interfaces
    "ISaleRepository",
    "ICustomerRepository",
    "IBranchRepository",
    "IProductRepository",
    "Page",
    # Unit of Work interfaces
    "IUnitOfWork",
    "IUnitOfWorkFactory",
    # Event interfaces
    "EventHandler",
    "IEventPublisher",
    "IEventBus",
    # Exceptions
    "RepositoryError",
    "EntityNotFoundError",
    "SaleNotFoundError",
    "SaleItemNotFoundError",
    "CustomerNotFoundError",
    "BranchNotFoundError",
    "ProductNotFoundError",
    "DuplicateEntityError",
    "TransactionError",
    "TransactionNotActiveError",
    "TransactionAlreadyActiveError",
    "TransactionCommitError",
    "TransactionRollbackError",
    "ConnectionError",
    "TimeoutError",
    "IntegrityError",
    "EventPublishError",
    "ConfigurationError",
]
