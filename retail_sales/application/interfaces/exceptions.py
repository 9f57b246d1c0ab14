"""
Repository Exception Definitions

Defines exceptions that repositories, event publishers and application
services may raise. Following clean architecture principles - these are
application-level exceptions.
"""

# Standard library imports
from collections.abc import Sequence
from uuid import UUID


class RepositoryError(Exception):
    """Base exception for repository operations."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class EntityNotFoundError(RepositoryError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity_type: str, identifier: UUID | str) -> None:
        super().__init__(f"{entity_type} with identifier '{identifier}' not found")
        self.entity_type = entity_type
        self.identifier = identifier


class SaleNotFoundError(EntityNotFoundError):
    """Raised when a sale is not found."""

    def __init__(self, sale_id: UUID) -> None:
        super().__init__("Sale", sale_id)
        self.sale_id = sale_id


class SaleItemNotFoundError(EntityNotFoundError):
    """Raised when an item id does not belong to the sale."""

    def __init__(self, sale_id: UUID, item_id: UUID) -> None:
        RepositoryError.__init__(self, f"Item '{item_id}' not found in sale '{sale_id}'")
        self.entity_type = "SaleItem"
        self.identifier = item_id
        self.sale_id = sale_id
        self.item_id = item_id


class CustomerNotFoundError(EntityNotFoundError):
    """Raised when a customer is not found."""

    def __init__(self, customer_id: UUID) -> None:
        super().__init__("Customer", customer_id)
        self.customer_id = customer_id


class BranchNotFoundError(EntityNotFoundError):
    """Raised when a branch is not found."""

    def __init__(self, branch_id: UUID) -> None:
        super().__init__("Branch", branch_id)
        self.branch_id = branch_id


class ProductNotFoundError(EntityNotFoundError):
    """Raised when a product is not found."""

    def __init__(self, product_id: UUID) -> None:
        super().__init__("Product", product_id)
        self.product_id = product_id


class DuplicateEntityError(RepositoryError):
    """Raised when attempting to create an entity that already exists."""

    def __init__(self, entity_type: str, identifier: UUID | str) -> None:
        super().__init__(f"{entity_type} with identifier '{identifier}' already exists")
        self.entity_type = entity_type
        self.identifier = identifier


class TransactionError(RepositoryError):
    """Base exception for transaction operations."""

    pass


class TransactionNotActiveError(TransactionError):
    """Raised when operation requires active transaction but none exists."""

    def __init__(self) -> None:
        super().__init__("No active transaction")


class TransactionAlreadyActiveError(TransactionError):
    """Raised when attempting to start transaction when one is already active."""

    def __init__(self) -> None:
        super().__init__("Transaction is already active")


class TransactionCommitError(TransactionError):
    """Raised when transaction commit fails."""

    def __init__(self, cause: Exception | None = None) -> None:
        super().__init__("Transaction commit failed", cause)


class TransactionRollbackError(TransactionError):
    """Raised when transaction rollback fails."""

    def __init__(self, cause: Exception | None = None) -> None:
        super().__init__("Transaction rollback failed", cause)


class ConnectionError(RepositoryError):
    """Raised when database connection fails."""

    def __init__(self, message: str = "Database connection failed") -> None:
        super().__init__(message)


class TimeoutError(RepositoryError):
    """Raised when repository operation times out."""

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        super().__init__(f"Operation '{operation}' timed out after {timeout_seconds} seconds")
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class IntegrityError(RepositoryError):
    """Raised when database integrity constraint is violated."""

    def __init__(self, constraint: str, message: str | None = None) -> None:
        msg = f"Integrity constraint '{constraint}' violated"
        if message:
            msg += f": {message}"
        super().__init__(msg)
        self.constraint = constraint


class EventPublishError(Exception):
    """Raised when one or more event subscribers fail to handle an event."""

    def __init__(self, event_type: str, failures: Sequence[tuple[str, Exception]]) -> None:
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"{len(failures)} handler(s) failed for '{event_type}': {names}")
        self.event_type = event_type
        self.failures = list(failures)


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Configuration error: {message}")
