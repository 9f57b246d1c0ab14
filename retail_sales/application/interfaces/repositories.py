"""
Repository Interface Definitions

Defines the contracts that infrastructure repositories must implement.
Following the Repository pattern and clean architecture principles.

All operations are coroutines; callers cancel them by cancelling the
awaiting task. Lookups model absence as ``None`` rather than raising.
"""

# Standard library imports
from abc import abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from math import ceil
from typing import Generic, Protocol, TypeVar
from uuid import UUID

# Local imports
from retail_sales.domain.entities import Branch, Customer, Product, Sale

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a paginated listing plus the total number of matches."""

    items: list[T] = field(default_factory=list)
    total_count: int = 0
    page_number: int = 1
    page_size: int = 10

    @property
    def total_pages(self) -> int:
        return ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size


class ISaleRepository(Protocol):
    """
    Sale repository interface.

    Defines operations for persisting and retrieving Sale aggregates together
    with their items. Sale number uniqueness is enforced here, not by the
    aggregate.
    """

    @abstractmethod
    async def get_by_id(self, sale_id: UUID) -> Sale | None:
        """
        Retrieve a sale and its items by id.

        Args:
            sale_id: The unique identifier of the sale

        Returns:
            The sale if found, None otherwise

        Raises:
            RepositoryError: If retrieval operation fails
        """
        ...

    @abstractmethod
    async def get_by_sale_number(self, sale_number: str) -> Sale | None:
        """
        Retrieve a sale by its business number.

        Args:
            sale_number: Caller supplied sale number

        Returns:
            The sale if found, None otherwise

        Raises:
            RepositoryError: If retrieval operation fails
        """
        ...

    @abstractmethod
    async def create(self, sale: Sale) -> Sale:
        """
        Persist a new sale with its items.

        Args:
            sale: The sale to persist

        Returns:
            The persisted sale

        Raises:
            DuplicateEntityError: If the sale number is already taken
            RepositoryError: If save operation fails
        """
        ...

    @abstractmethod
    async def update(self, sale: Sale) -> Sale:
        """
        Persist changes to an existing sale, replacing its stored items.

        Args:
            sale: The sale with updated state

        Returns:
            The updated sale

        Raises:
            SaleNotFoundError: If the sale no longer exists
            StaleDataException: If the sale changed since it was loaded
            RepositoryError: If update operation fails
        """
        ...

    @abstractmethod
    async def get_paginated(self, page_number: int, page_size: int) -> Page[Sale]:
        """
        List sales, most recent sale date first.

        Raises:
            RepositoryError: If retrieval operation fails
        """
        ...

    @abstractmethod
    async def get_paginated_by_customer(
        self, customer_id: UUID, page_number: int, page_size: int
    ) -> Page[Sale]:
        """List a customer's sales, most recent sale date first."""
        ...

    @abstractmethod
    async def get_paginated_by_branch(
        self, branch_id: UUID, page_number: int, page_size: int
    ) -> Page[Sale]:
        """List a branch's sales, most recent sale date first."""
        ...

    @abstractmethod
    async def get_paginated_by_date_range(
        self, start_date: datetime, end_date: datetime, page_number: int, page_size: int
    ) -> Page[Sale]:
        """
        List sales whose sale date falls within a range.

        Args:
            start_date: Inclusive lower bound
            end_date: Inclusive upper bound
            page_number: 1-based page number
            page_size: Maximum number of sales per page

        Returns:
            Page of sales and the total number of matches

        Raises:
            RepositoryError: If retrieval operation fails
        """
        ...


class ICustomerRepository(Protocol):
    """Read access to mirrored customer records."""

    @abstractmethod
    async def get_by_id(self, customer_id: UUID) -> Customer | None:
        """
        Retrieve a customer by id.

        Returns:
            The customer if found, None otherwise
        """
        ...

    @abstractmethod
    async def get_by_external_id(self, external_id: str) -> Customer | None:
        """Retrieve a customer by the id used in the system of record."""
        ...

    @abstractmethod
    async def get_paginated(self, page_number: int, page_size: int) -> Page[Customer]:
        """List customers ordered by name."""
        ...


class IBranchRepository(Protocol):
    """Read access to mirrored branch records."""

    @abstractmethod
    async def get_by_id(self, branch_id: UUID) -> Branch | None:
        """
        Retrieve a branch by id.

        Returns:
            The branch if found, None otherwise
        """
        ...

    @abstractmethod
    async def get_by_external_id(self, external_id: str) -> Branch | None:
        """Retrieve a branch by the id used in the system of record."""
        ...

    @abstractmethod
    async def get_paginated(self, page_number: int, page_size: int) -> Page[Branch]:
        """List branches ordered by name."""
        ...


class IProductRepository(Protocol):
    """Read access to mirrored product records."""

    @abstractmethod
    async def get_by_id(self, product_id: UUID) -> Product | None:
        """
        Retrieve a product by id.

        Returns:
            The product if found, None otherwise
        """
        ...

    @abstractmethod
    async def get_by_external_id(self, external_id: str) -> Product | None:
        """Retrieve a product by the id used in the system of record."""
        ...

    @abstractmethod
    async def get_paginated(self, page_number: int, page_size: int) -> Page[Product]:
        """List products ordered by name."""
        ...
