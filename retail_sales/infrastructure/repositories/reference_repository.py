"""
PostgreSQL Reference Data Repositories

Read-only access to the customer, branch and product records mirrored from
their systems of record.
"""

# Standard library imports
import logging
from typing import Any
from uuid import UUID

# Local imports
from retail_sales.application.interfaces.exceptions import RepositoryError
from retail_sales.application.interfaces.repositories import (
    IBranchRepository,
    ICustomerRepository,
    IProductRepository,
    Page,
)
from retail_sales.domain.entities import Branch, Customer, Product
from retail_sales.domain.value_objects import Money
from retail_sales.infrastructure.database.adapter import PostgreSQLAdapter

logger = logging.getLogger(__name__)


class _ReferenceRepository:
    """Shared lookups for tables keyed by id with a unique ``external_id``."""

    # Table and column names are constants - not user input
    table: str = ""
    columns: str = ""
    entity_name: str = ""

    def __init__(self, adapter: PostgreSQLAdapter) -> None:
        """
        Initialize repository with database adapter.

        Args:
            adapter: PostgreSQL database adapter
        """
        self.adapter = adapter

    async def _fetch_by(self, column: str, value: Any) -> Any | None:
        try:
            query = f"SELECT {self.columns} FROM {self.table} WHERE {column} = %s"  # nosec B608
            record = await self.adapter.fetch_one(query, value)
            if record is None:
                return None
            return self._map_record(record)

        except Exception as e:
            logger.error(f"Failed to get {self.entity_name} by {column} {value}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.entity_name}: {e}", e) from e

    async def _fetch_page(self, page_number: int, page_size: int) -> Page[Any]:
        try:
            count_record = await self.adapter.fetch_one(
                f"SELECT COUNT(*) AS total FROM {self.table}"  # nosec B608
            )
            total = count_record["total"] if count_record else 0

            query = f"""
            SELECT {self.columns} FROM {self.table}
            ORDER BY name ASC, id ASC
            LIMIT %s OFFSET %s
            """  # nosec B608
            records = await self.adapter.fetch_all(query, page_size, (page_number - 1) * page_size)

            return Page(
                items=[self._map_record(r) for r in records],
                total_count=total,
                page_number=page_number,
                page_size=page_size,
            )

        except Exception as e:
            logger.error(f"Failed to list {self.table}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.table}: {e}", e) from e

    def _map_record(self, record: dict[str, Any]) -> Any:
        raise NotImplementedError


class PostgreSQLCustomerRepository(_ReferenceRepository, ICustomerRepository):
    """PostgreSQL implementation of ICustomerRepository."""

    table = "customers"
    columns = "id, external_id, name, email, phone, last_synced_at"
    entity_name = "customer"

    async def get_by_id(self, customer_id: UUID) -> Customer | None:
        return await self._fetch_by("id", customer_id)

    async def get_by_external_id(self, external_id: str) -> Customer | None:
        return await self._fetch_by("external_id", external_id)

    async def get_paginated(self, page_number: int, page_size: int) -> Page[Customer]:
        return await self._fetch_page(page_number, page_size)

    def _map_record(self, record: dict[str, Any]) -> Customer:
        return Customer(
            id=record["id"],
            external_id=record["external_id"],
            name=record["name"],
            email=record["email"],
            phone=record["phone"],
            last_synced_at=record["last_synced_at"],
        )


class PostgreSQLBranchRepository(_ReferenceRepository, IBranchRepository):
    """PostgreSQL implementation of IBranchRepository."""

    table = "branches"
    columns = "id, external_id, name, address, last_synced_at"
    entity_name = "branch"

    async def get_by_id(self, branch_id: UUID) -> Branch | None:
        return await self._fetch_by("id", branch_id)

    async def get_by_external_id(self, external_id: str) -> Branch | None:
        return await self._fetch_by("external_id", external_id)

    async def get_paginated(self, page_number: int, page_size: int) -> Page[Branch]:
        return await self._fetch_page(page_number, page_size)

    def _map_record(self, record: dict[str, Any]) -> Branch:
        return Branch(
            id=record["id"],
            external_id=record["external_id"],
            name=record["name"],
            address=record["address"],
            last_synced_at=record["last_synced_at"],
        )


class PostgreSQLProductRepository(_ReferenceRepository, IProductRepository):
    """
    PostgreSQL implementation of IProductRepository.

    Prices are read as stored; a sale captures them when items are created.
    """

    table = "products"
    columns = "id, external_id, name, description, price, currency, last_synced_at"
    entity_name = "product"

    async def get_by_id(self, product_id: UUID) -> Product | None:
        return await self._fetch_by("id", product_id)

    async def get_by_external_id(self, external_id: str) -> Product | None:
        return await self._fetch_by("external_id", external_id)

    async def get_paginated(self, page_number: int, page_size: int) -> Page[Product]:
        return await self._fetch_page(page_number, page_size)

    def _map_record(self, record: dict[str, Any]) -> Product:
        return Product(
            id=record["id"],
            external_id=record["external_id"],
            name=record["name"],
            description=record["description"],
            price=Money(record["price"], record["currency"].strip()),
            last_synced_at=record["last_synced_at"],
        )
