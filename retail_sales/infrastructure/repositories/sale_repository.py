"""
PostgreSQL Sale Repository Implementation

Concrete implementation of ISaleRepository using PostgreSQL database.
Persists the Sale aggregate across the ``sales`` and ``sale_items`` tables and
maps database records back into domain entities.
"""

# Standard library imports
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

# Local imports
from retail_sales.application.interfaces.exceptions import (
    DuplicateEntityError,
    IntegrityError,
    RepositoryError,
    SaleNotFoundError,
)
from retail_sales.application.interfaces.repositories import ISaleRepository, Page
from retail_sales.domain.entities import Branch, Customer, Product, Sale, SaleItem
from retail_sales.domain.exceptions import StaleDataException
from retail_sales.domain.value_objects import Money
from retail_sales.infrastructure.database.adapter import PostgreSQLAdapter, affected_rows

logger = logging.getLogger(__name__)

SALE_COLUMNS = """
    s.id, s.sale_number, s.sale_date, s.total_amount, s.currency,
    s.is_cancelled, s.created_at, s.updated_at, s.version,
    c.id AS customer_id, c.external_id AS customer_external_id,
    c.name AS customer_name, c.email AS customer_email,
    c.phone AS customer_phone, c.last_synced_at AS customer_last_synced_at,
    b.id AS branch_id, b.external_id AS branch_external_id,
    b.name AS branch_name, b.address AS branch_address,
    b.last_synced_at AS branch_last_synced_at
"""

SALE_FROM = """
    FROM sales s
    JOIN customers c ON c.id = s.customer_id
    JOIN branches b ON b.id = s.branch_id
"""

ITEMS_QUERY = """
SELECT si.id, si.sale_id, si.quantity, si.unit_price, si.is_cancelled,
       p.id AS product_id, p.external_id AS product_external_id,
       p.name AS product_name, p.description AS product_description,
       p.price AS product_price, p.currency AS product_currency,
       p.last_synced_at AS product_last_synced_at
FROM sale_items si
JOIN products p ON p.id = si.product_id
WHERE si.sale_id = ANY(%s)
ORDER BY si.sale_id, si.position
"""

UPSERT_ITEM_QUERY = """
INSERT INTO sale_items (
    id, sale_id, product_id, position, quantity,
    unit_price, discount_rate, line_total, is_cancelled
) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
ON CONFLICT (id) DO UPDATE SET
    product_id = EXCLUDED.product_id,
    position = EXCLUDED.position,
    quantity = EXCLUDED.quantity,
    unit_price = EXCLUDED.unit_price,
    discount_rate = EXCLUDED.discount_rate,
    line_total = EXCLUDED.line_total,
    is_cancelled = EXCLUDED.is_cancelled
"""


class PostgreSQLSaleRepository(ISaleRepository):
    """
    PostgreSQL implementation of ISaleRepository.

    Each sale is stored as one ``sales`` row plus one ``sale_items`` row per
    item, with the item order kept in ``position``. Updates are guarded by
    the ``version`` column.
    """

    def __init__(self, adapter: PostgreSQLAdapter) -> None:
        """
        Initialize repository with database adapter.

        Args:
            adapter: PostgreSQL database adapter
        """
        self.adapter = adapter

    async def get_by_id(self, sale_id: UUID) -> Sale | None:
        """
        Retrieve a sale and its items by id.

        Raises:
            RepositoryError: If retrieval operation fails
        """
        try:
            query = f"SELECT {SALE_COLUMNS} {SALE_FROM} WHERE s.id = %s"  # nosec B608
            record = await self.adapter.fetch_one(query, sale_id)
            if record is None:
                return None

            sales = await self._load_sales([record])
            return sales[0]

        except Exception as e:
            logger.error(f"Failed to get sale {sale_id}: {e}")
            raise RepositoryError(f"Failed to retrieve sale: {e}", e) from e

    async def get_by_sale_number(self, sale_number: str) -> Sale | None:
        """
        Retrieve a sale by its business number.

        Raises:
            RepositoryError: If retrieval operation fails
        """
        try:
            query = f"SELECT {SALE_COLUMNS} {SALE_FROM} WHERE s.sale_number = %s"  # nosec B608
            record = await self.adapter.fetch_one(query, sale_number)
            if record is None:
                return None

            sales = await self._load_sales([record])
            return sales[0]

        except Exception as e:
            logger.error(f"Failed to get sale by number {sale_number}: {e}")
            raise RepositoryError(f"Failed to retrieve sale by number: {e}", e) from e

    async def create(self, sale: Sale) -> Sale:
        """
        Insert a new sale and its items.

        Raises:
            DuplicateEntityError: If the sale number is already taken
            RepositoryError: If save operation fails
        """
        try:
            insert_query = """
            INSERT INTO sales (
                id, sale_number, sale_date, customer_id, branch_id,
                total_amount, currency, is_cancelled, created_at,
                updated_at, version
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """

            await self.adapter.execute_query(
                insert_query,
                sale.id,
                sale.sale_number,
                sale.sale_date,
                sale.customer.id,
                sale.branch.id,
                sale.total_amount.amount,
                sale.currency,
                sale.is_cancelled,
                sale.created_at,
                sale.updated_at,
                sale.version,
            )
            await self._save_items(sale)

            logger.debug(f"Inserted sale {sale.id} with {sale.item_count} items")
            return sale

        except IntegrityError as e:
            if "sale_number" in e.constraint:
                logger.warning(f"Sale number {sale.sale_number} is already taken")
                raise DuplicateEntityError("Sale", sale.sale_number) from e
            logger.error(f"Integrity error saving sale {sale.id}: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to create sale {sale.id}: {e}")
            raise RepositoryError(f"Failed to create sale: {e}", e) from e

    async def update(self, sale: Sale) -> Sale:
        """
        Update an existing sale and replace its stored items.

        Items no longer on the sale are deleted; the rest are upserted by id.
        On success ``sale.version`` is advanced to the stored version.

        Raises:
            SaleNotFoundError: If the sale doesn't exist
            StaleDataException: If the stored version differs from ``sale.version``
            DuplicateEntityError: If the new sale number is already taken
            RepositoryError: If update operation fails
        """
        try:
            update_query = """
            UPDATE sales SET
                sale_number = %s, sale_date = %s, customer_id = %s,
                branch_id = %s, total_amount = %s, currency = %s,
                is_cancelled = %s, updated_at = %s, version = version + 1
            WHERE id = %s AND version = %s
            """

            result = await self.adapter.execute_query(
                update_query,
                sale.sale_number,
                sale.sale_date,
                sale.customer.id,
                sale.branch.id,
                sale.total_amount.amount,
                sale.currency,
                sale.is_cancelled,
                sale.updated_at or datetime.now(UTC),
                sale.id,  # id and version at the end for WHERE clause
                sale.version,
            )

            if affected_rows(result) == 0:
                current = await self.adapter.fetch_one(
                    "SELECT version FROM sales WHERE id = %s", sale.id
                )
                if current is None:
                    raise SaleNotFoundError(sale.id)
                raise StaleDataException("Sale", sale.id, sale.version, current["version"])

            await self.adapter.execute_query(
                "DELETE FROM sale_items WHERE sale_id = %s AND NOT (id = ANY(%s))",
                sale.id,
                [item.id for item in sale.items],
            )
            await self._save_items(sale)

            sale.version += 1
            logger.debug(f"Updated sale {sale.id} to version {sale.version}")
            return sale

        except (SaleNotFoundError, StaleDataException):
            raise
        except IntegrityError as e:
            if "sale_number" in e.constraint:
                logger.warning(f"Sale number {sale.sale_number} is already taken")
                raise DuplicateEntityError("Sale", sale.sale_number) from e
            logger.error(f"Integrity error saving sale {sale.id}: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to update sale {sale.id}: {e}")
            raise RepositoryError(f"Failed to update sale: {e}", e) from e

    async def get_paginated(self, page_number: int, page_size: int) -> Page[Sale]:
        """List sales, most recent sale date first."""
        return await self._get_page("", (), page_number, page_size, "sales")

    async def get_paginated_by_customer(
        self, customer_id: UUID, page_number: int, page_size: int
    ) -> Page[Sale]:
        """List a customer's sales, most recent sale date first."""
        return await self._get_page(
            "WHERE s.customer_id = %s", (customer_id,), page_number, page_size, "customer sales"
        )

    async def get_paginated_by_branch(
        self, branch_id: UUID, page_number: int, page_size: int
    ) -> Page[Sale]:
        """List a branch's sales, most recent sale date first."""
        return await self._get_page(
            "WHERE s.branch_id = %s", (branch_id,), page_number, page_size, "branch sales"
        )

    async def get_paginated_by_date_range(
        self, start_date: datetime, end_date: datetime, page_number: int, page_size: int
    ) -> Page[Sale]:
        """List sales dated within ``start_date``..``end_date`` inclusive."""
        return await self._get_page(
            "WHERE s.sale_date >= %s AND s.sale_date <= %s",
            (start_date, end_date),
            page_number,
            page_size,
            "sales by date range",
        )

    async def _get_page(
        self,
        where: str,
        params: Sequence[Any],
        page_number: int,
        page_size: int,
        description: str,
    ) -> Page[Sale]:
        """
        Run a filtered, paginated listing.

        Raises:
            RepositoryError: If retrieval operation fails
        """
        try:
            count_query = f"SELECT COUNT(*) AS total {SALE_FROM} {where}"  # nosec B608
            count_record = await self.adapter.fetch_one(count_query, *params)
            total = count_record["total"] if count_record else 0

            offset = (page_number - 1) * page_size
            query = f"""
            SELECT {SALE_COLUMNS} {SALE_FROM} {where}
            ORDER BY s.sale_date DESC, s.sale_number ASC
            LIMIT %s OFFSET %s
            """  # nosec B608 - filters are fixed fragments, values are parameters

            records = await self.adapter.fetch_all(query, *params, page_size, offset)
            sales = await self._load_sales(records)

            return Page(
                items=sales, total_count=total, page_number=page_number, page_size=page_size
            )

        except Exception as e:
            logger.error(f"Failed to list {description}: {e}")
            raise RepositoryError(f"Failed to retrieve {description}: {e}", e) from e

    async def _save_items(self, sale: Sale) -> None:
        """Upsert every item of ``sale`` in order."""
        await self.adapter.execute_batch(
            UPSERT_ITEM_QUERY,
            [
                (
                    item.id,
                    sale.id,
                    item.product_id,
                    position,
                    item.quantity,
                    item.unit_price.amount if item.unit_price else None,
                    item.discount_rate,
                    item.line_total.amount,
                    item.is_cancelled,
                )
                for position, item in enumerate(sale.items)
            ],
        )

    async def _load_sales(self, records: Sequence[dict[str, Any]]) -> list[Sale]:
        """Fetch the items for ``records`` in one query and build the aggregates."""
        if not records:
            return []

        item_records = await self.adapter.fetch_all(ITEMS_QUERY, [r["id"] for r in records])

        items_by_sale: dict[UUID, list[dict[str, Any]]] = {}
        for item_record in item_records:
            items_by_sale.setdefault(item_record["sale_id"], []).append(item_record)

        return [self._map_record_to_sale(r, items_by_sale.get(r["id"], [])) for r in records]

    def _map_record_to_sale(
        self, record: dict[str, Any], item_records: Sequence[dict[str, Any]]
    ) -> Sale:
        """
        Map a sale record and its item records to a Sale aggregate.

        Derived amounts are recomputed by the entities from quantity and
        unit price rather than read back.
        """
        currency = record["currency"].strip()

        customer = Customer(
            id=record["customer_id"],
            external_id=record["customer_external_id"],
            name=record["customer_name"],
            email=record["customer_email"],
            phone=record["customer_phone"],
            last_synced_at=record["customer_last_synced_at"],
        )
        branch = Branch(
            id=record["branch_id"],
            external_id=record["branch_external_id"],
            name=record["branch_name"],
            address=record["branch_address"],
            last_synced_at=record["branch_last_synced_at"],
        )
        items = [self._map_record_to_item(r, currency) for r in item_records]

        return Sale(
            id=record["id"],
            sale_number=record["sale_number"],
            sale_date=record["sale_date"],
            customer=customer,
            branch=branch,
            items=items,
            is_cancelled=record["is_cancelled"],
            currency=currency,
            created_at=record["created_at"],
            updated_at=record["updated_at"],
            version=record["version"],
        )

    def _map_record_to_item(self, record: dict[str, Any], currency: str) -> SaleItem:
        product = Product(
            id=record["product_id"],
            external_id=record["product_external_id"],
            name=record["product_name"],
            description=record["product_description"],
            price=Money(record["product_price"], record["product_currency"].strip()),
            last_synced_at=record["product_last_synced_at"],
        )
        return SaleItem(
            id=record["id"],
            product=product,
            quantity=record["quantity"],
            unit_price=Money(record["unit_price"], currency),
            is_cancelled=record["is_cancelled"],
        )
