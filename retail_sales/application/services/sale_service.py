"""
Sale Application Service

Orchestrates every sale use case as a single unit of work:
validate input -> load references -> build or mutate the Sale aggregate ->
persist -> publish an event.

Validation and not-found errors propagate to the caller unchanged and
nothing is persisted when they occur. Event publication happens after the
transaction has committed and is best-effort: a failing publish is logged
and never turns a completed operation into a failure. Nothing here is
retried.
"""

# Standard library imports
import logging
from datetime import datetime
from typing import cast
from uuid import UUID

# Local imports
from retail_sales.application.interfaces.events import IEventPublisher
from retail_sales.application.interfaces.exceptions import (
    BranchNotFoundError,
    CustomerNotFoundError,
    ProductNotFoundError,
    SaleItemNotFoundError,
    SaleNotFoundError,
)
from retail_sales.application.interfaces.repositories import Page
from retail_sales.application.interfaces.unit_of_work import IUnitOfWork, IUnitOfWorkFactory
from retail_sales.application.services.sale_commands import (
    CreateSaleCommand,
    UpdateSaleCommand,
    validate_date_range,
    validate_page,
    validate_sale_command,
)
from retail_sales.domain.constants import DEFAULT_CURRENCY
from retail_sales.domain.entities import Branch, Customer, Product, Sale, SaleItem
from retail_sales.domain.events import (
    ItemCancelledEvent,
    SaleCancelledEvent,
    SaleCreatedEvent,
    SaleEvent,
    SaleModifiedEvent,
)
from retail_sales.domain.exceptions import ValidationError

logger = logging.getLogger(__name__)


class SaleService:
    """
    Application service for sale operations.

    A fresh unit of work is created per call, so concurrent calls never
    share a transaction. The service itself holds no per-request state.
    """

    def __init__(
        self,
        unit_of_work_factory: IUnitOfWorkFactory,
        event_publisher: IEventPublisher,
        currency: str = DEFAULT_CURRENCY,
    ) -> None:
        """
        Initialize the service.

        Args:
            unit_of_work_factory: Creates one unit of work per operation
            event_publisher: Receives sale events after each change
            currency: Currency new sales are recorded in
        """
        self.unit_of_work_factory = unit_of_work_factory
        self.event_publisher = event_publisher
        self.currency = currency

    async def create_sale(self, command: CreateSaleCommand) -> Sale:
        """
        Register a new sale.

        Args:
            command: Sale number, date, customer, branch and requested items

        Returns:
            The persisted sale

        Raises:
            ValidationError: If the command is malformed
            CustomerNotFoundError: If the customer does not exist
            BranchNotFoundError: If the branch does not exist
            ProductNotFoundError: If any requested product does not exist
            DuplicateEntityError: If the sale number is already taken
        """
        validate_sale_command(command)

        async with self.unit_of_work_factory.create_unit_of_work() as uow:
            customer, branch, products = await self._resolve_references(
                uow, command.customer_id, command.branch_id, command
            )
            self._ensure_currency(self.currency, products)

            sale = Sale.create(
                sale_number=command.sale_number,
                customer=customer,
                branch=branch,
                sale_date=command.sale_date,
                currency=self.currency,
            )
            for item_input, product in zip(command.items, products, strict=True):
                sale.add_item(SaleItem.create(product, item_input.quantity))

            sale.validate()
            sale = await uow.sales.create(sale)

        logger.info(
            f"Created sale {sale.sale_number} ({sale.id}) with {sale.item_count} items, "
            f"total {sale.total_amount}"
        )
        await self._publish(SaleCreatedEvent.from_sale(sale))
        return sale

    async def update_sale(self, command: UpdateSaleCommand) -> Sale:
        """
        Replace a sale's details and its entire item collection.

        Requested items carrying the id of an existing item update that item
        in place; all other requested items are created new. Existing items
        that are not requested are dropped from the sale.

        Args:
            command: Sale id plus the full new state of the sale

        Returns:
            The updated sale

        Raises:
            ValidationError: If the command is malformed
            SaleNotFoundError: If the sale does not exist
            CustomerNotFoundError: If the customer does not exist
            BranchNotFoundError: If the branch does not exist
            ProductNotFoundError: If any requested product does not exist
        """
        validate_sale_command(command)

        async with self.unit_of_work_factory.create_unit_of_work() as uow:
            sale = await self._load_sale(uow, command.sale_id)
            customer, branch, products = await self._resolve_references(
                uow, command.customer_id, command.branch_id, command
            )
            self._ensure_currency(sale.currency, products)

            existing_items = {item.id: item for item in sale.items}
            new_items = []
            for item_input, product in zip(command.items, products, strict=True):
                existing = existing_items.get(item_input.item_id) if item_input.item_id else None
                if existing is not None:
                    existing.reassign(product, item_input.quantity)
                    new_items.append(existing)
                else:
                    new_items.append(SaleItem.create(product, item_input.quantity))

            sale.update_details(
                command.sale_number, cast(datetime, command.sale_date), customer, branch
            )
            sale.replace_items(new_items)
            sale.validate()
            sale = await uow.sales.update(sale)

        logger.info(
            f"Updated sale {sale.sale_number} ({sale.id}): {sale.item_count} items, "
            f"total {sale.total_amount}"
        )
        await self._publish(SaleModifiedEvent.from_sale(sale))
        return sale

    async def cancel_sale(self, sale_id: UUID) -> Sale:
        """
        Cancel a whole sale.

        Items keep their own state; only the sale is flagged as cancelled.

        Raises:
            SaleNotFoundError: If the sale does not exist
        """
        async with self.unit_of_work_factory.create_unit_of_work() as uow:
            sale = await self._load_sale(uow, sale_id)
            sale.cancel()
            sale = await uow.sales.update(sale)

        logger.info(f"Cancelled sale {sale.sale_number} ({sale.id})")
        await self._publish(SaleCancelledEvent.from_sale(sale))
        return sale

    async def cancel_item(self, sale_id: UUID, item_id: UUID) -> Sale:
        """
        Cancel a single item of a sale and recompute the sale total.

        Args:
            sale_id: Sale owning the item
            item_id: Item to cancel

        Returns:
            The updated sale

        Raises:
            SaleNotFoundError: If the sale does not exist
            SaleItemNotFoundError: If the item does not belong to the sale
        """
        async with self.unit_of_work_factory.create_unit_of_work() as uow:
            sale = await self._load_sale(uow, sale_id)
            item = sale.find_item(item_id)
            if item is None:
                raise SaleItemNotFoundError(sale_id, item_id)
            sale.cancel_item(item_id)
            sale = await uow.sales.update(sale)

        logger.info(
            f"Cancelled item {item_id} of sale {sale.sale_number} ({sale.id}), "
            f"new total {sale.total_amount}"
        )
        await self._publish(ItemCancelledEvent.from_sale(sale, item))
        return sale

    async def get_sale_by_id(self, sale_id: UUID) -> Sale | None:
        """Look up a sale by id, returning None when it does not exist."""
        async with self.unit_of_work_factory.create_unit_of_work() as uow:
            return await uow.sales.get_by_id(sale_id)

    async def get_sale_by_number(self, sale_number: str) -> Sale | None:
        """Look up a sale by its sale number, returning None when it does not exist."""
        async with self.unit_of_work_factory.create_unit_of_work() as uow:
            return await uow.sales.get_by_sale_number(sale_number)

    async def list_sales(self, page_number: int, page_size: int) -> Page[Sale]:
        """
        List sales, most recent first.

        Raises:
            ValidationError: If page number is below 1 or page size is not positive
        """
        validate_page(page_number, page_size)
        async with self.unit_of_work_factory.create_unit_of_work() as uow:
            return await uow.sales.get_paginated(page_number, page_size)

    async def list_sales_by_customer(
        self, customer_id: UUID, page_number: int, page_size: int
    ) -> Page[Sale]:
        validate_page(page_number, page_size)
        async with self.unit_of_work_factory.create_unit_of_work() as uow:
            return await uow.sales.get_paginated_by_customer(customer_id, page_number, page_size)

    async def list_sales_by_branch(
        self, branch_id: UUID, page_number: int, page_size: int
    ) -> Page[Sale]:
        validate_page(page_number, page_size)
        async with self.unit_of_work_factory.create_unit_of_work() as uow:
            return await uow.sales.get_paginated_by_branch(branch_id, page_number, page_size)

    async def list_sales_by_date_range(
        self, start_date: datetime, end_date: datetime, page_number: int, page_size: int
    ) -> Page[Sale]:
        """
        List sales dated within ``start_date`` and ``end_date`` inclusive.

        Raises:
            ValidationError: If the page is invalid or the range is reversed
        """
        validate_page(page_number, page_size)
        validate_date_range(start_date, end_date)
        async with self.unit_of_work_factory.create_unit_of_work() as uow:
            return await uow.sales.get_paginated_by_date_range(
                start_date, end_date, page_number, page_size
            )

    async def _load_sale(self, uow: IUnitOfWork, sale_id: UUID) -> Sale:
        sale = await uow.sales.get_by_id(sale_id)
        if sale is None:
            raise SaleNotFoundError(sale_id)
        return sale

    async def _resolve_references(
        self,
        uow: IUnitOfWork,
        customer_id: UUID | None,
        branch_id: UUID | None,
        command: CreateSaleCommand | UpdateSaleCommand,
    ) -> tuple[Customer, Branch, list[Product]]:
        """
        Load customer, branch, then each item's product in input order.

        The first missing reference aborts the operation.
        """
        # Presence was checked by validate_sale_command
        customer_id = cast(UUID, customer_id)
        branch_id = cast(UUID, branch_id)

        customer = await uow.customers.get_by_id(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)

        branch = await uow.branches.get_by_id(branch_id)
        if branch is None:
            raise BranchNotFoundError(branch_id)

        resolved: dict[UUID, Product] = {}
        products = []
        for item_input in command.items:
            product_id = cast(UUID, item_input.product_id)
            product = resolved.get(product_id)
            if product is None:
                product = await uow.products.get_by_id(product_id)
                if product is None:
                    raise ProductNotFoundError(product_id)
                resolved[product_id] = product
            products.append(product)

        return customer, branch, products

    @staticmethod
    def _ensure_currency(currency: str, products: list[Product]) -> None:
        for product in products:
            if product.price.currency != currency:
                raise ValidationError(
                    f"Product {product.name} is priced in {product.price.currency}, "
                    f"sale is in {currency}",
                    field="currency",
                    value=product.price.currency,
                )

    async def _publish(self, event: SaleEvent) -> None:
        try:
            await self.event_publisher.publish(event)
            logger.info(f"{type(event).__name__} published for sale {event.sale_id}")
        except Exception as e:
            logger.error(
                f"Error publishing {type(event).__name__} for sale {event.sale_id}: {e}",
                exc_info=True,
            )
