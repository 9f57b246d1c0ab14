"""
Unit tests for SaleService.

Repositories, the unit of work and the event publisher are mocked; tests
check orchestration order, error propagation, persistence calls and event
publication.
"""

# Standard library imports
import asyncio
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

# Third-party imports
import pytest

# Local imports
from retail_sales.application.interfaces.exceptions import (
    BranchNotFoundError,
    CustomerNotFoundError,
    EventPublishError,
    ProductNotFoundError,
    SaleItemNotFoundError,
    SaleNotFoundError,
)
from retail_sales.application.interfaces.repositories import Page
from retail_sales.application.services import (
    CreateSaleCommand,
    SaleItemInput,
    SaleService,
    UpdateSaleCommand,
)
from retail_sales.domain.entities import Product
from retail_sales.domain.events import (
    ItemCancelledEvent,
    SaleCancelledEvent,
    SaleCreatedEvent,
    SaleModifiedEvent,
)
from retail_sales.domain.exceptions import ValidationError
from retail_sales.domain.value_objects import Money


@pytest.fixture
def service(mock_unit_of_work_factory, mock_event_publisher):
    return SaleService(mock_unit_of_work_factory, mock_event_publisher)


@pytest.fixture
def wired_uow(mock_unit_of_work, customer, branch, product_100, product_200):
    """Unit of work whose reference repositories resolve the fixture entities."""
    products = {product_100.id: product_100, product_200.id: product_200}
    mock_unit_of_work.customers.get_by_id.side_effect = lambda cid: (
        customer if cid == customer.id else None
    )
    mock_unit_of_work.branches.get_by_id.side_effect = lambda bid: (
        branch if bid == branch.id else None
    )
    mock_unit_of_work.products.get_by_id.side_effect = lambda pid: products.get(pid)
    mock_unit_of_work.sales.create.side_effect = lambda sale: sale
    mock_unit_of_work.sales.update.side_effect = lambda sale: sale
    return mock_unit_of_work


def create_command(customer, branch, *items, sale_number="S-100") -> CreateSaleCommand:
    return CreateSaleCommand(
        sale_number=sale_number,
        sale_date=datetime(2024, 5, 1, tzinfo=UTC),
        customer_id=customer.id,
        branch_id=branch.id,
        items=list(items),
    )


@pytest.mark.unit
class TestCreateSale:
    """Test registering sales."""

    async def test_create_sale_success(
        self, service, wired_uow, mock_event_publisher, customer, branch, product_100, product_200
    ):
        command = create_command(
            customer,
            branch,
            SaleItemInput(product_100.id, 5),
            SaleItemInput(product_200.id, 3),
        )

        sale = await service.create_sale(command)

        assert sale.sale_number == "S-100"
        assert sale.customer is customer
        assert sale.branch is branch
        assert sale.item_count == 2
        assert sale.total_amount == Money(Decimal("1050.00"))
        wired_uow.sales.create.assert_awaited_once_with(sale)

        mock_event_publisher.publish.assert_awaited_once()
        event = mock_event_publisher.publish.await_args.args[0]
        assert isinstance(event, SaleCreatedEvent)
        assert event.sale_id == sale.id
        assert event.total_amount == Decimal("1050.00")

    async def test_same_product_twice_loaded_once(
        self, service, wired_uow, customer, branch, product_100
    ):
        command = create_command(
            customer, branch, SaleItemInput(product_100.id, 1), SaleItemInput(product_100.id, 2)
        )

        sale = await service.create_sale(command)

        assert sale.item_count == 2
        wired_uow.products.get_by_id.assert_awaited_once_with(product_100.id)

    async def test_invalid_command_touches_nothing(
        self, service, mock_unit_of_work_factory, mock_event_publisher, customer, branch
    ):
        command = create_command(customer, branch)

        with pytest.raises(ValidationError, match="Sale must have at least one item"):
            await service.create_sale(command)

        mock_unit_of_work_factory.create_unit_of_work.assert_not_called()
        mock_event_publisher.publish.assert_not_awaited()

    async def test_invalid_quantity_rejected_before_lookup(
        self, service, mock_unit_of_work_factory, customer, branch, product_100
    ):
        command = create_command(customer, branch, SaleItemInput(product_100.id, 21))

        with pytest.raises(ValidationError, match="Cannot sell more than 20 identical items"):
            await service.create_sale(command)

        mock_unit_of_work_factory.create_unit_of_work.assert_not_called()

    async def test_missing_customer_checked_first(
        self, service, wired_uow, mock_event_publisher, branch, product_100
    ):
        command = CreateSaleCommand(
            sale_number="S-1",
            sale_date=datetime(2024, 5, 1, tzinfo=UTC),
            customer_id=uuid4(),
            branch_id=uuid4(),
            items=[SaleItemInput(uuid4(), 1)],
        )

        with pytest.raises(CustomerNotFoundError):
            await service.create_sale(command)

        wired_uow.branches.get_by_id.assert_not_awaited()
        wired_uow.products.get_by_id.assert_not_awaited()
        wired_uow.sales.create.assert_not_awaited()
        mock_event_publisher.publish.assert_not_awaited()

    async def test_missing_branch(self, service, wired_uow, customer, product_100):
        command = CreateSaleCommand(
            sale_number="S-1",
            sale_date=datetime(2024, 5, 1, tzinfo=UTC),
            customer_id=customer.id,
            branch_id=uuid4(),
            items=[SaleItemInput(product_100.id, 1)],
        )

        with pytest.raises(BranchNotFoundError):
            await service.create_sale(command)

        wired_uow.products.get_by_id.assert_not_awaited()
        wired_uow.sales.create.assert_not_awaited()

    async def test_first_missing_product_aborts(
        self, service, wired_uow, customer, branch, product_100
    ):
        missing_id = uuid4()
        command = create_command(
            customer,
            branch,
            SaleItemInput(product_100.id, 1),
            SaleItemInput(missing_id, 1),
            SaleItemInput(uuid4(), 1),
        )

        with pytest.raises(ProductNotFoundError) as exc_info:
            await service.create_sale(command)

        assert exc_info.value.product_id == missing_id
        assert wired_uow.products.get_by_id.await_count == 2
        wired_uow.sales.create.assert_not_awaited()

    async def test_foreign_currency_product_rejected(self, service, wired_uow, customer, branch):
        euro_product = Product(name="Croissant", price=Money(Decimal("2"), "EUR"))
        wired_uow.products.get_by_id.side_effect = lambda pid: euro_product

        with pytest.raises(ValidationError, match="priced in EUR"):
            await service.create_sale(
                create_command(customer, branch, SaleItemInput(euro_product.id, 1))
            )

        wired_uow.sales.create.assert_not_awaited()

    async def test_publish_failure_does_not_fail_operation(
        self, service, wired_uow, mock_event_publisher, customer, branch, product_100
    ):
        mock_event_publisher.publish.side_effect = EventPublishError(
            "SaleCreatedEvent", [("broken", RuntimeError("boom"))]
        )

        sale = await service.create_sale(
            create_command(customer, branch, SaleItemInput(product_100.id, 1))
        )

        assert sale.total_amount == Money(Decimal("100.00"))
        wired_uow.sales.create.assert_awaited_once()

    async def test_persistence_error_propagates_without_publishing(
        self, service, wired_uow, mock_event_publisher, customer, branch, product_100
    ):
        wired_uow.sales.create.side_effect = RuntimeError("database down")

        with pytest.raises(RuntimeError, match="database down"):
            await service.create_sale(
                create_command(customer, branch, SaleItemInput(product_100.id, 1))
            )

        mock_event_publisher.publish.assert_not_awaited()

    async def test_cancellation_propagates_through_unit_of_work(
        self, service, wired_uow, mock_event_publisher, customer, branch, product_100
    ):
        wired_uow.sales.create.side_effect = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await service.create_sale(
                create_command(customer, branch, SaleItemInput(product_100.id, 1))
            )

        exit_args = wired_uow.__aexit__.await_args.args
        assert exit_args[0] is asyncio.CancelledError
        mock_event_publisher.publish.assert_not_awaited()


@pytest.mark.unit
class TestUpdateSale:
    """Test replacing a sale's details and items."""

    def update_command(self, sale, customer, branch, *items, sale_number="S-0001"):
        return UpdateSaleCommand(
            sale_id=sale.id,
            sale_number=sale_number,
            sale_date=datetime(2024, 6, 1, tzinfo=UTC),
            customer_id=customer.id,
            branch_id=branch.id,
            items=list(items),
        )

    async def test_update_reuses_items_by_id(
        self,
        service,
        wired_uow,
        mock_event_publisher,
        sample_sale,
        customer,
        branch,
        product_100,
        product_200,
    ):
        wired_uow.sales.get_by_id.return_value = sample_sale
        kept = sample_sale.items[0]
        dropped = sample_sale.items[1]

        command = self.update_command(
            sample_sale,
            customer,
            branch,
            SaleItemInput(product_200.id, 10, item_id=kept.id),
            SaleItemInput(product_100.id, 1),
            sale_number="S-0001-B",
        )

        sale = await service.update_sale(command)

        assert sale.sale_number == "S-0001-B"
        assert sale.sale_date == datetime(2024, 6, 1, tzinfo=UTC)
        assert [item.id for item in sale.items][0] == kept.id
        assert dropped not in sale.items
        assert kept.product is product_200
        assert kept.unit_price == Money(Decimal("200"))
        # 200 * 10 * 0.8 + 100
        assert sale.total_amount == Money(Decimal("1700.00"))
        wired_uow.sales.update.assert_awaited_once_with(sale)

        event = mock_event_publisher.publish.await_args.args[0]
        assert isinstance(event, SaleModifiedEvent)
        assert event.total_amount == Decimal("1700.00")

    async def test_unknown_item_id_creates_new_item(
        self, service, wired_uow, sample_sale, customer, branch, product_100
    ):
        wired_uow.sales.get_by_id.return_value = sample_sale
        stray_id = uuid4()

        sale = await service.update_sale(
            self.update_command(
                sample_sale, customer, branch, SaleItemInput(product_100.id, 2, item_id=stray_id)
            )
        )

        assert sale.item_count == 1
        assert sale.items[0].id != stray_id

    async def test_update_missing_sale(
        self, service, wired_uow, mock_event_publisher, sample_sale, customer, branch, product_100
    ):
        wired_uow.sales.get_by_id.return_value = None

        with pytest.raises(SaleNotFoundError):
            await service.update_sale(
                self.update_command(sample_sale, customer, branch, SaleItemInput(product_100.id, 1))
            )

        wired_uow.customers.get_by_id.assert_not_awaited()
        wired_uow.sales.update.assert_not_awaited()
        mock_event_publisher.publish.assert_not_awaited()

    async def test_update_missing_product_leaves_sale_untouched(
        self, service, wired_uow, sample_sale, customer, branch
    ):
        wired_uow.sales.get_by_id.return_value = sample_sale

        with pytest.raises(ProductNotFoundError):
            await service.update_sale(
                self.update_command(sample_sale, customer, branch, SaleItemInput(uuid4(), 1))
            )

        assert sample_sale.total_amount == Money(Decimal("1050.00"))
        wired_uow.sales.update.assert_not_awaited()

    async def test_update_cancelled_sale_allowed(
        self, service, wired_uow, sample_sale, customer, branch, product_100
    ):
        sample_sale.cancel()
        wired_uow.sales.get_by_id.return_value = sample_sale

        sale = await service.update_sale(
            self.update_command(sample_sale, customer, branch, SaleItemInput(product_100.id, 3))
        )

        assert sale.is_cancelled
        assert sale.total_amount == Money(Decimal("300.00"))


@pytest.mark.unit
class TestCancellation:
    """Test cancelling sales and items."""

    async def test_cancel_sale(self, service, wired_uow, mock_event_publisher, sample_sale):
        wired_uow.sales.get_by_id.return_value = sample_sale

        sale = await service.cancel_sale(sample_sale.id)

        assert sale.is_cancelled
        assert sale.total_amount == Money(Decimal("1050.00"))
        wired_uow.sales.update.assert_awaited_once_with(sample_sale)
        assert isinstance(mock_event_publisher.publish.await_args.args[0], SaleCancelledEvent)

    async def test_cancel_missing_sale_performs_no_persistence(
        self, service, wired_uow, mock_event_publisher
    ):
        wired_uow.sales.get_by_id.return_value = None
        sale_id = uuid4()

        with pytest.raises(SaleNotFoundError) as exc_info:
            await service.cancel_sale(sale_id)

        assert exc_info.value.sale_id == sale_id
        assert exc_info.value.entity_type == "Sale"
        wired_uow.sales.update.assert_not_awaited()
        wired_uow.sales.create.assert_not_awaited()
        mock_event_publisher.publish.assert_not_awaited()

    async def test_cancel_item(self, service, wired_uow, mock_event_publisher, sample_sale):
        wired_uow.sales.get_by_id.return_value = sample_sale
        item = sample_sale.items[0]

        sale = await service.cancel_item(sample_sale.id, item.id)

        assert item.is_cancelled
        assert sale.total_amount == Money(Decimal("600.00"))
        wired_uow.sales.update.assert_awaited_once_with(sample_sale)

        event = mock_event_publisher.publish.await_args.args[0]
        assert isinstance(event, ItemCancelledEvent)
        assert event.item_id == item.id
        assert event.total_amount == Decimal("600.00")

    async def test_cancel_unknown_item(self, service, wired_uow, mock_event_publisher, sample_sale):
        wired_uow.sales.get_by_id.return_value = sample_sale
        item_id = uuid4()

        with pytest.raises(SaleItemNotFoundError) as exc_info:
            await service.cancel_item(sample_sale.id, item_id)

        assert exc_info.value.item_id == item_id
        assert sample_sale.total_amount == Money(Decimal("1050.00"))
        wired_uow.sales.update.assert_not_awaited()
        mock_event_publisher.publish.assert_not_awaited()

    async def test_cancel_item_of_missing_sale(self, service, wired_uow):
        wired_uow.sales.get_by_id.return_value = None

        with pytest.raises(SaleNotFoundError):
            await service.cancel_item(uuid4(), uuid4())


@pytest.mark.unit
class TestQueries:
    """Test lookups and listings."""

    async def test_get_by_id(self, service, wired_uow, sample_sale, mock_event_publisher):
        wired_uow.sales.get_by_id.return_value = sample_sale

        assert await service.get_sale_by_id(sample_sale.id) is sample_sale
        mock_event_publisher.publish.assert_not_awaited()

    async def test_get_by_id_absent(self, service, wired_uow):
        wired_uow.sales.get_by_id.return_value = None

        assert await service.get_sale_by_id(uuid4()) is None

    async def test_get_by_number(self, service, wired_uow, sample_sale):
        wired_uow.sales.get_by_sale_number.return_value = sample_sale

        assert await service.get_sale_by_number("S-0001") is sample_sale
        wired_uow.sales.get_by_sale_number.assert_awaited_once_with("S-0001")

    async def test_list_sales(self, service, wired_uow, sample_sale):
        page = Page(items=[sample_sale], total_count=1, page_number=1, page_size=10)
        wired_uow.sales.get_paginated.return_value = page

        assert await service.list_sales(1, 10) is page
        wired_uow.sales.get_paginated.assert_awaited_once_with(1, 10)

    async def test_list_by_customer(self, service, wired_uow, customer):
        wired_uow.sales.get_paginated_by_customer.return_value = Page()

        await service.list_sales_by_customer(customer.id, 2, 5)

        wired_uow.sales.get_paginated_by_customer.assert_awaited_once_with(customer.id, 2, 5)

    async def test_list_by_branch(self, service, wired_uow, branch):
        wired_uow.sales.get_paginated_by_branch.return_value = Page()

        await service.list_sales_by_branch(branch.id, 1, 5)

        wired_uow.sales.get_paginated_by_branch.assert_awaited_once_with(branch.id, 1, 5)

    async def test_list_by_date_range(self, service, wired_uow):
        start = datetime(2024, 1, 1, tzinfo=UTC)
        end = datetime(2024, 1, 31, tzinfo=UTC)
        wired_uow.sales.get_paginated_by_date_range.return_value = Page()

        await service.list_sales_by_date_range(start, end, 1, 10)

        wired_uow.sales.get_paginated_by_date_range.assert_awaited_once_with(start, end, 1, 10)

    async def test_reversed_date_range_rejected(self, service, mock_unit_of_work_factory):
        start = datetime(2024, 2, 1, tzinfo=UTC)
        end = datetime(2024, 1, 1, tzinfo=UTC)

        with pytest.raises(ValidationError):
            await service.list_sales_by_date_range(start, end, 1, 10)

        mock_unit_of_work_factory.create_unit_of_work.assert_not_called()

    async def test_invalid_page_rejected(self, service, mock_unit_of_work_factory):
        with pytest.raises(ValidationError):
            await service.list_sales(0, 10)

        mock_unit_of_work_factory.create_unit_of_work.assert_not_called()

    async def test_each_operation_gets_its_own_unit_of_work(
        self, service, wired_uow, mock_unit_of_work_factory
    ):
        wired_uow.sales.get_by_id.return_value = None

        await service.get_sale_by_id(uuid4())
        await service.get_sale_by_id(uuid4())

        assert mock_unit_of_work_factory.create_unit_of_work.call_count == 2


@pytest.mark.unit
async def test_publisher_is_called_after_unit_of_work_exits(
    mock_unit_of_work_factory, wired_uow, customer, branch, product_100
):
    order: list[str] = []
    wired_uow.__aexit__ = AsyncMock(side_effect=lambda *args: order.append("commit"))
    publisher = AsyncMock()
    publisher.publish.side_effect = lambda event: order.append("publish")
    service = SaleService(mock_unit_of_work_factory, publisher)

    await service.create_sale(create_command(customer, branch, SaleItemInput(product_100.id, 1)))

    assert order == ["commit", "publish"]
