"""Unit tests for the sale event logging subscriber."""

# Standard library imports
from decimal import Decimal
from unittest.mock import MagicMock

# Third-party imports
import pytest

# Local imports
from retail_sales.domain.events import (
    ItemCancelledEvent,
    SaleCancelledEvent,
    SaleCreatedEvent,
    SaleModifiedEvent,
)
from retail_sales.infrastructure.events import (
    InMemoryEventBus,
    SaleEventLogger,
    register_sale_event_logging,
)


@pytest.fixture
def event_logger():
    return SaleEventLogger(event_logger=MagicMock())


@pytest.mark.unit
class TestSaleEventLogger:
    def test_sale_created_logged_with_sale_fields(self, event_logger, sample_sale):
        event = SaleCreatedEvent.from_sale(sample_sale)

        event_logger.on_sale_created(event)

        message = event_logger.logger.info.call_args.args[0]
        extra = event_logger.logger.info.call_args.kwargs["extra"]
        assert message == "Sale S-0001 created for Ada Lovelace"
        assert extra["event_type"] == "sale_created"
        assert extra["sale_id"] == sample_sale.id
        assert extra["total_amount"] == Decimal("1050.00")
        assert extra["item_count"] == 2
        assert extra["branch_name"] == "Downtown"

    def test_item_cancelled_includes_item(self, event_logger, sample_sale):
        item = sample_sale.items[0]
        sample_sale.cancel_item(item.id)

        event_logger.on_item_cancelled(ItemCancelledEvent.from_sale(sample_sale, item))

        message = event_logger.logger.info.call_args.args[0]
        extra = event_logger.logger.info.call_args.kwargs["extra"]
        assert message == "Item Coffee Beans x5 cancelled on sale S-0001"
        assert extra["item_id"] == item.id
        assert extra["event_type"] == "item_cancelled"


@pytest.mark.unit
class TestRegistration:
    def test_subscribes_every_sale_event(self):
        bus = InMemoryEventBus()

        subscriber = register_sale_event_logging(bus)

        assert isinstance(subscriber, SaleEventLogger)
        for event_type in (
            SaleCreatedEvent,
            SaleModifiedEvent,
            SaleCancelledEvent,
            ItemCancelledEvent,
        ):
            assert bus.handler_count(event_type) == 1

    async def test_published_events_reach_logger(self, event_logger, sample_sale):
        bus = InMemoryEventBus()
        register_sale_event_logging(bus, event_logger)

        sample_sale.cancel()
        await bus.publish(SaleCancelledEvent.from_sale(sample_sale))
        await bus.publish(SaleModifiedEvent.from_sale(sample_sale))

        messages = [call.args[0] for call in event_logger.logger.info.call_args_list]
        assert messages == ["Sale S-0001 cancelled", "Sale S-0001 modified"]
