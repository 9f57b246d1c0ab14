"""
Sale Event Logging Subscribers

Writes one structured log line per published sale event.
"""

import logging

from retail_sales.application.interfaces.events import IEventBus
from retail_sales.domain.events import (
    ItemCancelledEvent,
    SaleCancelledEvent,
    SaleCreatedEvent,
    SaleEvent,
    SaleModifiedEvent,
)

logger = logging.getLogger("retail_sales.events")


class SaleEventLogger:
    """Logs sale events with their denormalized sale fields."""

    def __init__(self, event_logger: logging.Logger | None = None) -> None:
        self.logger = event_logger or logger

    def on_sale_created(self, event: SaleCreatedEvent) -> None:
        self._log(event, f"Sale {event.sale_number} created for {event.customer_name}")

    def on_sale_modified(self, event: SaleModifiedEvent) -> None:
        self._log(event, f"Sale {event.sale_number} modified")

    def on_sale_cancelled(self, event: SaleCancelledEvent) -> None:
        self._log(event, f"Sale {event.sale_number} cancelled")

    def on_item_cancelled(self, event: ItemCancelledEvent) -> None:
        self._log(
            event,
            f"Item {event.product_name} x{event.quantity} cancelled on sale {event.sale_number}",
            item_id=event.item_id,
        )

    def _log(self, event: SaleEvent, message: str, **extra: object) -> None:
        self.logger.info(
            message,
            extra={
                "event_type": event.event_type.value,
                "sale_id": event.sale_id,
                "sale_number": event.sale_number,
                "event_id": event.event_id,
                "customer_name": event.customer_name,
                "branch_name": event.branch_name,
                "total_amount": event.total_amount,
                "currency": event.currency,
                "item_count": event.item_count,
                "sale_date": event.sale_date,
                **extra,
            },
        )


def register_sale_event_logging(bus: IEventBus, event_logger: SaleEventLogger | None = None) -> SaleEventLogger:
    """
    Subscribe a SaleEventLogger to every sale event on ``bus``.

    Returns:
        The subscribed logger, for later unsubscription
    """
    subscriber = event_logger or SaleEventLogger()
    bus.subscribe(SaleCreatedEvent, subscriber.on_sale_created)
    bus.subscribe(SaleModifiedEvent, subscriber.on_sale_modified)
    bus.subscribe(SaleCancelledEvent, subscriber.on_sale_cancelled)
    bus.subscribe(ItemCancelledEvent, subscriber.on_item_cancelled)
    return subscriber
