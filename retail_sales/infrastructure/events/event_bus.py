"""
In-Memory Event Bus

Core event dispatch for sale events. Handlers are registered per event class
and invoked in registration order within the publishing task.
"""

import inspect
import logging
from collections import defaultdict

from retail_sales.application.interfaces.events import EventHandler, IEventBus
from retail_sales.application.interfaces.exceptions import EventPublishError
from retail_sales.domain.events import SaleEvent

logger = logging.getLogger(__name__)


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class InMemoryEventBus(IEventBus):
    """
    Manages event subscriptions and dispatch.

    Every handler subscribed to the event's class is called, sync or async.
    A failing handler does not prevent the others from running; failures
    are collected and raised together once dispatch completes.
    """

    def __init__(self) -> None:
        self.handlers: dict[type[SaleEvent], list[EventHandler]] = defaultdict(list)
        logger.info("Event bus initialized")

    def subscribe(self, event_type: type[SaleEvent], handler: EventHandler) -> None:
        """
        Register a handler for an event class.

        Args:
            event_type: Event class to listen for
            handler: Sync or async callable receiving the event
        """
        self.handlers[event_type].append(handler)
        logger.debug(f"Subscribed {_handler_name(handler)} to '{event_type.__name__}'")

    def unsubscribe(self, event_type: type[SaleEvent], handler: EventHandler) -> bool:
        """
        Unregister a handler.

        Returns:
            True if handler was removed
        """
        registered = self.handlers.get(event_type)
        if not registered or handler not in registered:
            return False

        registered.remove(handler)
        logger.debug(f"Unsubscribed {_handler_name(handler)} from '{event_type.__name__}'")
        return True

    def handler_count(self, event_type: type[SaleEvent]) -> int:
        return len(self.handlers.get(event_type, []))

    def clear(self) -> None:
        """Remove every subscription."""
        total = sum(len(handlers) for handlers in self.handlers.values())
        self.handlers.clear()
        logger.info(f"Cleared all {total} event handlers")

    async def publish(self, event: SaleEvent) -> None:
        """
        Deliver ``event`` to every handler subscribed to its class.

        Raises:
            EventPublishError: If one or more handlers raised
        """
        handlers = list(self.handlers.get(type(event), []))
        event_name = type(event).__name__

        if not handlers:
            logger.debug(f"No handlers for '{event_name}'")
            return

        failures: list[tuple[str, Exception]] = []
        for handler in handlers:
            name = _handler_name(handler)
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Event handler {name} failed for '{event_name}': {e}",
                    exc_info=True,
                    extra={"sale_id": event.sale_id, "event_type": event.event_type.value},
                )
                failures.append((name, e))

        logger.debug(
            f"Event '{event_name}' delivered to {len(handlers) - len(failures)}/{len(handlers)} handlers"
        )

        if failures:
            raise EventPublishError(event_name, failures)
