"""
Event Publishing Interfaces

Defines how the application announces sale events without knowing who
listens. Implementations decide delivery; subscribers never see each other.
"""

# Standard library imports
from abc import abstractmethod
from collections.abc import Awaitable, Callable
from typing import Protocol

# Local imports
from retail_sales.domain.events import SaleEvent

EventHandler = Callable[[SaleEvent], Awaitable[None] | None]


class IEventPublisher(Protocol):
    """Publishes sale events to interested subscribers."""

    @abstractmethod
    async def publish(self, event: SaleEvent) -> None:
        """
        Publish an event.

        Args:
            event: The event to deliver

        Raises:
            EventPublishError: If delivery to any subscriber fails
        """
        ...


class IEventBus(IEventPublisher, Protocol):
    """Publisher that also manages its own subscriptions."""

    @abstractmethod
    def subscribe(self, event_type: type[SaleEvent], handler: EventHandler) -> None:
        """
        Register a handler for an event class.

        Args:
            event_type: Event class to listen for
            handler: Sync or async callable receiving the event
        """
        ...

    @abstractmethod
    def unsubscribe(self, event_type: type[SaleEvent], handler: EventHandler) -> bool:
        """
        Remove a previously registered handler.

        Returns:
            True if the handler was registered
        """
        ...
