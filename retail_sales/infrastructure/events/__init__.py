"""Sale event dispatch and subscribers."""

from .event_bus import InMemoryEventBus
from .handlers import SaleEventLogger, register_sale_event_logging

__all__ = ["InMemoryEventBus", "SaleEventLogger", "register_sale_event_logging"]
