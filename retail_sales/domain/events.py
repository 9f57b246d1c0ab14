"""
Sale domain events.

Each event is a plain immutable record describing something that happened
to a sale. Events carry denormalized sale data (customer and branch names,
total, item count) so subscribers can log or forward them without loading
the sale again.
"""

from __future__ import annotations

# Standard library imports
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID, uuid4

from .entities import Sale, SaleItem


class SaleEventType(Enum):
    """Event types published by the sales application"""

    SALE_CREATED = "sale_created"
    SALE_MODIFIED = "sale_modified"
    SALE_CANCELLED = "sale_cancelled"
    ITEM_CANCELLED = "item_cancelled"


@dataclass(frozen=True, kw_only=True)
class SaleEvent:
    """Base event with the denormalized sale snapshot."""

    event_type: ClassVar[SaleEventType]

    sale_id: UUID
    sale_number: str
    customer_name: str
    branch_name: str
    total_amount: Decimal
    currency: str
    item_count: int
    sale_date: datetime

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def _sale_fields(cls, sale: Sale) -> dict[str, Any]:
        return {
            "sale_id": sale.id,
            "sale_number": sale.sale_number,
            "customer_name": sale.customer.name,
            "branch_name": sale.branch.name,
            "total_amount": sale.total_amount.amount,
            "currency": sale.total_amount.currency,
            "item_count": sale.item_count,
            "sale_date": sale.sale_date,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary suitable for logging or forwarding."""
        data = asdict(self)
        data["event_type"] = self.event_type.value
        return data


@dataclass(frozen=True, kw_only=True)
class SaleCreatedEvent(SaleEvent):
    event_type: ClassVar[SaleEventType] = SaleEventType.SALE_CREATED

    @classmethod
    def from_sale(cls, sale: Sale) -> SaleCreatedEvent:
        return cls(**cls._sale_fields(sale))


@dataclass(frozen=True, kw_only=True)
class SaleModifiedEvent(SaleEvent):
    event_type: ClassVar[SaleEventType] = SaleEventType.SALE_MODIFIED

    @classmethod
    def from_sale(cls, sale: Sale) -> SaleModifiedEvent:
        return cls(**cls._sale_fields(sale))


@dataclass(frozen=True, kw_only=True)
class SaleCancelledEvent(SaleEvent):
    event_type: ClassVar[SaleEventType] = SaleEventType.SALE_CANCELLED

    @classmethod
    def from_sale(cls, sale: Sale) -> SaleCancelledEvent:
        return cls(**cls._sale_fields(sale))


@dataclass(frozen=True, kw_only=True)
class ItemCancelledEvent(SaleEvent):
    """Published when a single item of a sale is cancelled."""

    event_type: ClassVar[SaleEventType] = SaleEventType.ITEM_CANCELLED

    item_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    discount_rate: Decimal
    line_total: Decimal

    @classmethod
    def from_sale(cls, sale: Sale, item: SaleItem) -> ItemCancelledEvent:
        return cls(
            **cls._sale_fields(sale),
            item_id=item.id,
            product_name=item.product.name,
            quantity=item.quantity,
            unit_price=item.unit_price.amount,
            discount_rate=item.discount_rate,
            line_total=item.line_total.amount,
        )
