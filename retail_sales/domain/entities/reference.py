"""
Reference Entities - Customer, Branch and Product data mirrored from systems of record
"""

from __future__ import annotations

# Standard library imports
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from ..value_objects import Money


@dataclass(frozen=True)
class Customer:
    """Customer a sale is made to."""

    id: UUID = field(default_factory=uuid4)
    external_id: str = ""
    name: str = ""
    email: str | None = None
    phone: str | None = None
    last_synced_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Customer name cannot be empty")


@dataclass(frozen=True)
class Branch:
    """Store branch where a sale takes place."""

    id: UUID = field(default_factory=uuid4)
    external_id: str = ""
    name: str = ""
    address: str | None = None
    last_synced_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Branch name cannot be empty")


@dataclass(frozen=True)
class Product:
    """
    Product available for sale.

    The price is read when a sale item is created; later price changes do not
    affect items already sold.
    """

    id: UUID = field(default_factory=uuid4)
    external_id: str = ""
    name: str = ""
    description: str | None = None
    price: Money = field(default_factory=Money.zero)
    last_synced_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Product name cannot be empty")
        if self.price.amount < 0:
            raise ValueError(f"Product price cannot be negative, got {self.price.amount}")
