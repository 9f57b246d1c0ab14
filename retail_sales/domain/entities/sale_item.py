"""
Sale Item Entity - One product line within a sale
"""

from __future__ import annotations

# Standard library imports
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID, uuid4

from ..services.pricing_policy import discount_rate_for, line_total, validate_quantity
from ..value_objects import Money
from .reference import Product


@dataclass
class SaleItem:
    """
    Sale item entity representing a quantity of one product sold.

    The unit price is captured from the product when the item is created.
    Discount rate and line total are derived and recomputed on every change;
    a cancelled item is always worth zero.
    """

    product: Product
    quantity: int

    # Snapshot of the product price at the time the item was added
    unit_price: Money

    # Identity
    id: UUID = field(default_factory=uuid4)

    is_cancelled: bool = False

    # Derived
    discount_rate: Decimal = field(init=False, default=Decimal("0"))
    line_total: Money = field(init=False, default_factory=Money.zero)

    def __post_init__(self) -> None:
        """Validate quantity and compute derived pricing"""
        validate_quantity(self.quantity)
        self._recalculate()

    @classmethod
    def create(cls, product: Product, quantity: int) -> SaleItem:
        """
        Create a new sale item for a product.

        Args:
            product: Product being sold
            quantity: Number of identical items

        Returns:
            New SaleItem with the product's current price captured

        Raises:
            InvalidQuantityError: If quantity is not within 1..20
        """
        validate_quantity(quantity)
        return cls(product=product, quantity=quantity, unit_price=product.price)

    @property
    def product_id(self) -> UUID:
        return self.product.id

    @property
    def subtotal(self) -> Money:
        """Price before discount"""
        return self.unit_price.multiply(self.quantity)

    def update_quantity(self, new_quantity: int) -> None:
        """
        Change the quantity and reprice the item.

        Raises:
            InvalidQuantityError: If new quantity is not within 1..20; the
                item is left unchanged
        """
        validate_quantity(new_quantity)
        self.quantity = new_quantity
        self._recalculate()

    def reassign(self, product: Product, quantity: int) -> None:
        """
        Point the item at a (possibly different) product and quantity, keeping its identity.

        The unit price is captured again from ``product``.

        Raises:
            InvalidQuantityError: If quantity is not within 1..20; the item is
                left unchanged
        """
        validate_quantity(quantity)
        self.product = product
        self.unit_price = product.price
        self.quantity = quantity
        self._recalculate()

    def cancel(self) -> None:
        """Cancel the item. Cancelling again has no further effect."""
        self.is_cancelled = True
        self._recalculate()

    def _recalculate(self) -> None:
        self.discount_rate = discount_rate_for(self.quantity)
        self.line_total = line_total(
            self.unit_price, self.quantity, self.discount_rate, self.is_cancelled
        )

    def __str__(self) -> str:
        """String representation"""
        status = "cancelled" if self.is_cancelled else "active"
        return f"{self.quantity} x {self.product.name} @ {self.unit_price} = {self.line_total} ({status})"
