"""
Sale Entity - Aggregate root for one commercial transaction
"""

from __future__ import annotations

# Standard library imports
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from ..constants import DEFAULT_CURRENCY, MAX_SALE_NUMBER_LENGTH
from ..exceptions import ValidationError
from ..value_objects import Money
from .reference import Branch, Customer
from .sale_item import SaleItem


@dataclass
class Sale:
    """
    Sale aggregate owning its items and maintaining the total amount.

    ``total_amount`` is derived: every item mutation and every call to
    ``calculate_total_amount`` recomputes it from the items' line totals.
    Cancelling the sale and cancelling an item are independent; neither
    propagates to the other.
    """

    sale_number: str
    customer: Customer
    branch: Branch

    # Identity
    id: UUID = field(default_factory=uuid4)

    sale_date: datetime = field(default_factory=lambda: datetime.now(UTC))
    items: list[SaleItem] = field(default_factory=list)
    is_cancelled: bool = False
    currency: str = DEFAULT_CURRENCY

    # Timestamps
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime | None = None

    # Row version used by persistence for optimistic concurrency
    version: int = 1

    total_amount: Money = field(init=False, default_factory=Money.zero)

    def __post_init__(self) -> None:
        """Derive the total from whatever items the sale was built with"""
        self._ensure_currency(self.items)
        self._recalculate()

    @classmethod
    def create(
        cls,
        sale_number: str,
        customer: Customer,
        branch: Branch,
        sale_date: datetime | None = None,
        currency: str = DEFAULT_CURRENCY,
    ) -> Sale:
        """
        Start a new, empty sale.

        Args:
            sale_number: Caller supplied business identifier
            customer: Customer buying
            branch: Branch selling
            sale_date: When the sale happened (defaults to now)
            currency: Currency of the sale total

        Returns:
            New Sale with no items and a zero total
        """
        now = datetime.now(UTC)
        return cls(
            sale_number=sale_number,
            customer=customer,
            branch=branch,
            sale_date=sale_date or now,
            currency=currency,
            created_at=now,
        )

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def active_items(self) -> list[SaleItem]:
        """Items that have not been cancelled"""
        return [item for item in self.items if not item.is_cancelled]

    def is_active(self) -> bool:
        """Check if the sale has not been cancelled"""
        return not self.is_cancelled

    def calculate_total_amount(self) -> Money:
        """Recompute the total from the items and stamp the update time."""
        self._recalculate()
        self.updated_at = datetime.now(UTC)
        return self.total_amount

    def add_item(self, item: SaleItem) -> None:
        """
        Attach an item to the sale and recompute the total.

        Raises:
            ValidationError: If the item is priced in another currency
        """
        self._ensure_currency([item])
        self.items.append(item)
        self.calculate_total_amount()

    def remove_item(self, item: SaleItem) -> bool:
        """
        Detach an item (matched by id) and recompute the total.

        Returns:
            True if the item belonged to the sale
        """
        remaining = [existing for existing in self.items if existing.id != item.id]
        removed = len(remaining) != len(self.items)
        self.items[:] = remaining
        self.calculate_total_amount()
        return removed

    def replace_items(self, items: Iterable[SaleItem]) -> None:
        """
        Clear the item collection and rebuild it from ``items``.

        Raises:
            ValidationError: If any item is priced in another currency; the
                sale is left unchanged
        """
        new_items = list(items)
        self._ensure_currency(new_items)

        self.items.clear()
        self.calculate_total_amount()
        for item in new_items:
            self.add_item(item)

    def find_item(self, item_id: UUID) -> SaleItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def cancel(self) -> None:
        """
        Cancel the sale.

        Items and the total amount are left as they are.
        """
        self.is_cancelled = True
        self.updated_at = datetime.now(UTC)

    def cancel_item(self, item_id: UUID) -> bool:
        """
        Cancel one item and recompute the total.

        Args:
            item_id: Id of the item to cancel

        Returns:
            False if no item with that id belongs to the sale
        """
        item = self.find_item(item_id)
        if item is None:
            return False

        item.cancel()
        self.calculate_total_amount()
        return True

    def update_details(
        self,
        sale_number: str,
        sale_date: datetime,
        customer: Customer,
        branch: Branch,
    ) -> None:
        """Replace the sale's scalar fields and references."""
        self.sale_number = sale_number
        self.sale_date = sale_date
        self.customer = customer
        self.branch = branch
        self.updated_at = datetime.now(UTC)

    def validate(self) -> None:
        """
        Check the sale is complete enough to be persisted.

        Raises:
            ValidationError: Listing every problem found
        """
        errors = []
        if not self.sale_number or not self.sale_number.strip():
            errors.append("Sale number is required.")
        elif len(self.sale_number) > MAX_SALE_NUMBER_LENGTH:
            errors.append(f"Sale number cannot exceed {MAX_SALE_NUMBER_LENGTH} characters.")
        if not self.items:
            errors.append("Sale must have at least one item.")

        if errors:
            raise ValidationError.from_errors(errors)

    def _recalculate(self) -> None:
        self.total_amount = Money.total((item.line_total for item in self.items), self.currency)

    def _ensure_currency(self, items: Iterable[SaleItem]) -> None:
        for item in items:
            if item.line_total.currency != self.currency:
                raise ValidationError(
                    f"Item priced in {item.line_total.currency} cannot be added to a "
                    f"{self.currency} sale",
                    field="currency",
                    value=item.line_total.currency,
                )

    def __str__(self) -> str:
        """String representation"""
        status = "cancelled" if self.is_cancelled else "active"
        return f"Sale {self.sale_number}: {self.item_count} items, total {self.total_amount} ({status})"
