"""
Pricing Policy - Domain service for quantity discounts and line totals.

This module holds the pure, stateless rules that price a single sale line.
Discounts depend only on how many identical items are sold in the line:

Discount Tiers:
    - 1 to 3 items: no discount
    - 4 to 9 items: 10% discount
    - 10 to 20 items: 20% discount
    - more than 20 identical items cannot be sold at all

Line totals are computed with Decimal arithmetic through the Money value
object and rounded half-up to cents, so repeated recalculation never drifts.

Example:
    >>> from decimal import Decimal
    >>> from retail_sales.domain.value_objects import Money
    >>>
    >>> rate = discount_rate_for(4)
    >>> line_total(Money(Decimal("100")), 4, rate, cancelled=False)
    Money(360.00, 'USD')
"""

from decimal import Decimal

from ..constants import (
    MAX_IDENTICAL_ITEMS,
    MIN_ITEM_QUANTITY,
    NO_DISCOUNT,
    TIER_ONE_DISCOUNT,
    TIER_ONE_MIN_QUANTITY,
    TIER_TWO_DISCOUNT,
    TIER_TWO_MIN_QUANTITY,
)
from ..exceptions import InvalidQuantityError
from ..value_objects.money import Money


def validate_quantity(quantity: int) -> None:
    """Ensure a line quantity lies within the sellable range.

    Raises:
        InvalidQuantityError: If quantity is not positive or exceeds the
            identical-items limit. The two cases carry distinct messages.
    """
    if quantity < MIN_ITEM_QUANTITY or quantity > MAX_IDENTICAL_ITEMS:
        raise InvalidQuantityError(quantity)


def discount_rate_for(quantity: int) -> Decimal:
    """Return the discount rate that applies to ``quantity`` identical items.

    Args:
        quantity: Number of identical items in the line

    Returns:
        Discount rate as a fraction (0, 0.10 or 0.20)

    Raises:
        InvalidQuantityError: If quantity is outside the sellable range
    """
    validate_quantity(quantity)

    if quantity >= TIER_TWO_MIN_QUANTITY:
        return TIER_TWO_DISCOUNT
    if quantity >= TIER_ONE_MIN_QUANTITY:
        return TIER_ONE_DISCOUNT
    return NO_DISCOUNT


def line_total(unit_price: Money, quantity: int, discount_rate: Decimal, cancelled: bool) -> Money:
    """Compute the post-discount total for one sale line.

    Args:
        unit_price: Price of a single item
        quantity: Number of items
        discount_rate: Fraction to deduct from the subtotal
        cancelled: Cancelled lines are always worth zero

    Returns:
        Line total rounded to cents, in the unit price's currency
    """
    if cancelled:
        return Money.zero(unit_price.currency)

    subtotal = unit_price.multiply(quantity)
    return subtotal.multiply(Decimal("1") - discount_rate).round()
