"""
Unit tests for the pricing policy.

Covers the quantity discount tiers, quantity limits and line total
computation including cancelled lines.
"""

# Standard library imports
from decimal import Decimal

# Third-party imports
import pytest

# Local imports
from retail_sales.domain.exceptions import InvalidQuantityError, ValidationError
from retail_sales.domain.services import discount_rate_for, line_total, validate_quantity
from retail_sales.domain.value_objects import Money


@pytest.mark.unit
class TestDiscountRateFor:
    """Test discount tier selection."""

    @pytest.mark.parametrize("quantity", [1, 2, 3])
    def test_no_discount_below_four(self, quantity):
        assert discount_rate_for(quantity) == Decimal("0")

    @pytest.mark.parametrize("quantity", [4, 5, 9])
    def test_ten_percent_from_four_to_nine(self, quantity):
        assert discount_rate_for(quantity) == Decimal("0.10")

    @pytest.mark.parametrize("quantity", [10, 15, 20])
    def test_twenty_percent_from_ten_to_twenty(self, quantity):
        assert discount_rate_for(quantity) == Decimal("0.20")

    def test_every_valid_quantity_maps_to_a_tier(self):
        rates = {discount_rate_for(q) for q in range(1, 21)}
        assert rates == {Decimal("0"), Decimal("0.10"), Decimal("0.20")}

    def test_out_of_range_quantity_rejected(self):
        with pytest.raises(InvalidQuantityError):
            discount_rate_for(21)


@pytest.mark.unit
class TestValidateQuantity:
    """Test quantity limits and their messages."""

    @pytest.mark.parametrize("quantity", [0, -1, -100])
    def test_non_positive_quantity(self, quantity):
        with pytest.raises(InvalidQuantityError) as exc_info:
            validate_quantity(quantity)

        assert str(exc_info.value) == "Quantity must be greater than zero."
        assert exc_info.value.field == "quantity"

    @pytest.mark.parametrize("quantity", [21, 50])
    def test_too_many_identical_items(self, quantity):
        with pytest.raises(InvalidQuantityError) as exc_info:
            validate_quantity(quantity)

        assert str(exc_info.value) == "Cannot sell more than 20 identical items."

    def test_messages_are_distinct(self):
        assert InvalidQuantityError.NOT_POSITIVE != InvalidQuantityError.TOO_MANY

    def test_invalid_quantity_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            validate_quantity(0)

    @pytest.mark.parametrize("quantity", [1, 20])
    def test_boundaries_accepted(self, quantity):
        validate_quantity(quantity)


@pytest.mark.unit
class TestLineTotal:
    """Test line total computation."""

    @pytest.mark.parametrize(
        "quantity,expected",
        [(3, Decimal("300.00")), (4, Decimal("360.00")), (10, Decimal("800.00"))],
    )
    def test_line_total_applies_tier(self, quantity, expected):
        price = Money(Decimal("100"))
        total = line_total(price, quantity, discount_rate_for(quantity), cancelled=False)

        assert total.amount == expected
        assert total.currency == "USD"

    def test_cancelled_line_is_zero(self):
        price = Money(Decimal("100"))
        total = line_total(price, 10, Decimal("0.20"), cancelled=True)

        assert total.is_zero()

    def test_cancelled_line_keeps_currency(self):
        total = line_total(Money(Decimal("9.99"), "EUR"), 2, Decimal("0"), cancelled=True)

        assert total == Money.zero("EUR")

    def test_rounds_half_up_to_cents(self):
        # 0.15 * 5 * 0.9 = 0.675
        total = line_total(Money(Decimal("0.15")), 5, Decimal("0.10"), cancelled=False)

        assert total.amount == Decimal("0.68")

    def test_no_float_drift(self):
        total = line_total(Money("0.10"), 3, Decimal("0"), cancelled=False)

        assert total.amount == Decimal("0.30")
