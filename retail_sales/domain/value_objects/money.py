"""Money value object for representing monetary values with currency."""

# Standard library imports
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import Self

from ..constants import CURRENCY_CODE_LENGTH, DEFAULT_CURRENCY, MONEY_DECIMAL_PLACES


class Money:
    """Immutable value object representing money with currency and precision."""

    def __init__(self, amount: Decimal | float | int | str, currency: str = DEFAULT_CURRENCY) -> None:
        """Initialize Money with amount and currency.

        Args:
            amount: The monetary amount (converted to Decimal)
            currency: ISO 4217 currency code (default: USD)

        Raises:
            ValueError: If currency is invalid
        """
        if not isinstance(amount, Decimal):
            amount = Decimal(str(amount))

        self._amount = amount
        self._currency = currency.upper()

        if len(self._currency) != CURRENCY_CODE_LENGTH:
            raise ValueError(f"Invalid currency code: {currency}")

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Self:
        """Create a zero amount in the given currency."""
        return cls(Decimal("0"), currency)

    @classmethod
    def total(cls, values: Iterable["Money"], currency: str = DEFAULT_CURRENCY) -> Self:
        """Sum money values, starting from zero in ``currency``.

        Args:
            values: Money instances to add up
            currency: Currency of the result when ``values`` is empty

        Returns:
            New Money instance with the sum

        Raises:
            ValueError: If any value is in a different currency
        """
        result = cls.zero(currency)
        for value in values:
            result = result.add(value)
        return result

    @property
    def amount(self) -> Decimal:
        """Get the decimal amount."""
        return self._amount

    @property
    def currency(self) -> str:
        """Get the currency code."""
        return self._currency

    def add(self, other: Self) -> Self:
        """Add two money values.

        Args:
            other: Another Money instance

        Returns:
            New Money instance with sum

        Raises:
            ValueError: If currencies don't match
        """
        if not isinstance(other, Money):
            raise TypeError(f"Cannot add Money and {type(other)}")
        if self._currency != other._currency:
            raise ValueError(f"Cannot add {self._currency} and {other._currency}")

        return type(self)(self._amount + other._amount, self._currency)

    def multiply(self, factor: Decimal | float | int) -> Self:
        """Multiply money by a factor.

        Args:
            factor: Multiplication factor

        Returns:
            New Money instance with product
        """
        if not isinstance(factor, Decimal):
            factor = Decimal(str(factor))

        return type(self)(self._amount * factor, self._currency)

    def round(self, decimal_places: int = MONEY_DECIMAL_PLACES) -> Self:
        """Round to specified decimal places.

        Args:
            decimal_places: Number of decimal places

        Returns:
            New Money instance with rounded amount
        """
        quantizer = Decimal(10) ** -decimal_places
        rounded = self._amount.quantize(quantizer, rounding=ROUND_HALF_UP)
        return type(self)(rounded, self._currency)

    def format(self, include_currency: bool = True, decimal_places: int = MONEY_DECIMAL_PLACES) -> str:
        """Format money for display.

        Args:
            include_currency: Whether to include currency symbol
            decimal_places: Number of decimal places to show

        Returns:
            Formatted string representation
        """
        display_amount = self.round(decimal_places)._amount
        formatted = f"{display_amount:,.{decimal_places}f}"

        if include_currency:
            if self._currency == "USD":
                return f"${formatted}"
            return f"{formatted} {self._currency}"

        return formatted

    def _comparable(self, other: object) -> Decimal:
        if isinstance(other, Money):
            if self._currency != other._currency:
                raise ValueError(f"Cannot compare {self._currency} and {other._currency}")
            return other._amount
        if isinstance(other, (Decimal, int, float)):
            return Decimal(str(other))
        raise TypeError(f"Cannot compare Money and {type(other)}")

    def __eq__(self, other: object) -> bool:
        """Check equality with another Money instance."""
        if not isinstance(other, Money):
            return False
        return self._amount == other._amount and self._currency == other._currency

    def __lt__(self, other: Self | Decimal | int | float) -> bool:
        return self._amount < self._comparable(other)

    def __le__(self, other: Self | Decimal | int | float) -> bool:
        return self._amount <= self._comparable(other)

    def __gt__(self, other: Self | Decimal | int | float) -> bool:
        return self._amount > self._comparable(other)

    def __ge__(self, other: Self | Decimal | int | float) -> bool:
        return self._amount >= self._comparable(other)

    def __hash__(self) -> int:
        """Get hash for use in sets/dicts."""
        return hash((self._amount, self._currency))

    def __repr__(self) -> str:
        """Get string representation for debugging."""
        return f"Money({self._amount}, '{self._currency}')"

    def __str__(self) -> str:
        """Get string representation for display."""
        return self.format()

    def __add__(self, other: Self) -> Self:
        return self.add(other)

    def __radd__(self, other: int) -> Self:
        """Support ``sum()`` over Money values, which starts from integer 0."""
        if other == 0:
            return self
        raise TypeError(f"Cannot add {type(other)} and Money")

    def __mul__(self, other: Decimal | float | int) -> Self:
        if not isinstance(other, (Decimal, float, int)):
            raise TypeError(f"Cannot multiply Money by {type(other)}")
        return self.multiply(other)

    def __rmul__(self, other: Decimal | float | int) -> Self:
        return self.__mul__(other)
