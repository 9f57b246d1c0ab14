"""Constants shared across the sales domain."""

from decimal import Decimal

CURRENCY_CODE_LENGTH = 3
DEFAULT_CURRENCY = "USD"

# Monetary values are stored as numeric(18,2), discount rates as numeric(5,4)
MONEY_DECIMAL_PLACES = 2
DISCOUNT_DECIMAL_PLACES = 4

MIN_ITEM_QUANTITY = 1
MAX_IDENTICAL_ITEMS = 20

# Quantity discount tiers
TIER_ONE_MIN_QUANTITY = 4
TIER_TWO_MIN_QUANTITY = 10
NO_DISCOUNT = Decimal("0")
TIER_ONE_DISCOUNT = Decimal("0.10")
TIER_TWO_DISCOUNT = Decimal("0.20")

MAX_SALE_NUMBER_LENGTH = 50
