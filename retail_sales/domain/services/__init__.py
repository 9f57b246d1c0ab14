"""Domain services."""

from .pricing_policy import discount_rate_for, line_total, validate_quantity

__all__ = ["discount_rate_for", "line_total", "validate_quantity"]
