"""Value objects for the sales domain."""

from .money import Money

__all__ = ["Money"]
