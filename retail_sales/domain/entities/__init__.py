"""Domain entities with business logic."""

from .reference import Branch, Customer, Product
from .sale import Sale
from .sale_item import SaleItem

__all__ = ["Branch", "Customer", "Product", "Sale", "SaleItem"]
