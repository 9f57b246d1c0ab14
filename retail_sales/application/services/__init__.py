"""Application services coordinating sale operations."""

from .sale_commands import (
    CreateSaleCommand,
    SaleItemInput,
    UpdateSaleCommand,
    collect_sale_errors,
    validate_sale_command,
)
from .sale_service import SaleService

__all__ = [
    "CreateSaleCommand",
    "SaleItemInput",
    "SaleService",
    "UpdateSaleCommand",
    "collect_sale_errors",
    "validate_sale_command",
]
