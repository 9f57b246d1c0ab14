"""
Sale command objects and input validation.

Commands describe what a caller wants done, in terms of ids and plain
values. Validation here runs before any repository access so malformed
input never reaches persistence.
"""

# Standard library imports
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

# Local imports
from retail_sales.domain.constants import (
    MAX_IDENTICAL_ITEMS,
    MAX_SALE_NUMBER_LENGTH,
    MIN_ITEM_QUANTITY,
)
from retail_sales.domain.exceptions import ValidationError


@dataclass(frozen=True)
class SaleItemInput:
    """One requested sale line. ``item_id`` refers to an existing item on update."""

    product_id: UUID | None
    quantity: int
    item_id: UUID | None = None


@dataclass(frozen=True)
class CreateSaleCommand:
    """Input for registering a new sale."""

    sale_number: str
    sale_date: datetime | None
    customer_id: UUID | None
    branch_id: UUID | None
    items: list[SaleItemInput] = field(default_factory=list)


@dataclass(frozen=True)
class UpdateSaleCommand:
    """Input for replacing an existing sale's details and items."""

    sale_id: UUID
    sale_number: str
    sale_date: datetime | None
    customer_id: UUID | None
    branch_id: UUID | None
    items: list[SaleItemInput] = field(default_factory=list)


def collect_sale_errors(command: CreateSaleCommand | UpdateSaleCommand) -> list[str]:
    """
    Collect every problem with a create or update command.

    Args:
        command: The command to check

    Returns:
        Error messages, empty when the command is valid
    """
    errors: list[str] = []

    if isinstance(command, UpdateSaleCommand) and command.sale_id is None:
        errors.append("Sale id is required.")

    if not command.sale_number or not command.sale_number.strip():
        errors.append("Sale number is required.")
    elif len(command.sale_number) > MAX_SALE_NUMBER_LENGTH:
        errors.append(f"Sale number cannot exceed {MAX_SALE_NUMBER_LENGTH} characters.")

    if command.sale_date is None:
        errors.append("Sale date is required.")
    if command.customer_id is None:
        errors.append("Customer is required.")
    if command.branch_id is None:
        errors.append("Branch is required.")

    if not command.items:
        errors.append("Sale must have at least one item.")

    seen_item_ids: set[UUID] = set()
    for position, item in enumerate(command.items, start=1):
        if item.product_id is None:
            errors.append(f"Item {position}: product is required.")
        if item.quantity < MIN_ITEM_QUANTITY:
            errors.append(f"Item {position}: Quantity must be greater than zero.")
        elif item.quantity > MAX_IDENTICAL_ITEMS:
            errors.append(
                f"Item {position}: Cannot sell more than {MAX_IDENTICAL_ITEMS} identical items."
            )
        if item.item_id is not None:
            if item.item_id in seen_item_ids:
                errors.append(f"Item {position}: item '{item.item_id}' is listed more than once.")
            seen_item_ids.add(item.item_id)

    return errors


def validate_sale_command(command: CreateSaleCommand | UpdateSaleCommand) -> None:
    """
    Raises:
        ValidationError: Listing every problem with the command
    """
    errors = collect_sale_errors(command)
    if errors:
        raise ValidationError.from_errors(errors)


def validate_page(page_number: int, page_size: int) -> None:
    """
    Raises:
        ValidationError: If page number is below 1 or page size is not positive
    """
    errors = []
    if page_number < 1:
        errors.append("Page number must be at least 1.")
    if page_size <= 0:
        errors.append("Page size must be greater than zero.")
    if errors:
        raise ValidationError.from_errors(errors)


def validate_date_range(start_date: datetime, end_date: datetime) -> None:
    """
    Raises:
        ValidationError: If the range ends before it starts
    """
    if start_date > end_date:
        raise ValidationError(
            "Start date must not be after end date.",
            field="start_date",
            value=start_date,
            constraint="start_date <= end_date",
        )
