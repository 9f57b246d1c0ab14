"""
Domain-level exceptions for the sales system.

This module defines exceptions that are specific to domain logic and business rules.
These exceptions are raised within domain entities and services.
"""

from typing import Any
from uuid import UUID

from .constants import MAX_IDENTICAL_ITEMS


class DomainException(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainException):
    """
    Raised when input or entity state violates a business rule.

    Carries every collected problem in ``errors`` so callers can report them
    all at once instead of failing on the first one.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if constraint:
            details["constraint"] = constraint
        details["errors"] = list(errors) if errors else [message]

        super().__init__(message, details)
        self.field = field
        self.value = value
        self.constraint = constraint
        self.errors = details["errors"]

    @classmethod
    def from_errors(cls, errors: list[str]) -> "ValidationError":
        """Build a single exception out of several validation messages."""
        return cls("; ".join(errors), errors=errors)


class InvalidQuantityError(ValidationError):
    """Raised when a sale item quantity falls outside the allowed range."""

    NOT_POSITIVE = "Quantity must be greater than zero."
    TOO_MANY = f"Cannot sell more than {MAX_IDENTICAL_ITEMS} identical items."

    def __init__(self, quantity: int) -> None:
        message = self.NOT_POSITIVE if quantity <= 0 else self.TOO_MANY
        constraint = "positive" if quantity <= 0 else f"max_{MAX_IDENTICAL_ITEMS}"
        super().__init__(message, field="quantity", value=quantity, constraint=constraint)
        self.quantity = quantity


class StaleDataException(DomainException):
    """
    Raised when attempting to update an entity that has been modified by another process.

    This is the domain's optimistic locking exception indicating version conflict.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: UUID | str,
        expected_version: int,
        actual_version: int | None = None,
    ) -> None:
        message = (
            f"{entity_type} {entity_id} has been modified by another process. "
            f"Expected version {expected_version}"
        )
        if actual_version is not None:
            message += f", but found version {actual_version}"

        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version
