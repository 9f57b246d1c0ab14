"""Logging and observability helpers."""

from .logging import (
    SalesJSONFormatter,
    correlation_context,
    get_correlation_id,
    setup_structured_logging,
)

__all__ = [
    "SalesJSONFormatter",
    "correlation_context",
    "get_correlation_id",
    "setup_structured_logging",
]
