"""
Base Request DTO for Use Cases

Common request fields (request id, correlation id, metadata) shared by all
sale requests, plus a loggable dictionary form.
"""

from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from .base import UseCaseRequest


def _plain(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if is_dataclass(value) and not isinstance(value, type):
        return _plain(asdict(value))
    return value


@dataclass(kw_only=True)
class BaseRequestDTO(UseCaseRequest):
    """
    Base class for all request DTOs with common fields.

    Uses kw_only=True so derived requests can declare required fields
    after the optional ones defined here.
    """

    request_id: UUID = field(default_factory=uuid4)
    correlation_id: UUID | None = field(default=None)
    metadata: dict[str, Any] = field(default_factory=dict)

    def with_correlation_id(self, correlation_id: UUID) -> "BaseRequestDTO":
        """Set the correlation ID and return self for chaining."""
        self.correlation_id = correlation_id
        return self

    def with_metadata(self, key: str, value: Any) -> "BaseRequestDTO":
        """Add metadata and return self for chaining."""
        self.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert request to a JSON friendly dictionary."""
        return {key: _plain(value) for key, value in self.__dict__.items()}
