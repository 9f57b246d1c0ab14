"""
Base Use Case

Provides the foundation for all use cases in the application layer.
Implements common patterns like logging, validation, and error handling,
and turns application and domain errors into error responses with a
stable error code for transport layers.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID, uuid4

from retail_sales.application.interfaces.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
)
from retail_sales.domain.exceptions import StaleDataException, ValidationError

logger = logging.getLogger(__name__)

# Type variables for request and response
TRequest = TypeVar("TRequest")
TResponse = TypeVar("TResponse")

# Error codes reported in responses
VALIDATION_FAILED = "validation_failed"
NOT_FOUND = "not_found"
CONFLICT = "conflict"
INTERNAL_ERROR = "internal_error"


@dataclass
class UseCaseRequest:
    """Base class for use case requests."""

    request_id: UUID | None = None
    correlation_id: UUID | None = None
    metadata: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        """Initialize request with defaults."""
        if self.request_id is None:
            self.request_id = uuid4()
        if self.metadata is None:
            self.metadata = {}


@dataclass
class UseCaseResponse:
    """Base class for use case responses."""

    success: bool
    data: Any | None = None
    error: str | None = None
    error_code: str | None = None
    request_id: UUID | None = None

    @classmethod
    def success_response(cls, data: Any, request_id: UUID) -> "UseCaseResponse":
        """Create a successful response."""
        return cls(success=True, data=data, request_id=request_id)

    @classmethod
    def error_response(
        cls, error: str, request_id: UUID, error_code: str = INTERNAL_ERROR
    ) -> "UseCaseResponse":
        """Create an error response."""
        return cls(success=False, error=error, error_code=error_code, request_id=request_id)


def error_code_for(error: Exception) -> str:
    """Map an exception raised by the application to a response error code."""
    if isinstance(error, ValidationError):
        return VALIDATION_FAILED
    if isinstance(error, EntityNotFoundError):
        return NOT_FOUND
    if isinstance(error, (DuplicateEntityError, StaleDataException)):
        return CONFLICT
    return INTERNAL_ERROR


class UseCase(ABC, Generic[TRequest, TResponse]):
    """
    Abstract base class for all use cases.

    Provides a consistent interface and common functionality for
    business logic orchestration.
    """

    response_class: ClassVar[type[UseCaseResponse]] = UseCaseResponse

    def __init__(self, name: str | None = None) -> None:
        """
        Initialize use case.

        Args:
            name: Optional name for the use case (defaults to class name)
        """
        self.name = name or self.__class__.__name__
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    async def execute(self, request: TRequest) -> TResponse:
        """
        Execute the use case.

        This method provides the template for use case execution with
        logging, validation, and error handling.

        Args:
            request: The use case request

        Returns:
            The use case response
        """
        request_id = getattr(request, "request_id", None) or uuid4()

        self.logger.info(
            f"Executing {self.name}",
            extra={
                "request_id": str(request_id),
                "use_case": self.name,
            },
        )

        try:
            # Validate the request
            validation_error = await self.validate(request)
            if validation_error:
                self.logger.warning(
                    f"Validation failed for {self.name}: {validation_error}",
                    extra={"request_id": str(request_id)},
                )
                return self._create_error_response(
                    validation_error, request_id, VALIDATION_FAILED
                )

            # Execute the business logic
            response = await self.process(request)

            self.logger.info(
                f"Successfully executed {self.name}",
                extra={
                    "request_id": str(request_id),
                    "success": getattr(response, "success", True),
                },
            )

            return response

        except (ValidationError, EntityNotFoundError, DuplicateEntityError, StaleDataException) as e:
            self.logger.warning(
                f"{self.name} rejected: {e}",
                extra={"request_id": str(request_id), "error_type": type(e).__name__},
            )
            return self._create_error_response(str(e), request_id, error_code_for(e))

        except Exception as e:
            self.logger.error(
                f"Error executing {self.name}: {e}",
                extra={"request_id": str(request_id)},
                exc_info=True,
            )
            return self._create_error_response(str(e), request_id, INTERNAL_ERROR)

    @abstractmethod
    async def validate(self, request: TRequest) -> str | None:
        """
        Validate the request.

        Args:
            request: The request to validate

        Returns:
            Error message if validation fails, None otherwise
        """
        pass

    @abstractmethod
    async def process(self, request: TRequest) -> TResponse:
        """
        Process the request and execute business logic.

        Args:
            request: The validated request

        Returns:
            The response
        """
        pass

    def _create_error_response(self, error: str, request_id: UUID, error_code: str) -> TResponse:
        """
        Create an error response of the use case's response type.

        Args:
            error: Error message
            request_id: Request ID
            error_code: One of the module level error codes

        Returns:
            Error response
        """
        return self.response_class(  # type: ignore[return-value]
            success=False, error=error, error_code=error_code, request_id=request_id
        )
