"""
Application Use Cases

Request/response entry points for sale operations.
"""

from .base import UseCase, UseCaseRequest, UseCaseResponse
from .base_request import BaseRequestDTO
from .sales import (
    CancelSaleItemRequest,
    CancelSaleItemResponse,
    CancelSaleItemUseCase,
    CancelSaleRequest,
    CancelSaleResponse,
    CancelSaleUseCase,
    CreateSaleRequest,
    CreateSaleUseCase,
    GetSaleRequest,
    GetSaleUseCase,
    ListSalesRequest,
    ListSalesResponse,
    ListSalesUseCase,
    SaleItemRequest,
    SaleItemResult,
    SaleResponse,
    SaleResult,
    UpdateSaleRequest,
    UpdateSaleUseCase,
    item_to_result,
    sale_to_result,
)

__all__ = [
    # Base classes
    "UseCase",
    "UseCaseRequest",
    "UseCaseResponse",
    "BaseRequestDTO",
    # Sale use cases
    "CreateSaleUseCase",
    "UpdateSaleUseCase",
    "CancelSaleUseCase",
    "CancelSaleItemUseCase",
    "GetSaleUseCase",
    "ListSalesUseCase",
    # DTOs
    "CreateSaleRequest",
    "UpdateSaleRequest",
    "CancelSaleRequest",
    "CancelSaleResponse",
    "CancelSaleItemRequest",
    "CancelSaleItemResponse",
    "GetSaleRequest",
    "ListSalesRequest",
    "ListSalesResponse",
    "SaleItemRequest",
    "SaleResponse",
    "SaleResult",
    "SaleItemResult",
    "sale_to_result",
    "item_to_result",
]
