"""
Sale Use Cases

Request/response boundary around the SaleService. Requests arrive as plain
DTOs, are converted into service commands, and results leave as plain
SaleResult records so transport layers never handle domain entities.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import cast
from uuid import UUID

from retail_sales.application.services.sale_commands import (
    CreateSaleCommand,
    SaleItemInput,
    UpdateSaleCommand,
    collect_sale_errors,
)
from retail_sales.application.services.sale_service import SaleService
from retail_sales.domain.entities import Sale, SaleItem

from .base import NOT_FOUND, UseCase, UseCaseResponse
from .base_request import BaseRequestDTO

DEFAULT_PAGE_SIZE = 10


# Result records
@dataclass(frozen=True)
class SaleItemResult:
    """Sale item as exposed to callers."""

    id: UUID
    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    discount_rate: Decimal
    line_total: Decimal
    is_cancelled: bool


@dataclass(frozen=True)
class SaleResult:
    """Sale as exposed to callers."""

    id: UUID
    sale_number: str
    sale_date: datetime
    customer_id: UUID
    customer_name: str
    branch_id: UUID
    branch_name: str
    total_amount: Decimal
    currency: str
    is_cancelled: bool
    items: list[SaleItemResult]
    created_at: datetime
    updated_at: datetime | None


def item_to_result(item: SaleItem) -> SaleItemResult:
    return SaleItemResult(
        id=item.id,
        product_id=item.product.id,
        product_name=item.product.name,
        quantity=item.quantity,
        unit_price=item.unit_price.amount,
        discount_rate=item.discount_rate,
        line_total=item.line_total.amount,
        is_cancelled=item.is_cancelled,
    )


def sale_to_result(sale: Sale) -> SaleResult:
    """Convert a Sale aggregate into its caller-facing record."""
    return SaleResult(
        id=sale.id,
        sale_number=sale.sale_number,
        sale_date=sale.sale_date,
        customer_id=sale.customer.id,
        customer_name=sale.customer.name,
        branch_id=sale.branch.id,
        branch_name=sale.branch.name,
        total_amount=sale.total_amount.amount,
        currency=sale.total_amount.currency,
        is_cancelled=sale.is_cancelled,
        items=[item_to_result(item) for item in sale.items],
        created_at=sale.created_at,
        updated_at=sale.updated_at,
    )


# Request/Response DTOs
@dataclass
class SaleItemRequest:
    """Requested sale line."""

    product_id: UUID | None
    quantity: int
    item_id: UUID | None = None


@dataclass
class CreateSaleRequest(BaseRequestDTO):
    """Request to register a new sale."""

    sale_number: str
    sale_date: datetime | None
    customer_id: UUID | None
    branch_id: UUID | None
    items: list[SaleItemRequest] = field(default_factory=list)

    def to_command(self) -> CreateSaleCommand:
        return CreateSaleCommand(
            sale_number=self.sale_number,
            sale_date=self.sale_date,
            customer_id=self.customer_id,
            branch_id=self.branch_id,
            items=[SaleItemInput(i.product_id, i.quantity, i.item_id) for i in self.items],
        )


@dataclass
class UpdateSaleRequest(BaseRequestDTO):
    """Request to replace an existing sale's details and items."""

    sale_id: UUID
    sale_number: str
    sale_date: datetime | None
    customer_id: UUID | None
    branch_id: UUID | None
    items: list[SaleItemRequest] = field(default_factory=list)

    def to_command(self) -> UpdateSaleCommand:
        return UpdateSaleCommand(
            sale_id=self.sale_id,
            sale_number=self.sale_number,
            sale_date=self.sale_date,
            customer_id=self.customer_id,
            branch_id=self.branch_id,
            items=[SaleItemInput(i.product_id, i.quantity, i.item_id) for i in self.items],
        )


@dataclass
class SaleResponse(UseCaseResponse):
    """Response carrying a single sale."""

    sale: SaleResult | None = None


@dataclass
class CancelSaleRequest(BaseRequestDTO):
    """Request to cancel a sale."""

    sale_id: UUID


@dataclass
class CancelSaleResponse(UseCaseResponse):
    """Response from cancelling a sale."""

    sale: SaleResult | None = None
    cancelled: bool = False


@dataclass
class CancelSaleItemRequest(BaseRequestDTO):
    """Request to cancel one item of a sale."""

    sale_id: UUID
    item_id: UUID


@dataclass
class CancelSaleItemResponse(UseCaseResponse):
    """Response from cancelling a sale item."""

    sale: SaleResult | None = None
    item: SaleItemResult | None = None


@dataclass
class GetSaleRequest(BaseRequestDTO):
    """Request to look up a sale by id or by sale number."""

    sale_id: UUID | None = None
    sale_number: str | None = None


@dataclass
class ListSalesRequest(BaseRequestDTO):
    """Request for one page of sales, optionally filtered by a single criterion."""

    page_number: int = 1
    page_size: int | None = None
    customer_id: UUID | None = None
    branch_id: UUID | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass
class ListSalesResponse(UseCaseResponse):
    """Response with one page of sales."""

    sales: list[SaleResult] = field(default_factory=list)
    total_count: int = 0
    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_pages: int = 0


# Use Case Implementations
class CreateSaleUseCase(UseCase[CreateSaleRequest, SaleResponse]):
    """Use case for registering a new sale."""

    response_class = SaleResponse

    def __init__(self, sale_service: SaleService) -> None:
        super().__init__("CreateSaleUseCase")
        self.sale_service = sale_service

    async def validate(self, request: CreateSaleRequest) -> str | None:
        errors = collect_sale_errors(request.to_command())
        return "; ".join(errors) if errors else None

    async def process(self, request: CreateSaleRequest) -> SaleResponse:
        sale = await self.sale_service.create_sale(request.to_command())
        return SaleResponse(success=True, sale=sale_to_result(sale), request_id=request.request_id)


class UpdateSaleUseCase(UseCase[UpdateSaleRequest, SaleResponse]):
    """Use case for replacing a sale's details and items."""

    response_class = SaleResponse

    def __init__(self, sale_service: SaleService) -> None:
        super().__init__("UpdateSaleUseCase")
        self.sale_service = sale_service

    async def validate(self, request: UpdateSaleRequest) -> str | None:
        errors = collect_sale_errors(request.to_command())
        return "; ".join(errors) if errors else None

    async def process(self, request: UpdateSaleRequest) -> SaleResponse:
        sale = await self.sale_service.update_sale(request.to_command())
        return SaleResponse(success=True, sale=sale_to_result(sale), request_id=request.request_id)


class CancelSaleUseCase(UseCase[CancelSaleRequest, CancelSaleResponse]):
    """Use case for cancelling a whole sale."""

    response_class = CancelSaleResponse

    def __init__(self, sale_service: SaleService) -> None:
        super().__init__("CancelSaleUseCase")
        self.sale_service = sale_service

    async def validate(self, request: CancelSaleRequest) -> str | None:
        if not request.sale_id:
            return "Sale ID is required"
        return None

    async def process(self, request: CancelSaleRequest) -> CancelSaleResponse:
        sale = await self.sale_service.cancel_sale(request.sale_id)
        return CancelSaleResponse(
            success=True,
            sale=sale_to_result(sale),
            cancelled=sale.is_cancelled,
            request_id=request.request_id,
        )


class CancelSaleItemUseCase(UseCase[CancelSaleItemRequest, CancelSaleItemResponse]):
    """Use case for cancelling one item of a sale."""

    response_class = CancelSaleItemResponse

    def __init__(self, sale_service: SaleService) -> None:
        super().__init__("CancelSaleItemUseCase")
        self.sale_service = sale_service

    async def validate(self, request: CancelSaleItemRequest) -> str | None:
        if not request.sale_id:
            return "Sale ID is required"
        if not request.item_id:
            return "Item ID is required"
        return None

    async def process(self, request: CancelSaleItemRequest) -> CancelSaleItemResponse:
        sale = await self.sale_service.cancel_item(request.sale_id, request.item_id)
        item = sale.find_item(request.item_id)
        return CancelSaleItemResponse(
            success=True,
            sale=sale_to_result(sale),
            item=item_to_result(item) if item else None,
            request_id=request.request_id,
        )


class GetSaleUseCase(UseCase[GetSaleRequest, SaleResponse]):
    """Use case for looking up a single sale."""

    response_class = SaleResponse

    def __init__(self, sale_service: SaleService) -> None:
        super().__init__("GetSaleUseCase")
        self.sale_service = sale_service

    async def validate(self, request: GetSaleRequest) -> str | None:
        if request.sale_id is None and not request.sale_number:
            return "Either sale ID or sale number is required"
        return None

    async def process(self, request: GetSaleRequest) -> SaleResponse:
        if request.sale_id is not None:
            sale = await self.sale_service.get_sale_by_id(request.sale_id)
            identifier = str(request.sale_id)
        else:
            identifier = cast(str, request.sale_number)
            sale = await self.sale_service.get_sale_by_number(identifier)

        if sale is None:
            return SaleResponse(
                success=False,
                error=f"Sale with identifier '{identifier}' not found",
                error_code=NOT_FOUND,
                request_id=request.request_id,
            )

        return SaleResponse(success=True, sale=sale_to_result(sale), request_id=request.request_id)


class ListSalesUseCase(UseCase[ListSalesRequest, ListSalesResponse]):
    """Use case for paging through sales by customer, branch, date range or all."""

    response_class = ListSalesResponse

    def __init__(self, sale_service: SaleService, default_page_size: int = DEFAULT_PAGE_SIZE) -> None:
        super().__init__("ListSalesUseCase")
        self.sale_service = sale_service
        self.default_page_size = default_page_size

    async def validate(self, request: ListSalesRequest) -> str | None:
        has_range = request.start_date is not None or request.end_date is not None
        if has_range and (request.start_date is None or request.end_date is None):
            return "Both start date and end date are required for a date range"

        filters = [request.customer_id is not None, request.branch_id is not None, has_range]
        if sum(filters) > 1:
            return "Only one of customer, branch or date range can be used as a filter"
        return None

    async def process(self, request: ListSalesRequest) -> ListSalesResponse:
        page_size = request.page_size if request.page_size is not None else self.default_page_size

        if request.customer_id is not None:
            page = await self.sale_service.list_sales_by_customer(
                request.customer_id, request.page_number, page_size
            )
        elif request.branch_id is not None:
            page = await self.sale_service.list_sales_by_branch(
                request.branch_id, request.page_number, page_size
            )
        elif request.start_date is not None and request.end_date is not None:
            page = await self.sale_service.list_sales_by_date_range(
                request.start_date, request.end_date, request.page_number, page_size
            )
        else:
            page = await self.sale_service.list_sales(request.page_number, page_size)

        return ListSalesResponse(
            success=True,
            sales=[sale_to_result(sale) for sale in page.items],
            total_count=page.total_count,
            page_number=page.page_number,
            page_size=page.page_size,
            total_pages=page.total_pages,
            request_id=request.request_id,
        )
