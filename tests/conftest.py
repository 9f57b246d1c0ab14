"""Global pytest configuration and fixtures."""

# Standard library imports
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

# Load test environment variables
from dotenv import load_dotenv

test_env_path = Path(__file__).parent.parent / ".env.test"
if test_env_path.exists():
    load_dotenv(test_env_path, override=True)

# Third-party imports
import pytest

# Local imports
from retail_sales.domain.entities import Branch, Customer, Product, Sale, SaleItem
from retail_sales.domain.value_objects import Money


@pytest.fixture
def customer() -> Customer:
    """Customer used as the buyer in sale fixtures."""
    return Customer(external_id="CUST-001", name="Ada Lovelace", email="ada@example.com")


@pytest.fixture
def branch() -> Branch:
    """Branch used as the seller in sale fixtures."""
    return Branch(external_id="BR-001", name="Downtown", address="1 Main St")


@pytest.fixture
def product_100() -> Product:
    """Product priced at 100.00."""
    return Product(external_id="SKU-100", name="Coffee Beans", price=Money(Decimal("100")))


@pytest.fixture
def product_200() -> Product:
    """Product priced at 200.00."""
    return Product(external_id="SKU-200", name="Espresso Machine Filter", price=Money(Decimal("200")))


@pytest.fixture
def sale_date() -> datetime:
    return datetime(2024, 3, 15, 10, 30, tzinfo=UTC)


@pytest.fixture
def empty_sale(customer, branch, sale_date) -> Sale:
    """Sale with no items yet."""
    return Sale.create("S-0001", customer, branch, sale_date=sale_date)


@pytest.fixture
def sample_sale(empty_sale, product_100, product_200) -> Sale:
    """Sale with 5 x 100 (450 after discount) and 3 x 200 (600)."""
    empty_sale.add_item(SaleItem.create(product_100, 5))
    empty_sale.add_item(SaleItem.create(product_200, 3))
    return empty_sale


@pytest.fixture
def mock_unit_of_work() -> MagicMock:
    """Unit of work whose repositories are AsyncMocks."""
    uow = MagicMock()
    uow.sales = AsyncMock()
    uow.customers = AsyncMock()
    uow.branches = AsyncMock()
    uow.products = AsyncMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=None)
    return uow


@pytest.fixture
def mock_unit_of_work_factory(mock_unit_of_work) -> MagicMock:
    factory = MagicMock()
    factory.create_unit_of_work.return_value = mock_unit_of_work
    return factory


@pytest.fixture
def mock_event_publisher() -> AsyncMock:
    publisher = AsyncMock()
    publisher.publish = AsyncMock(return_value=None)
    return publisher
