"""
Unit tests for the PostgreSQL Unit of Work.

Tests transaction management, repository wiring, context manager behaviour
and the factory.
"""

# Standard library imports
import asyncio
from unittest.mock import AsyncMock, MagicMock

# Third-party imports
import pytest

# Local imports
from retail_sales.application.interfaces.exceptions import (
    TransactionAlreadyActiveError,
    TransactionCommitError,
    TransactionError,
    TransactionNotActiveError,
    TransactionRollbackError,
)
from retail_sales.infrastructure.database.adapter import PostgreSQLAdapter
from retail_sales.infrastructure.repositories import (
    PostgreSQLBranchRepository,
    PostgreSQLCustomerRepository,
    PostgreSQLProductRepository,
    PostgreSQLSaleRepository,
    PostgreSQLUnitOfWork,
    PostgreSQLUnitOfWorkFactory,
)


@pytest.fixture
def mock_adapter():
    """Mock PostgreSQL adapter for unit of work tests."""
    adapter = AsyncMock(spec=PostgreSQLAdapter)
    adapter.has_active_transaction = False
    adapter.begin_transaction = AsyncMock()
    adapter.commit_transaction = AsyncMock()
    adapter.rollback_transaction = AsyncMock()
    return adapter


@pytest.fixture
def unit_of_work(mock_adapter):
    return PostgreSQLUnitOfWork(mock_adapter)


@pytest.mark.unit
class TestUnitOfWorkInitialization:
    def test_repositories_share_adapter(self, mock_adapter):
        uow = PostgreSQLUnitOfWork(mock_adapter)

        assert isinstance(uow.sales, PostgreSQLSaleRepository)
        assert isinstance(uow.customers, PostgreSQLCustomerRepository)
        assert isinstance(uow.branches, PostgreSQLBranchRepository)
        assert isinstance(uow.products, PostgreSQLProductRepository)
        assert uow.sales.adapter is mock_adapter
        assert uow.products.adapter is mock_adapter


@pytest.mark.unit
class TestTransactions:
    """Test explicit transaction control."""

    async def test_begin(self, unit_of_work, mock_adapter):
        await unit_of_work.begin_transaction()

        mock_adapter.begin_transaction.assert_awaited_once()

    async def test_begin_twice_rejected(self, unit_of_work, mock_adapter):
        mock_adapter.has_active_transaction = True

        with pytest.raises(TransactionAlreadyActiveError):
            await unit_of_work.begin_transaction()

        mock_adapter.begin_transaction.assert_not_awaited()

    async def test_begin_failure_wrapped(self, unit_of_work, mock_adapter):
        mock_adapter.begin_transaction.side_effect = RuntimeError("pool closed")

        with pytest.raises(TransactionError, match="pool closed"):
            await unit_of_work.begin_transaction()

    async def test_commit(self, unit_of_work, mock_adapter):
        mock_adapter.has_active_transaction = True

        await unit_of_work.commit()

        mock_adapter.commit_transaction.assert_awaited_once()

    async def test_commit_without_transaction(self, unit_of_work):
        with pytest.raises(TransactionNotActiveError):
            await unit_of_work.commit()

    async def test_commit_failure_wrapped(self, unit_of_work, mock_adapter):
        mock_adapter.has_active_transaction = True
        error = RuntimeError("serialization failure")
        mock_adapter.commit_transaction.side_effect = error

        with pytest.raises(TransactionCommitError) as exc_info:
            await unit_of_work.commit()

        assert exc_info.value.cause is error

    async def test_rollback_without_transaction_is_noop(self, unit_of_work, mock_adapter):
        await unit_of_work.rollback()

        mock_adapter.rollback_transaction.assert_not_awaited()

    async def test_rollback_failure_wrapped(self, unit_of_work, mock_adapter):
        mock_adapter.has_active_transaction = True
        mock_adapter.rollback_transaction.side_effect = RuntimeError("connection lost")

        with pytest.raises(TransactionRollbackError):
            await unit_of_work.rollback()

    async def test_is_active(self, unit_of_work, mock_adapter):
        assert not await unit_of_work.is_active()
        mock_adapter.has_active_transaction = True
        assert await unit_of_work.is_active()


@pytest.mark.unit
class TestContextManager:
    """Test async with semantics."""

    @pytest.fixture
    def tracking_adapter(self, mock_adapter):
        """Adapter whose transaction flag follows begin/commit/rollback."""

        async def begin():
            mock_adapter.has_active_transaction = True

        async def finish():
            mock_adapter.has_active_transaction = False

        mock_adapter.begin_transaction.side_effect = begin
        mock_adapter.commit_transaction.side_effect = finish
        mock_adapter.rollback_transaction.side_effect = finish
        return mock_adapter

    async def test_commits_on_success(self, tracking_adapter):
        async with PostgreSQLUnitOfWork(tracking_adapter) as uow:
            assert await uow.is_active()

        tracking_adapter.commit_transaction.assert_awaited_once()
        tracking_adapter.rollback_transaction.assert_not_awaited()

    async def test_rolls_back_on_error(self, tracking_adapter):
        with pytest.raises(ValueError, match="bad item"):
            async with PostgreSQLUnitOfWork(tracking_adapter):
                raise ValueError("bad item")

        tracking_adapter.rollback_transaction.assert_awaited_once()
        tracking_adapter.commit_transaction.assert_not_awaited()

    async def test_rolls_back_on_cancellation(self, tracking_adapter):
        with pytest.raises(asyncio.CancelledError):
            async with PostgreSQLUnitOfWork(tracking_adapter):
                raise asyncio.CancelledError()

        tracking_adapter.rollback_transaction.assert_awaited_once()
        tracking_adapter.commit_transaction.assert_not_awaited()

    async def test_rollback_failure_does_not_mask_error(self, tracking_adapter):
        tracking_adapter.rollback_transaction.side_effect = RuntimeError("rollback failed")

        with pytest.raises(ValueError, match="original"):
            async with PostgreSQLUnitOfWork(tracking_adapter):
                raise ValueError("original")

    async def test_commit_failure_rolls_back_and_raises(self, tracking_adapter):
        tracking_adapter.commit_transaction.side_effect = RuntimeError("commit failed")

        with pytest.raises(TransactionCommitError):
            async with PostgreSQLUnitOfWork(tracking_adapter):
                pass

        tracking_adapter.rollback_transaction.assert_awaited_once()


@pytest.mark.unit
class TestUnitOfWorkFactory:
    def test_each_unit_of_work_gets_own_adapter(self):
        pool = MagicMock()
        factory = PostgreSQLUnitOfWorkFactory(pool)

        first = factory.create_unit_of_work()
        second = factory.create_unit_of_work()

        assert isinstance(first, PostgreSQLUnitOfWork)
        assert first is not second
        assert first.adapter is not second.adapter
        assert first.adapter.pool is pool
