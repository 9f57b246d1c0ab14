"""
PostgreSQL Database Adapter

Provides async database operations using psycopg3 for the retail sales system.
Handles connection management, query execution, and error handling.
"""

# Standard library imports
import builtins
import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

# Third-party imports
import psycopg
from psycopg import AsyncConnection
from psycopg.rows import Row, dict_row
from psycopg_pool import AsyncConnectionPool

# Local imports
from retail_sales.application.interfaces.exceptions import (
    ConnectionError,
    IntegrityError,
    RepositoryError,
    TimeoutError,
    TransactionAlreadyActiveError,
    TransactionError,
    TransactionNotActiveError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def affected_rows(status: str) -> int:
    """Extract the row count from a status string returned by ``execute_query``."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except ValueError:
        return 0


def _integrity_error(e: psycopg.IntegrityError) -> IntegrityError:
    constraint = e.diag.constraint_name or "unknown"
    return IntegrityError(constraint, e.diag.message_primary or str(e))


class PostgreSQLAdapter:
    """
    PostgreSQL database adapter using psycopg3.

    Provides high-level database operations with error handling,
    connection management, and transaction support. While a transaction is
    active every query runs on the transaction's connection.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """
        Initialize adapter with connection pool.

        Args:
            pool: psycopg3 async connection pool
        """
        self._pool = pool
        self._connection_cm: AbstractAsyncContextManager[AsyncConnection] | None = None
        self._connection: AsyncConnection | None = None
        self._transaction: psycopg.AsyncTransaction | None = None

    @property
    def pool(self) -> AsyncConnectionPool:
        """Get the connection pool."""
        return self._pool

    @property
    def has_active_transaction(self) -> bool:
        """Check if there's an active transaction."""
        return self._transaction is not None

    @asynccontextmanager
    async def acquire_connection(self) -> AsyncGenerator[AsyncConnection, None]:
        """
        Acquire a database connection from the pool.

        Yields:
            Database connection

        Raises:
            ConnectionError: If connection cannot be acquired
        """
        if self._connection:
            # Use existing connection if in transaction
            yield self._connection
            return

        acquired = False
        try:
            async with self._pool.connection() as connection:
                acquired = True
                yield connection
        except psycopg.OperationalError as e:
            if acquired:
                raise
            logger.error(f"Failed to acquire connection: {e}")
            raise ConnectionError(f"Failed to acquire database connection: {e}") from e
        except builtins.TimeoutError as e:
            if acquired:
                raise
            logger.error(f"Connection acquisition timed out: {e}")
            raise TimeoutError("acquire_connection", DEFAULT_TIMEOUT) from e

    async def execute_query(self, query: str, *args: Any, timeout: float | None = None) -> str:
        """
        Execute a SQL statement that doesn't return data.

        Args:
            query: SQL query string
            *args: Query parameters
            timeout: Query timeout in seconds

        Returns:
            Status string of the form ``EXECUTE <rowcount>``

        Raises:
            IntegrityError: If a constraint is violated
            RepositoryError: If query execution fails
            TimeoutError: If query times out
        """
        try:
            async with self.acquire_connection() as conn, conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, args or None)
                result = f"EXECUTE {cur.rowcount}"
                logger.debug(f"Query executed: {query[:100]}... | Result: {result}")
                return result
        except psycopg.IntegrityError as e:
            logger.error(f"Integrity constraint violated: {e} | Query: {query[:100]}...")
            raise _integrity_error(e) from e
        except psycopg.OperationalError as e:
            logger.error(f"Query execution failed: {e} | Query: {query[:100]}...")
            raise RepositoryError(f"Query execution failed: {e}", e) from e
        except builtins.TimeoutError as e:
            logger.error(f"Query timed out: {query[:100]}...")
            raise TimeoutError("execute_query", timeout or DEFAULT_TIMEOUT) from e

    async def fetch_one(self, query: str, *args: Any, timeout: float | None = None) -> Row | None:
        """
        Fetch a single record from the database.

        Returns:
            Record as a dict if found, None otherwise

        Raises:
            RepositoryError: If query execution fails
            TimeoutError: If query times out
        """
        try:
            async with self.acquire_connection() as conn, conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, args or None)
                result = await cur.fetchone()
                logger.debug(f"Fetch one query: {query[:100]}... | Found: {result is not None}")
                return result
        except psycopg.OperationalError as e:
            logger.error(f"Fetch one failed: {e} | Query: {query[:100]}...")
            raise RepositoryError(f"Fetch one query failed: {e}", e) from e
        except builtins.TimeoutError as e:
            logger.error(f"Fetch one timed out: {query[:100]}...")
            raise TimeoutError("fetch_one", timeout or DEFAULT_TIMEOUT) from e

    async def fetch_all(self, query: str, *args: Any, timeout: float | None = None) -> list[Row]:
        """
        Fetch all records from the database.

        Returns:
            List of records as dicts

        Raises:
            RepositoryError: If query execution fails
            TimeoutError: If query times out
        """
        try:
            async with self.acquire_connection() as conn, conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, args or None)
                result = await cur.fetchall()
                logger.debug(f"Fetch all query: {query[:100]}... | Count: {len(result)}")
                return result
        except psycopg.OperationalError as e:
            logger.error(f"Fetch all failed: {e} | Query: {query[:100]}...")
            raise RepositoryError(f"Fetch all query failed: {e}", e) from e
        except builtins.TimeoutError as e:
            logger.error(f"Fetch all timed out: {query[:100]}...")
            raise TimeoutError("fetch_all", timeout or DEFAULT_TIMEOUT) from e

    async def execute_batch(
        self,
        query: str,
        args_list: Sequence[Sequence[Any]],
        timeout: float | None = None,
    ) -> None:
        """
        Execute a statement once per parameter tuple.

        Raises:
            IntegrityError: If a constraint is violated
            RepositoryError: If batch execution fails
            TimeoutError: If batch execution times out
        """
        if not args_list:
            return

        try:
            async with self.acquire_connection() as conn, conn.cursor(row_factory=dict_row) as cur:
                await cur.executemany(query, args_list)
                logger.debug(f"Batch query executed: {query[:100]}... | Batch size: {len(args_list)}")
        except psycopg.IntegrityError as e:
            logger.error(f"Batch integrity constraint violated: {e} | Query: {query[:100]}...")
            raise _integrity_error(e) from e
        except psycopg.OperationalError as e:
            logger.error(f"Batch execution failed: {e} | Query: {query[:100]}...")
            raise RepositoryError(f"Batch execution failed: {e}", e) from e
        except builtins.TimeoutError as e:
            logger.error(f"Batch execution timed out: {query[:100]}...")
            raise TimeoutError("execute_batch", timeout or DEFAULT_TIMEOUT) from e

    async def begin_transaction(self) -> None:
        """
        Begin a database transaction on a dedicated pooled connection.

        Raises:
            TransactionAlreadyActiveError: If a transaction is already active
            TransactionError: If transaction cannot be started
        """
        if self.has_active_transaction:
            raise TransactionAlreadyActiveError()

        try:
            self._connection_cm = self._pool.connection()
            self._connection = await self._connection_cm.__aenter__()
            self._transaction = self._connection.transaction()
            await self._transaction.__aenter__()
            logger.debug("Transaction started")
        except (psycopg.Error, builtins.TimeoutError) as e:
            logger.error(f"Failed to start transaction: {e}")
            await self._release_connection(e)
            raise TransactionError(f"Failed to start transaction: {e}", e) from e
        except BaseException as e:
            # Cancellation while opening the transaction must still hand the connection back
            await self._release_connection(e)
            raise

    async def commit_transaction(self) -> None:
        """
        Commit the current transaction.

        Raises:
            TransactionNotActiveError: If no transaction is active
            TransactionError: If commit fails
        """
        if self._transaction is None:
            raise TransactionNotActiveError()

        error: BaseException | None = None
        try:
            await self._transaction.__aexit__(None, None, None)
            logger.debug("Transaction committed")
        except psycopg.Error as e:
            error = e
            logger.error(f"Failed to commit transaction: {e}")
            raise TransactionError(f"Failed to commit transaction: {e}", e) from e
        finally:
            await self._release_connection(error)

    async def rollback_transaction(self) -> None:
        """
        Rollback the current transaction.

        Raises:
            TransactionError: If rollback fails
        """
        if self._transaction is None:
            logger.warning("No active transaction to rollback")
            return

        reason = psycopg.Rollback()
        try:
            # Exiting the transaction block with Rollback discards it without re-raising
            await self._transaction.__aexit__(type(reason), reason, None)
            logger.debug("Transaction rolled back")
        except psycopg.Error as e:
            logger.error(f"Failed to rollback transaction: {e}")
            raise TransactionError(f"Failed to rollback transaction: {e}", e) from e
        finally:
            await self._release_connection(None)

    async def _release_connection(self, error: BaseException | None) -> None:
        """Return the transaction's connection to the pool."""
        self._transaction = None
        connection_cm, self._connection_cm = self._connection_cm, None
        self._connection = None

        if connection_cm is None:
            return
        try:
            if error is None:
                await connection_cm.__aexit__(None, None, None)
            else:
                await connection_cm.__aexit__(type(error), error, error.__traceback__)
        except Exception as e:
            logger.warning(f"Failed to release connection: {e}")

    async def health_check(self) -> bool:
        """
        Perform a health check on the database connection.

        Returns:
            True if database is healthy, False otherwise
        """
        try:
            async with self.acquire_connection() as conn, conn.cursor() as cur:
                await cur.execute("SELECT 1")
                await cur.fetchone()
                return True
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return False

    def __str__(self) -> str:
        """String representation of the adapter."""
        tx_info = "with active transaction" if self.has_active_transaction else "no transaction"
        return f"PostgreSQLAdapter(Pool(max_size={self._pool.max_size}), {tx_info})"
