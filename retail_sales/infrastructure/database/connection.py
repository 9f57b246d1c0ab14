"""
Database Connection Management

Opens and closes the psycopg3 connection pool used by the repositories.
Opening the pool is retried with exponential backoff; nothing above the
persistence layer retries.
"""

# Standard library imports
import asyncio
import logging
import random
import time

# Third-party imports
import psycopg
from psycopg_pool import AsyncConnectionPool

# Local imports
from retail_sales.application.interfaces.exceptions import ConnectionError
from retail_sales.infrastructure.config import DatabaseConfig

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    Database connection manager.

    Owns a single psycopg3 connection pool for the lifetime of the
    application.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        """
        Initialize connection manager.

        Args:
            config: Database configuration
        """
        self.config = config
        self._pool: AsyncConnectionPool | None = None
        self._is_closed = False

    @property
    def is_connected(self) -> bool:
        """Check if connection pool is active."""
        return self._pool is not None and not self._pool.closed

    @property
    def is_closed(self) -> bool:
        """Check if connection has been closed."""
        return self._is_closed

    @property
    def pool(self) -> AsyncConnectionPool:
        """
        The open connection pool.

        Raises:
            ConnectionError: If ``connect`` has not completed
        """
        if self._pool is None or self._pool.closed:
            raise ConnectionError("Database connection pool is not open")
        return self._pool

    def retry_delay(self, attempt: int) -> float:
        """Backoff delay before retry number ``attempt`` (0-based), with jitter."""
        delay = self.config.initial_retry_delay * (self.config.retry_backoff_multiplier**attempt)
        delay = min(delay, self.config.max_retry_delay)
        return delay * random.uniform(0.5, 1.0)

    async def connect(self) -> AsyncConnectionPool:
        """
        Establish database connection pool with retry logic.

        Returns:
            psycopg3 async connection pool

        Raises:
            ConnectionError: If connection fails after all retries
        """
        if self._is_closed:
            raise ConnectionError("Connection manager has been closed")

        if self.is_connected and self._pool is not None:
            return self._pool

        start_time = time.time()
        attempts = self.config.max_retry_attempts

        for attempt in range(attempts):
            try:
                logger.info(
                    f"Connecting to database (attempt {attempt + 1}/{attempts}): "
                    f"{self.config.host}:{self.config.port}/{self.config.database}"
                )

                self._pool = AsyncConnectionPool(
                    conninfo=self.config.build_dsn(),
                    min_size=self.config.min_pool_size,
                    max_size=self.config.max_pool_size,
                    max_idle=self.config.max_idle_time,
                    max_lifetime=self.config.max_lifetime,
                    timeout=self.config.command_timeout,
                    open=False,
                )
                await asyncio.wait_for(
                    self._pool.open(wait=True), timeout=self.config.server_connection_timeout
                )

                async with self._pool.connection() as conn, conn.cursor() as cur:
                    await cur.execute("SELECT 1")
                    await cur.fetchone()

                logger.info(
                    f"Database connected successfully. Pool size: "
                    f"{self.config.min_pool_size}-{self.config.max_pool_size}"
                )
                return self._pool

            except (TimeoutError, psycopg.OperationalError, OSError) as e:
                await self._close_pool()

                if attempt < attempts - 1:
                    delay = self.retry_delay(attempt)
                    logger.warning(
                        f"Connection attempt {attempt + 1} failed: {e}. "
                        f"Retrying in {delay:.2f} seconds..."
                    )
                    await asyncio.sleep(delay)
                else:
                    total_time = time.time() - start_time
                    logger.error(
                        f"Failed to connect to database after {attempt + 1} attempts "
                        f"in {total_time:.2f} seconds: {e}"
                    )
                    raise ConnectionError(
                        f"Failed to connect to database after {attempt + 1} attempts: {e}"
                    ) from e

        raise ConnectionError("Failed to establish database connection")

    async def disconnect(self) -> None:
        """Close database connection pool."""
        if self._is_closed:
            return

        logger.info("Disconnecting from database...")
        await self._close_pool()
        self._is_closed = True
        logger.info("Database disconnected")

    async def _close_pool(self) -> None:
        pool, self._pool = self._pool, None
        if pool is not None and not pool.closed:
            try:
                await pool.close()
            except (psycopg.Error, OSError) as e:
                logger.warning(f"Error closing connection pool: {e}")

    def __str__(self) -> str:
        """String representation."""
        status = "connected" if self.is_connected else "disconnected"
        return f"DatabaseConnection({self.config.host}:{self.config.port}, {status})"
