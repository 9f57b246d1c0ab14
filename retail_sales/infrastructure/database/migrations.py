"""
Database Migration System

Provides schema versioning and migration management for the retail sales system.
Handles database schema evolution and rollback capabilities.
"""

# Standard library imports
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Local imports
from retail_sales.application.interfaces.exceptions import RepositoryError

from .adapter import PostgreSQLAdapter

logger = logging.getLogger(__name__)


@dataclass
class Migration:
    """Represents a database migration."""

    version: str
    name: str
    up_sql: str
    down_sql: str
    applied_at: datetime | None = None

    @property
    def is_applied(self) -> bool:
        """Check if migration has been applied."""
        return self.applied_at is not None


class MigrationManager:
    """
    Manages database schema migrations.

    Applies, rolls back and tracks schema changes recorded in the
    ``schema_migrations`` table. Each migration runs in its own transaction.
    """

    # Migration table name is a constant - not user input
    MIGRATIONS_TABLE = "schema_migrations"

    def __init__(self, adapter: PostgreSQLAdapter) -> None:
        """
        Initialize migration manager.

        Args:
            adapter: Database adapter for executing migrations
        """
        self.adapter = adapter
        self._migrations: list[Migration] = []

    @property
    def migrations(self) -> list[Migration]:
        """Registered migrations ordered by version."""
        return sorted(self._migrations, key=lambda m: m.version)

    async def initialize(self) -> None:
        """Create the migrations tracking table if it doesn't exist."""
        create_table_sql = f"""
        CREATE TABLE IF NOT EXISTS {self.MIGRATIONS_TABLE} (
            version VARCHAR(50) PRIMARY KEY,
            name VARCHAR(200) NOT NULL,
            applied_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
            execution_time_ms INTEGER
        )
        """

        await self.adapter.execute_query(create_table_sql)
        logger.info("Migration system initialized")

    def add_migration(self, version: str, name: str, up_sql: str, down_sql: str = "") -> None:
        """
        Register a migration.

        Args:
            version: Migration version (e.g., "001", "20241201_001")
            name: Migration name (e.g., "create_sales_tables")
            up_sql: SQL to apply the migration
            down_sql: SQL to rollback the migration

        Raises:
            ValueError: If a migration with the same version is already registered
        """
        if any(m.version == version for m in self._migrations):
            raise ValueError(f"Migration version {version} is already registered")

        self._migrations.append(Migration(version=version, name=name, up_sql=up_sql, down_sql=down_sql))
        logger.debug(f"Added migration: {version} - {name}")

    def load_migrations_from_directory(self, directory: Path) -> int:
        """
        Load migrations from a directory.

        Expected file naming: {version}_{name}_up.sql and {version}_{name}_down.sql

        Returns:
            Number of migrations loaded
        """
        if not directory.exists():
            logger.warning(f"Migration directory does not exist: {directory}")
            return 0

        loaded = 0
        for up_file in sorted(directory.glob("*_up.sql")):
            parts = up_file.stem.split("_")
            if len(parts) < 3:
                logger.warning(f"Invalid migration filename: {up_file.name}")
                continue

            version = parts[0]
            name = "_".join(parts[1:-1])
            down_file = directory / f"{version}_{name}_down.sql"
            down_sql = down_file.read_text(encoding="utf-8") if down_file.exists() else ""

            self.add_migration(version, name, up_file.read_text(encoding="utf-8"), down_sql)
            loaded += 1

        logger.info(f"Loaded {loaded} migrations from {directory}")
        return loaded

    async def get_applied_migrations(self) -> list[Migration]:
        """
        Get list of applied migrations from database.

        Returns:
            Applied migrations in the order they were applied
        """
        query = f"""
        SELECT version, name, applied_at
        FROM {self.MIGRATIONS_TABLE}
        ORDER BY applied_at ASC, version ASC
        """  # nosec B608 - table name is a constant

        records = await self.adapter.fetch_all(query)
        known = {m.version: m for m in self._migrations}

        applied = []
        for record in records:
            definition = known.get(record["version"])
            applied.append(
                Migration(
                    version=record["version"],
                    name=record["name"],
                    up_sql=definition.up_sql if definition else "",
                    down_sql=definition.down_sql if definition else "",
                    applied_at=record["applied_at"],
                )
            )
        return applied

    async def get_pending_migrations(self) -> list[Migration]:
        """Migrations registered but not yet applied, ordered by version."""
        applied_versions = {m.version for m in await self.get_applied_migrations()}
        return [m for m in self.migrations if m.version not in applied_versions]

    async def apply_migration(self, migration: Migration) -> None:
        """
        Apply a single migration.

        Raises:
            RepositoryError: If migration fails
        """
        start_time = datetime.now(UTC)
        logger.info(f"Applying migration {migration.version}: {migration.name}")

        await self.adapter.begin_transaction()
        try:
            await self.adapter.execute_query(migration.up_sql)

            execution_time = int((datetime.now(UTC) - start_time).total_seconds() * 1000)
            insert_query = f"""
            INSERT INTO {self.MIGRATIONS_TABLE}
            (version, name, applied_at, execution_time_ms)
            VALUES (%s, %s, %s, %s)
            """  # nosec B608 - table name is a constant

            await self.adapter.execute_query(
                insert_query, migration.version, migration.name, start_time, execution_time
            )
            await self.adapter.commit_transaction()
        except Exception as e:
            await self.adapter.rollback_transaction()
            logger.error(f"Failed to apply migration {migration.version}: {e}")
            raise RepositoryError(f"Migration {migration.version} failed: {e}", e) from e

        migration.applied_at = start_time
        logger.info(f"Migration {migration.version} applied successfully in {execution_time}ms")

    async def rollback_migration(self, migration: Migration) -> None:
        """
        Rollback a single migration.

        Raises:
            RepositoryError: If the migration has no rollback SQL or rollback fails
        """
        if not migration.down_sql:
            raise RepositoryError(f"Migration {migration.version} has no rollback SQL")

        logger.info(f"Rolling back migration {migration.version}: {migration.name}")

        await self.adapter.begin_transaction()
        try:
            await self.adapter.execute_query(migration.down_sql)
            delete_query = f"DELETE FROM {self.MIGRATIONS_TABLE} WHERE version = %s"  # nosec B608
            await self.adapter.execute_query(delete_query, migration.version)
            await self.adapter.commit_transaction()
        except Exception as e:
            await self.adapter.rollback_transaction()
            logger.error(f"Failed to rollback migration {migration.version}: {e}")
            raise RepositoryError(f"Migration rollback {migration.version} failed: {e}", e) from e

        migration.applied_at = None
        logger.info(f"Migration {migration.version} rolled back successfully")

    async def migrate_to_latest(self) -> int:
        """
        Apply all pending migrations.

        Returns:
            Number of migrations applied

        Raises:
            RepositoryError: If any migration fails
        """
        pending = await self.get_pending_migrations()

        if not pending:
            logger.info("No pending migrations")
            return 0

        logger.info(f"Applying {len(pending)} pending migrations")
        for migration in pending:
            await self.apply_migration(migration)

        logger.info(f"Applied {len(pending)} migrations successfully")
        return len(pending)

    async def get_status(self) -> dict[str, Any]:
        """
        Get migration status.

        Returns:
            Dictionary with migration information
        """
        applied = await self.get_applied_migrations()
        applied_versions = {m.version for m in applied}
        pending = [m for m in self.migrations if m.version not in applied_versions]

        return {
            "current_version": max(applied_versions) if applied_versions else None,
            "total_migrations": len(self._migrations),
            "applied_count": len(applied),
            "pending_count": len(pending),
            "applied_migrations": [
                {
                    "version": m.version,
                    "name": m.name,
                    "applied_at": m.applied_at.isoformat() if m.applied_at else None,
                }
                for m in applied
            ],
            "pending_migrations": [{"version": m.version, "name": m.name} for m in pending],
        }


def get_initial_migrations() -> list[tuple[str, str, str, str]]:
    """
    Get initial migrations for the sales schema.

    Returns:
        List of (version, name, up_sql, down_sql) tuples
    """
    return [
        (
            "001",
            "create_reference_tables",
            """
            CREATE TABLE customers (
                id UUID PRIMARY KEY,
                external_id VARCHAR(100) NOT NULL UNIQUE,
                name VARCHAR(200) NOT NULL,
                email VARCHAR(200),
                phone VARCHAR(50),
                last_synced_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
            );

            CREATE TABLE branches (
                id UUID PRIMARY KEY,
                external_id VARCHAR(100) NOT NULL UNIQUE,
                name VARCHAR(200) NOT NULL,
                address VARCHAR(500),
                last_synced_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
            );

            CREATE TABLE products (
                id UUID PRIMARY KEY,
                external_id VARCHAR(100) NOT NULL UNIQUE,
                name VARCHAR(200) NOT NULL,
                description TEXT,
                price NUMERIC(18, 2) NOT NULL CHECK (price >= 0),
                currency CHAR(3) NOT NULL DEFAULT 'USD',
                last_synced_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
            );
            """,
            """
            DROP TABLE IF EXISTS products;
            DROP TABLE IF EXISTS branches;
            DROP TABLE IF EXISTS customers;
            """,
        ),
        (
            "002",
            "create_sales_tables",
            """
            CREATE TABLE sales (
                id UUID PRIMARY KEY,
                sale_number VARCHAR(50) NOT NULL,
                sale_date TIMESTAMP WITH TIME ZONE NOT NULL,
                customer_id UUID NOT NULL REFERENCES customers(id),
                branch_id UUID NOT NULL REFERENCES branches(id),
                total_amount NUMERIC(18, 2) NOT NULL DEFAULT 0,
                currency CHAR(3) NOT NULL DEFAULT 'USD',
                is_cancelled BOOLEAN NOT NULL DEFAULT FALSE,
                created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                updated_at TIMESTAMP WITH TIME ZONE,
                version INTEGER NOT NULL DEFAULT 1,
                CONSTRAINT sales_sale_number_key UNIQUE (sale_number)
            );

            CREATE INDEX idx_sales_sale_date ON sales(sale_date DESC);
            CREATE INDEX idx_sales_customer_id ON sales(customer_id);
            CREATE INDEX idx_sales_branch_id ON sales(branch_id);

            CREATE TABLE sale_items (
                id UUID PRIMARY KEY,
                sale_id UUID NOT NULL REFERENCES sales(id) ON DELETE CASCADE,
                product_id UUID NOT NULL REFERENCES products(id),
                position INTEGER NOT NULL,
                quantity INTEGER NOT NULL CHECK (quantity BETWEEN 1 AND 20),
                unit_price NUMERIC(18, 2) NOT NULL,
                discount_rate NUMERIC(5, 4) NOT NULL DEFAULT 0,
                line_total NUMERIC(18, 2) NOT NULL,
                is_cancelled BOOLEAN NOT NULL DEFAULT FALSE
            );

            CREATE INDEX idx_sale_items_sale_id ON sale_items(sale_id);
            """,
            """
            DROP TABLE IF EXISTS sale_items;
            DROP TABLE IF EXISTS sales;
            """,
        ),
    ]


def register_initial_migrations(manager: MigrationManager) -> None:
    """Register the built-in sales schema migrations on ``manager``."""
    for version, name, up_sql, down_sql in get_initial_migrations():
        manager.add_migration(version, name, up_sql, down_sql)
