"""
Database Infrastructure

PostgreSQL access through psycopg3: connection pool lifecycle, the query
adapter used by repositories, and schema migrations.
"""

from .adapter import PostgreSQLAdapter
from .connection import DatabaseConnection
from .migrations import Migration, MigrationManager, get_initial_migrations

__all__ = [
    "DatabaseConnection",
    "Migration",
    "MigrationManager",
    "PostgreSQLAdapter",
    "get_initial_migrations",
]
