"""
Repository Infrastructure Module

This module provides concrete PostgreSQL implementations of the repository interfaces.
Implements the infrastructure layer for data access using the Repository pattern.
"""

from .reference_repository import (
    PostgreSQLBranchRepository,
    PostgreSQLCustomerRepository,
    PostgreSQLProductRepository,
)
from .sale_repository import PostgreSQLSaleRepository
from .unit_of_work import PostgreSQLUnitOfWork, PostgreSQLUnitOfWorkFactory

__all__ = [
    "PostgreSQLBranchRepository",
    "PostgreSQLCustomerRepository",
    "PostgreSQLProductRepository",
    "PostgreSQLSaleRepository",
    "PostgreSQLUnitOfWork",
    "PostgreSQLUnitOfWorkFactory",
]
