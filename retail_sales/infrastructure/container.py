"""
Dependency Injection Container - Composition root for the sales application.

Builds the connection pool, unit-of-work factory, event bus, sale service and
use cases, and manages their lifecycle.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar, cast

from retail_sales.application.interfaces.events import IEventBus
from retail_sales.application.interfaces.unit_of_work import IUnitOfWorkFactory
from retail_sales.application.services import SaleService
from retail_sales.application.use_cases import (
    CancelSaleItemUseCase,
    CancelSaleUseCase,
    CreateSaleUseCase,
    GetSaleUseCase,
    ListSalesUseCase,
    UpdateSaleUseCase,
)
from retail_sales.infrastructure.config import AppConfig, get_config
from retail_sales.infrastructure.database import (
    DatabaseConnection,
    MigrationManager,
    PostgreSQLAdapter,
)
from retail_sales.infrastructure.database.migrations import register_initial_migrations
from retail_sales.infrastructure.events import InMemoryEventBus, register_sale_event_logging
from retail_sales.infrastructure.monitoring import setup_structured_logging
from retail_sales.infrastructure.repositories import PostgreSQLUnitOfWorkFactory

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SalesContainer:
    """
    Dependency Injection Container for the retail sales application.

    Components are registered once ``startup`` has opened the connection
    pool. Infrastructure and the sale service are singletons; each ``get``
    of a use case builds a new instance.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        """Initialize the container with configuration."""
        self.config = config or get_config()
        self.database = DatabaseConnection(self.config.database)
        self.event_bus: IEventBus = InMemoryEventBus()

        self._singletons: dict[type[Any], Any] = {}
        self._factories: dict[type[Any], Callable[[], Any]] = {}
        self._started = False

    @property
    def is_started(self) -> bool:
        return self._started

    async def startup(self, configure_logging: bool = True, run_migrations: bool = False) -> None:
        """
        Open the database pool and wire every component.

        Args:
            configure_logging: Install structured logging from the logging config
            run_migrations: Apply pending schema migrations before serving
        """
        if self._started:
            return

        if configure_logging:
            setup_structured_logging(
                level=self.config.logging.level,
                format_type=self.config.logging.format,
                log_file=self.config.logging.file,
            )

        pool = await self.database.connect()

        if run_migrations:
            manager = MigrationManager(PostgreSQLAdapter(pool))
            register_initial_migrations(manager)
            await manager.initialize()
            await manager.migrate_to_latest()

        register_sale_event_logging(self.event_bus)

        self._register_infrastructure(PostgreSQLUnitOfWorkFactory(pool))
        self._register_application_services()
        self._register_use_cases()

        self._started = True
        logger.info(
            f"Sales container started ({self.config.environment.value}, "
            f"currency {self.config.sales.currency})"
        )

    async def shutdown(self) -> None:
        """Close the database pool and forget all components."""
        if not self._started:
            return

        await self.database.disconnect()
        self._singletons.clear()
        self._factories.clear()
        self._started = False
        logger.info("Sales container shut down")

    async def __aenter__(self) -> "SalesContainer":
        await self.startup()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.shutdown()
        return False

    def _register_infrastructure(self, unit_of_work_factory: IUnitOfWorkFactory) -> None:
        """Register infrastructure components."""
        self.register(IUnitOfWorkFactory, unit_of_work_factory)  # type: ignore[type-abstract]
        self.register(IEventBus, self.event_bus)  # type: ignore[type-abstract]

    def _register_application_services(self) -> None:
        """Register application-level services."""
        self._register_singleton(
            SaleService,
            lambda: SaleService(
                unit_of_work_factory=self.get(IUnitOfWorkFactory),  # type: ignore[type-abstract]
                event_publisher=self.get(IEventBus),  # type: ignore[type-abstract]
                currency=self.config.sales.currency,
            ),
        )

    def _register_use_cases(self) -> None:
        """Register all use cases."""
        self._register_factory(CreateSaleUseCase, lambda: CreateSaleUseCase(self.get(SaleService)))
        self._register_factory(UpdateSaleUseCase, lambda: UpdateSaleUseCase(self.get(SaleService)))
        self._register_factory(CancelSaleUseCase, lambda: CancelSaleUseCase(self.get(SaleService)))
        self._register_factory(
            CancelSaleItemUseCase, lambda: CancelSaleItemUseCase(self.get(SaleService))
        )
        self._register_factory(GetSaleUseCase, lambda: GetSaleUseCase(self.get(SaleService)))
        self._register_factory(
            ListSalesUseCase,
            lambda: ListSalesUseCase(
                self.get(SaleService), default_page_size=self.config.sales.default_page_size
            ),
        )

    def _register_singleton(self, cls: type[T], factory: Callable[[], Any]) -> None:
        """Register a component created once on first use."""

        def create_once() -> Any:
            if cls not in self._singletons:
                self._singletons[cls] = factory()
            return self._singletons[cls]

        self._factories[cls] = create_once

    def _register_factory(self, cls: type[T], factory: Callable[[], Any]) -> None:
        """Register a factory for creating instances."""
        self._factories[cls] = factory

    def get(self, cls: type[T]) -> T:
        """
        Get an instance of a registered component.

        Raises:
            KeyError: If the class is not registered
        """
        if cls in self._singletons:
            return cast(T, self._singletons[cls])

        if cls not in self._factories:
            raise KeyError(f"No registration found for {cls.__name__}")

        return cast(T, self._factories[cls]())

    def has(self, cls: type[T]) -> bool:
        """Check if a component is registered."""
        return cls in self._factories or cls in self._singletons

    def register(self, cls: type[T], instance: T) -> None:
        """Register a pre-created instance."""
        self._singletons[cls] = instance
        self._factories[cls] = lambda: instance
