"""Dependency injection container for services."""

from dependency_injector import containers, providers
from sqlalchemy.orm import sessionmaker

from app.config import Settings
from app.services.bom_service import BomService
from app.services.inventory_service import InventoryService
from app.services.metrics_service import MetricsService
from app.services.part_service import PartService


class ServiceContainer(containers.DeclarativeContainer):
    """Container for service dependency injection."""

    __self__ = providers.Self()

    # Configuration and database session providers
    config = providers.Dependency(instance_of=Settings)
    session_maker = providers.Dependency(instance_of=sessionmaker)
    db_session = providers.ContextLocalSingleton(
        session_maker.provided.call()
    )

    # Metrics service - Singleton so metric objects are registered once
    metrics_service = providers.Singleton(
        MetricsService,
        container=__self__,
    )

    # Service providers - Factory creates new instances for each request
    bom_service = providers.Factory(BomService, db=db_session)
    part_service = providers.Factory(
        PartService,
        db=db_session,
        bom_service=bom_service,
        metrics_service=metrics_service,
    )

    # InventoryService depends on BomService and MetricsService
    inventory_service = providers.Factory(
        InventoryService,
        db=db_session,
        bom_service=bom_service,
        metrics_service=metrics_service,
        expose_error_details=config.provided.expose_error_details,
    )
