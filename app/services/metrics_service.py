"""Prometheus metrics service for collecting and exposing application metrics."""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, generate_latest
from sqlalchemy import func, select

from app.models.part import Part, PartType

if TYPE_CHECKING:
    from app.services.container import ServiceContainer

logger = logging.getLogger(__name__)


class MetricsServiceProtocol(ABC):
    """Protocol for metrics service implementations."""

    @abstractmethod
    def record_part_created(self, part_type: PartType) -> None:
        """Record a successful part creation."""
        pass

    @abstractmethod
    def record_cycle_rejection(self) -> None:
        """Record an assembly rejected for introducing a cycle."""
        pass

    @abstractmethod
    def record_quantity_change(self, operation: str, delta: int) -> None:
        """Record quantity change events."""
        pass

    @abstractmethod
    def record_adjustment_failure(self, reason: str) -> None:
        """Record a stock adjustment that was reported as FAILED."""
        pass

    @abstractmethod
    def update_inventory_metrics(self) -> None:
        """Update inventory-related gauges."""
        pass

    @abstractmethod
    def get_metrics_text(self) -> str:
        """Get metrics in Prometheus text format."""
        pass


class MetricsService(MetricsServiceProtocol):
    """Service class for Prometheus metrics collection and exposure."""

    def __init__(
        self,
        container: "ServiceContainer | None" = None,
        registry: CollectorRegistry | None = None,
    ):
        """Initialize service with container reference and metric objects.

        Args:
            container: Service container used to open a session for gauge updates
            registry: Prometheus registry to register metrics with (default registry if omitted)
        """
        self.container = container
        self.registry = registry if registry is not None else REGISTRY

        self.initialize_metrics()

    def initialize_metrics(self) -> None:
        """Define all Prometheus metric objects."""
        # Check if already initialized (for container singleton reuse)
        if hasattr(self, 'inventory_total_parts'):
            return

        # Inventory Metrics
        self.inventory_total_parts = Gauge(
            'inventory_total_parts',
            'Total parts in system',
            registry=self.registry,
        )
        self.inventory_assembled_parts = Gauge(
            'inventory_assembled_parts',
            'Parts built from components',
            registry=self.registry,
        )
        self.inventory_total_quantity = Gauge(
            'inventory_total_quantity',
            'Sum of all quantities in stock',
            registry=self.registry,
        )

        # Activity Metrics
        self.inventory_parts_created_total = Counter(
            'inventory_parts_created_total',
            'Total parts created by type',
            ['type'],
            registry=self.registry,
        )
        self.inventory_quantity_changes_total = Counter(
            'inventory_quantity_changes_total',
            'Total changes by type',
            ['operation'],
            registry=self.registry,
        )
        self.inventory_adjustment_failures_total = Counter(
            'inventory_adjustment_failures_total',
            'Stock adjustments reported as FAILED',
            ['reason'],
            registry=self.registry,
        )
        self.bom_cycle_rejections_total = Counter(
            'bom_cycle_rejections_total',
            'Assemblies rejected because a component edge would create a cycle',
            registry=self.registry,
        )

    def record_part_created(self, part_type: PartType) -> None:
        try:
            self.inventory_parts_created_total.labels(type=part_type.value).inc()
        except Exception as e:
            logger.error(f"Error recording part creation: {e}")

    def record_cycle_rejection(self) -> None:
        try:
            self.bom_cycle_rejections_total.inc()
        except Exception as e:
            logger.error(f"Error recording cycle rejection: {e}")

    def record_quantity_change(self, operation: str, delta: int) -> None:
        """Record quantity change events.

        Args:
            operation: Type of operation ('add', 'remove', 'build' or 'consume')
            delta: Absolute change amount
        """
        try:
            self.inventory_quantity_changes_total.labels(operation=operation).inc(delta)
        except Exception as e:
            logger.error(f"Error recording quantity change: {e}")

    def record_adjustment_failure(self, reason: str) -> None:
        try:
            self.inventory_adjustment_failures_total.labels(reason=reason).inc()
        except Exception as e:
            logger.error(f"Error recording adjustment failure: {e}")

    def update_inventory_metrics(self) -> None:
        """Update inventory-related gauges with current database values."""
        if not self.container:
            return

        session = self.container.db_session()

        try:
            total_parts, total_quantity = session.execute(
                select(
                    func.count(Part.id),
                    func.coalesce(func.sum(Part.quantity_in_stock), 0),
                )
            ).one()
            assembled = session.execute(
                select(func.count(Part.id)).where(Part.type == PartType.ASSEMBLED)
            ).scalar()

            self.inventory_total_parts.set(total_parts or 0)
            self.inventory_total_quantity.set(total_quantity or 0)
            self.inventory_assembled_parts.set(assembled or 0)

        except Exception as e:
            session.rollback()
            logger.error(f"Error updating inventory metrics: {e}")

    def get_metrics_text(self) -> str:
        """Generate metrics in Prometheus text format.

        Returns:
            Metrics data in Prometheus exposition format
        """
        self.update_inventory_metrics()
        return generate_latest(self.registry).decode('utf-8')
