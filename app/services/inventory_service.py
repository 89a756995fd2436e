"""Inventory service for adjusting stock and building assemblies."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.part import Part
from app.schemas.inventory import InventoryAdjustmentResult
from app.services.base import BaseService
from app.services.bom_service import BomService
from app.services.metrics_service import MetricsServiceProtocol

logger = logging.getLogger(__name__)


@dataclass
class ComponentDeduction:
    """One planned deduction from a component when building an assembly."""
    component: Part
    required: int

    @property
    def is_covered(self) -> bool:
        return self.component.quantity_in_stock >= self.required


class InventoryService(BaseService):
    """Service class for stock ledger operations."""

    def __init__(
        self,
        db: Session,
        bom_service: BomService,
        metrics_service: MetricsServiceProtocol,
        expose_error_details: bool = True,
    ):
        """Initialize service with database session and dependencies.

        Args:
            db: SQLAlchemy database session
            bom_service: Instance of BomService for loading component edges
            metrics_service: Instance of MetricsService for recording metrics
            expose_error_details: Include unexpected error messages in FAILED results
        """
        super().__init__(db)
        self.bom_service = bom_service
        self.metrics_service = metrics_service
        self.expose_error_details = expose_error_details

    def adjust_quantity(self, part_id: UUID, delta: int) -> InventoryAdjustmentResult:
        """Change the stock of a part by a signed delta.

        A positive delta on an assembled part builds that many units: each
        direct component is reduced by its per-unit quantity times delta. All
        components are checked before any is reduced, so a shortfall leaves
        every row untouched. The cascade is one level deep; sub-assemblies are
        consumed from their own stock, not expanded.

        Not-found and insufficient-stock outcomes are returned as FAILED
        results. Unexpected errors roll back the adjustment and are also
        reported as FAILED.
        """
        try:
            with self.db.begin_nested():
                return self._apply_adjustment(part_id, delta)
        except Exception as e:
            logger.error(f"Stock adjustment of {part_id} by {delta} failed: {e}")
            self.metrics_service.record_adjustment_failure("error")
            message = str(e) if self.expose_error_details else "Update failed"
            return InventoryAdjustmentResult.failed(message)

    def _apply_adjustment(self, part_id: UUID, delta: int) -> InventoryAdjustmentResult:
        part = self._get_part_for_update(part_id)
        if part is None:
            return self._failed("not_found", "Part not found")

        if delta < 0 and -delta > part.quantity_in_stock:
            return self._failed("insufficient_quantity", f"Insufficient quantity for {part.name}")

        deductions: list[ComponentDeduction] = []
        if part.is_assembled and delta > 0:
            deductions = self._plan_deductions(part, delta)

            # Check every component before touching any of them
            for deduction in deductions:
                if not deduction.is_covered:
                    return self._failed(
                        "insufficient_quantity",
                        f"Insufficient quantity of {deduction.component.name}",
                    )

            for deduction in deductions:
                deduction.component.quantity_in_stock -= deduction.required

        part.quantity_in_stock += delta
        self.db.flush()

        self._record_changes(part, delta, deductions)
        return InventoryAdjustmentResult.success(f"Updated quantity for {part.name}")

    def _plan_deductions(self, part: Part, delta: int) -> list[ComponentDeduction]:
        """Required units per direct component for building delta units."""
        edges = self.bom_service.get_components(part.id)
        locked = self._get_parts_for_update([edge.component_part_id for edge in edges])

        return [
            ComponentDeduction(
                component=locked[edge.component_part_id],
                required=edge.quantity * delta,
            )
            for edge in edges
        ]

    def _get_part_for_update(self, part_id: UUID) -> Part | None:
        """Load a part under a row-level write lock held until the transaction ends."""
        stmt = (
            select(Part)
            .where(Part.id == part_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def _get_parts_for_update(self, part_ids: Sequence[UUID]) -> dict[UUID, Part]:
        """Lock component rows in id order.

        Concurrent builds of nested assemblies can still wait on each other in a
        cycle. The database aborts one of them and that adjustment is reported
        as FAILED.
        """
        if not part_ids:
            return {}

        stmt = (
            select(Part)
            .where(Part.id.in_(tuple(part_ids)))
            .order_by(Part.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {part.id: part for part in self.db.execute(stmt).scalars().all()}

    def _failed(self, reason: str, message: str) -> InventoryAdjustmentResult:
        self.metrics_service.record_adjustment_failure(reason)
        logger.info(f"Stock adjustment rejected: {message}")
        return InventoryAdjustmentResult.failed(message)

    def _record_changes(
        self,
        part: Part,
        delta: int,
        deductions: list[ComponentDeduction],
    ) -> None:
        if delta > 0:
            operation = "build" if part.is_assembled else "add"
            self.metrics_service.record_quantity_change(operation, delta)
        elif delta < 0:
            self.metrics_service.record_quantity_change("remove", -delta)

        for deduction in deductions:
            self.metrics_service.record_quantity_change("consume", deduction.required)
