"""Part service for creating parts and reading them with their components."""

import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import (
    CircularDependencyException,
    ComponentPartsNotFoundException,
    DuplicatePartNameException,
    InvalidOperationException,
    RecordNotFoundException,
)
from app.models.part import Part, PartType
from app.models.part_component import PartComponent
from app.schemas.part import ComponentSummary, PartWithComponentsModel
from app.services.base import BaseService
from app.services.bom_service import BomService
from app.services.metrics_service import MetricsServiceProtocol

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


class PartService(BaseService):
    """Service class for part management operations."""

    def __init__(
        self,
        db: Session,
        bom_service: BomService,
        metrics_service: MetricsServiceProtocol,
    ):
        """Initialize service with database session and dependencies.

        Args:
            db: SQLAlchemy database session
            bom_service: Instance of BomService for graph reads and cycle checks
            metrics_service: Instance of MetricsService for recording metrics
        """
        super().__init__(db)
        self.bom_service = bom_service
        self.metrics_service = metrics_service

    def create_part(
        self,
        name: str,
        part_type: PartType,
        description: str | None = None,
        components: Sequence[tuple[UUID, int]] | None = None,
    ) -> Part:
        """Create a part and, for assemblies, its component edges atomically.

        Args:
            name: Unique part name
            part_type: RAW or ASSEMBLED
            description: Optional description
            components: (component part id, quantity per unit) pairs; required
                for assembled parts and forbidden for raw parts

        Returns:
            The persisted part, without components attached

        Raises:
            DuplicatePartNameException: A part with this name already exists
            ComponentPartsNotFoundException: Referenced component ids don't exist
            CircularDependencyException: A component already requires the new part
            InvalidOperationException: The request violates structural rules
        """
        name = name.strip()
        if description is not None:
            description = description.strip() or None
        entries = list(components or [])
        self._validate_new_part(name, part_type, description, entries)

        # Savepoint scope: any failure below discards the part row and all edges
        with self.db.begin_nested():
            if self._find_part_by_name(name) is not None:
                raise DuplicatePartNameException(name)

            part = Part(
                name=name,
                type=part_type,
                description=description,
                quantity_in_stock=0,
            )
            self.db.add(part)
            try:
                self.db.flush()  # Get the ID immediately
            except IntegrityError as exc:
                # Lost a race with a concurrent creation of the same name
                raise DuplicatePartNameException(name) from exc

            if part_type == PartType.ASSEMBLED:
                self._add_components(part, entries)

        self.metrics_service.record_part_created(part_type)
        logger.info(
            f"Created {part_type.value} part '{name}' ({part.id}) with {len(entries)} component(s)"
        )
        return part

    def get_part(self, part_id: UUID) -> Part:
        """Get part by ID."""
        stmt = select(Part).where(Part.id == part_id)
        part = self.db.execute(stmt).scalar_one_or_none()
        if not part:
            raise RecordNotFoundException("Part", part_id)
        return part

    def get_part_with_components(self, part_id: UUID) -> PartWithComponentsModel:
        """Get a part with its direct components flattened when it is assembled."""
        part = self.get_part(part_id)
        if not part.is_assembled:
            return PartWithComponentsModel(part=part)

        edges = self.bom_service.get_components(part.id)
        return PartWithComponentsModel(
            part=part,
            components=[self._summarize(edge) for edge in edges],
        )

    def list_parts(self) -> list[PartWithComponentsModel]:
        """List all parts ordered by name, with components for assembled parts.

        Components of every assembled part are loaded with a single query.
        """
        stmt = select(Part).order_by(Part.name)
        parts = list(self.db.execute(stmt).scalars().all())

        assembled_ids = [part.id for part in parts if part.is_assembled]
        edges_by_part = self.bom_service.get_components_for_parts(assembled_ids)

        result = []
        for part in parts:
            if part.is_assembled:
                edges = edges_by_part.get(part.id, [])
                result.append(
                    PartWithComponentsModel(
                        part=part,
                        components=[self._summarize(edge) for edge in edges],
                    )
                )
            else:
                result.append(PartWithComponentsModel(part=part))
        return result

    def _validate_new_part(
        self,
        name: str,
        part_type: PartType,
        description: str | None,
        entries: list[tuple[UUID, int]],
    ) -> None:
        if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            raise InvalidOperationException(
                "create part",
                f"name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
            )
        if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
            raise InvalidOperationException(
                "create part",
                f"description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
            )

        if part_type == PartType.RAW:
            if entries:
                raise InvalidOperationException("create part", "raw parts cannot have components")
            return

        if not entries:
            raise InvalidOperationException(
                "create part", "an assembled part must have at least one component"
            )

        seen: set[UUID] = set()
        for component_id, quantity in entries:
            if quantity < 1:
                raise InvalidOperationException(
                    "create part", "component quantities must be at least 1"
                )
            if component_id in seen:
                raise InvalidOperationException(
                    "create part", f"component {component_id} is listed more than once"
                )
            seen.add(component_id)

    def _add_components(self, part: Part, entries: list[tuple[UUID, int]]) -> None:
        component_ids = [component_id for component_id, _ in entries]
        found = self.bom_service.get_parts_by_ids(component_ids)

        missing = [component_id for component_id in component_ids if component_id not in found]
        if missing:
            logger.info(f"Rejected part '{part.name}': missing components {missing}")
            raise ComponentPartsNotFoundException(missing)

        # Every edge is checked against the graph before any edge is written
        if any(self.bom_service.would_create_cycle(part.id, component_id) for component_id in component_ids):
            self.metrics_service.record_cycle_rejection()
            raise CircularDependencyException()

        for component_id, quantity in entries:
            self.db.add(
                PartComponent(
                    assembled_part_id=part.id,
                    component_part=found[component_id],
                    quantity=quantity,
                )
            )
        self.db.flush()

    def _find_part_by_name(self, name: str) -> Part | None:
        stmt = select(Part).where(Part.name == name)
        return self.db.execute(stmt).scalar_one_or_none()

    @staticmethod
    def _summarize(edge: PartComponent) -> ComponentSummary:
        return ComponentSummary(
            id=edge.component_part.id,
            name=edge.component_part.name,
            quantity=edge.quantity,
        )
