"""Bill-of-material graph queries and cycle detection."""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import contains_eager

from app.models.part import Part
from app.models.part_component import PartComponent
from app.services.base import BaseService

logger = logging.getLogger(__name__)


class BomService(BaseService):
    """Service class for reading the component graph of assembled parts."""

    def would_create_cycle(self, assembled_part_id: UUID, component_part_id: UUID) -> bool:
        """Check whether adding the edge assembled -> component would close a cycle.

        Walks the existing graph depth-first from the candidate component,
        following component edges outward. The edge closes a cycle when the
        walk reaches the assembled part, which includes the case where the
        component is the assembly itself.

        The walk uses an explicit stack and a visited set, so each check is
        bounded by the size of the reachable subgraph and terminates even on
        a graph that already contains a cycle.
        """
        if assembled_part_id == component_part_id:
            return True

        visited: set[UUID] = set()
        stack: list[UUID] = [component_part_id]

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)

            for child_id in self._get_direct_component_ids(current):
                if child_id == assembled_part_id:
                    logger.info(
                        f"Edge {assembled_part_id} -> {component_part_id} rejected: "
                        f"{component_part_id} already requires {assembled_part_id}"
                    )
                    return True
                if child_id not in visited:
                    stack.append(child_id)

        return False

    def get_parts_by_ids(self, part_ids: Iterable[UUID]) -> dict[UUID, Part]:
        """Bulk load parts by id; ids that don't resolve are simply absent."""
        lookup_ids = tuple(dict.fromkeys(part_ids))
        if not lookup_ids:
            return {}

        stmt = select(Part).where(Part.id.in_(lookup_ids))
        return {part.id: part for part in self.db.execute(stmt).scalars().all()}

    def get_components(self, assembled_part_id: UUID) -> list[PartComponent]:
        """Direct component edges of one assembly with component parts loaded."""
        return self.get_components_for_parts([assembled_part_id]).get(assembled_part_id, [])

    def get_components_for_parts(
        self,
        assembled_part_ids: Sequence[UUID],
    ) -> dict[UUID, list[PartComponent]]:
        """Direct component edges for many assemblies in one query.

        Edges of each assembly are ordered by component name.
        """
        if not assembled_part_ids:
            return {}

        stmt = (
            select(PartComponent)
            .join(PartComponent.component_part)
            .options(contains_eager(PartComponent.component_part))
            .where(PartComponent.assembled_part_id.in_(tuple(assembled_part_ids)))
            .order_by(PartComponent.assembled_part_id, Part.name)
        )

        grouped: dict[UUID, list[PartComponent]] = defaultdict(list)
        for edge in self.db.execute(stmt).scalars().all():
            grouped[edge.assembled_part_id].append(edge)
        return dict(grouped)

    def _get_direct_component_ids(self, part_id: UUID) -> list[UUID]:
        stmt = select(PartComponent.component_part_id).where(
            PartComponent.assembled_part_id == part_id
        )
        return list(self.db.execute(stmt).scalars().all())
