"""Tests for part service functionality."""

import uuid
from unittest.mock import patch

import pytest
from flask import Flask
from sqlalchemy import func, select
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
from app.schemas.part import ComponentSummary
from app.services.container import ServiceContainer


def _count(session: Session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


class TestCreatePart:
    """Test cases for PartService.create_part."""

    def test_create_raw_part(self, app: Flask, session: Session, container: ServiceContainer):
        """Test creating a raw part starts with zero stock."""
        with app.app_context():
            part = container.part_service().create_part("Bolt", PartType.RAW, "M4 bolt")
            session.commit()

            assert isinstance(part, Part)
            assert part.id is not None
            assert part.name == "Bolt"
            assert part.type == PartType.RAW
            assert part.quantity_in_stock == 0
            assert part.description == "M4 bolt"
            assert part.created_at is not None

    def test_create_strips_name(self, app: Flask, session: Session, container: ServiceContainer):
        with app.app_context():
            part = container.part_service().create_part("  Bolt  ", PartType.RAW)

            assert part.name == "Bolt"

    def test_blank_description_stored_as_null(self, app: Flask, session: Session, container: ServiceContainer):
        with app.app_context():
            part = container.part_service().create_part("Bolt", PartType.RAW, "   ")
            session.commit()

            session.refresh(part)
            assert part.description is None

    def test_create_assembled_part_writes_one_edge_per_entry(
        self, app: Flask, session: Session, container: ServiceContainer, make_raw_part
    ):
        """Each component entry becomes one edge with the submitted quantity."""
        with app.app_context():
            bolt = make_raw_part("Bolt")
            nut = make_raw_part("Nut")

            widget = container.part_service().create_part(
                "Widget",
                PartType.ASSEMBLED,
                components=[(bolt.id, 2), (nut.id, 1)],
            )
            session.commit()

            edges = session.execute(
                select(PartComponent).where(PartComponent.assembled_part_id == widget.id)
            ).scalars().all()
            by_component = {edge.component_part_id: edge.quantity for edge in edges}

            assert widget.type == PartType.ASSEMBLED
            assert widget.quantity_in_stock == 0
            assert by_component == {bolt.id: 2, nut.id: 1}

    def test_create_assembly_of_assemblies(
        self, app: Flask, session: Session, container: ServiceContainer, make_raw_part, make_assembly
    ):
        """Assemblies may use other assemblies as components."""
        with app.app_context():
            bolt = make_raw_part("Bolt")
            widget = make_assembly("Widget", [(bolt, 2)])

            gadget = container.part_service().create_part(
                "Gadget", PartType.ASSEMBLED, components=[(widget.id, 3)]
            )
            session.commit()

            result = container.part_service().get_part_with_components(gadget.id)
            assert result.components == [ComponentSummary(id=widget.id, name="Widget", quantity=3)]

    def test_duplicate_name_rejected(self, app: Flask, session: Session, container: ServiceContainer, make_raw_part):
        """A second part with the same name fails and nothing new is stored."""
        with app.app_context():
            make_raw_part("Bolt")

            with pytest.raises(DuplicatePartNameException, match='Part with name "Bolt" already exists'):
                container.part_service().create_part("Bolt", PartType.RAW)

            assert _count(session, Part) == 1

    def test_duplicate_name_race_maps_integrity_error(
        self, app: Flask, session: Session, container: ServiceContainer, make_raw_part
    ):
        """When the name check misses a concurrent insert, the unique constraint still rejects it."""
        with app.app_context():
            make_raw_part("Bolt")
            part_service = container.part_service()

            with patch.object(part_service, "_find_part_by_name", return_value=None):
                with pytest.raises(DuplicatePartNameException):
                    part_service.create_part("Bolt", PartType.RAW)

            # Session remains usable after the savepoint rollback
            part_service.create_part("Nut", PartType.RAW)
            session.commit()
            assert _count(session, Part) == 2

    def test_missing_components_rejected(
        self, app: Flask, session: Session, container: ServiceContainer, make_raw_part
    ):
        """Unknown component ids are reported and the assembly is not stored."""
        with app.app_context():
            bolt = make_raw_part("Bolt")
            missing_a = uuid.uuid4()
            missing_b = uuid.uuid4()

            with pytest.raises(ComponentPartsNotFoundException) as exc_info:
                container.part_service().create_part(
                    "Widget",
                    PartType.ASSEMBLED,
                    components=[(missing_a, 1), (bolt.id, 2), (missing_b, 1)],
                )

            assert exc_info.value.missing_ids == [missing_a, missing_b]
            assert str(missing_a) in exc_info.value.message
            assert exc_info.value.error_code == "COMPONENT_PARTS_NOT_FOUND"

            session.commit()
            assert _count(session, Part) == 1
            assert _count(session, PartComponent) == 0

    def test_cycle_rejection_persists_nothing(
        self, app: Flask, session: Session, container: ServiceContainer, make_raw_part
    ):
        """A cycle detected on any edge discards the new part and every edge."""
        with app.app_context():
            bolt = make_raw_part("Bolt")
            nut = make_raw_part("Nut")
            part_service = container.part_service()

            with patch.object(part_service.bom_service, "would_create_cycle", side_effect=[False, True]):
                with pytest.raises(CircularDependencyException, match="Circular dependency"):
                    part_service.create_part(
                        "Widget",
                        PartType.ASSEMBLED,
                        components=[(bolt.id, 2), (nut.id, 1)],
                    )

            session.commit()
            assert session.execute(select(Part).where(Part.name == "Widget")).scalar_one_or_none() is None
            assert _count(session, PartComponent) == 0

    def test_raw_part_with_components_rejected(
        self, app: Flask, session: Session, container: ServiceContainer, make_raw_part
    ):
        with app.app_context():
            bolt = make_raw_part("Bolt")

            with pytest.raises(InvalidOperationException, match="raw parts cannot have components"):
                container.part_service().create_part("Nut", PartType.RAW, components=[(bolt.id, 1)])

    def test_assembled_part_without_components_rejected(
        self, app: Flask, session: Session, container: ServiceContainer
    ):
        with app.app_context():
            with pytest.raises(InvalidOperationException, match="at least one component"):
                container.part_service().create_part("Widget", PartType.ASSEMBLED, components=[])

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_component_quantity_rejected(
        self, app: Flask, session: Session, container: ServiceContainer, make_raw_part, quantity: int
    ):
        with app.app_context():
            bolt = make_raw_part("Bolt")

            with pytest.raises(InvalidOperationException, match="at least 1"):
                container.part_service().create_part(
                    "Widget", PartType.ASSEMBLED, components=[(bolt.id, quantity)]
                )

    def test_repeated_component_rejected(
        self, app: Flask, session: Session, container: ServiceContainer, make_raw_part
    ):
        with app.app_context():
            bolt = make_raw_part("Bolt")

            with pytest.raises(InvalidOperationException, match="more than once"):
                container.part_service().create_part(
                    "Widget", PartType.ASSEMBLED, components=[(bolt.id, 1), (bolt.id, 2)]
                )

    @pytest.mark.parametrize("name", ["", "B", "x" * 101])
    def test_name_length_enforced(self, app: Flask, session: Session, container: ServiceContainer, name: str):
        with app.app_context():
            with pytest.raises(InvalidOperationException, match="between 2 and 100"):
                container.part_service().create_part(name, PartType.RAW)

    def test_description_length_enforced(self, app: Flask, session: Session, container: ServiceContainer):
        with app.app_context():
            with pytest.raises(InvalidOperationException, match="500"):
                container.part_service().create_part("Bolt", PartType.RAW, "d" * 501)


class TestReadParts:
    """Test cases for reading parts with their components."""

    def test_get_part_with_components_raw(
        self, app: Flask, session: Session, container: ServiceContainer, make_raw_part
    ):
        """Raw parts carry no component list."""
        with app.app_context():
            bolt = make_raw_part("Bolt", 100)

            result = container.part_service().get_part_with_components(bolt.id)

            assert result.part.id == bolt.id
            assert result.part.quantity_in_stock == 100
            assert result.components is None

    def test_get_part_with_components_assembled(
        self, app: Flask, session: Session, container: ServiceContainer, make_raw_part, make_assembly
    ):
        """Assembled parts list direct components flattened to id, name and quantity."""
        with app.app_context():
            bolt = make_raw_part("Bolt")
            nut = make_raw_part("Nut")
            widget = make_assembly("Widget", [(nut, 1), (bolt, 2)])

            result = container.part_service().get_part_with_components(widget.id)

            assert result.components == [
                ComponentSummary(id=bolt.id, name="Bolt", quantity=2),
                ComponentSummary(id=nut.id, name="Nut", quantity=1),
            ]

    def test_get_part_not_found(self, app: Flask, session: Session, container: ServiceContainer):
        with app.app_context():
            part_id = uuid.uuid4()

            with pytest.raises(RecordNotFoundException, match=f"Part {part_id} was not found"):
                container.part_service().get_part_with_components(part_id)

    def test_list_parts_ordered_by_name(
        self, app: Flask, session: Session, container: ServiceContainer, make_raw_part, make_assembly
    ):
        """Listing returns every part by name, with components only for assemblies."""
        with app.app_context():
            nut = make_raw_part("Nut")
            bolt = make_raw_part("Bolt")
            make_assembly("Widget", [(bolt, 2), (nut, 1)])
            make_assembly("Gadget", [(bolt, 4)])

            parts = container.part_service().list_parts()

            assert [p.part.name for p in parts] == ["Bolt", "Gadget", "Nut", "Widget"]
            by_name = {p.part.name: p for p in parts}
            assert by_name["Bolt"].components is None
            assert by_name["Gadget"].components == [ComponentSummary(id=bolt.id, name="Bolt", quantity=4)]
            assert [c.name for c in by_name["Widget"].components] == ["Bolt", "Nut"]

    def test_list_parts_empty(self, app: Flask, session: Session, container: ServiceContainer):
        with app.app_context():
            assert container.part_service().list_parts() == []
