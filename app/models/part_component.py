"""Part component model representing bill-of-material edges."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Integer,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.extensions import db

if TYPE_CHECKING:  # pragma: no cover - only used for type checking
    from app.models.part import Part


class PartComponent(db.Model):  # type: ignore[name-defined]
    """Directed edge: one unit of the assembled part requires `quantity` of the component."""

    __tablename__ = "part_components"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    assembled_part_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    component_part_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parts.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "quantity >= 1",
            name="ck_part_components_quantity_positive",
        ),
        UniqueConstraint(
            "assembled_part_id",
            "component_part_id",
            name="uq_part_components_assembly_component",
        ),
    )

    assembled_part: Mapped[Part] = relationship(
        "Part",
        foreign_keys=[assembled_part_id],
        back_populates="components",
        lazy="select",
    )
    component_part: Mapped[Part] = relationship(
        "Part",
        foreign_keys=[component_part_id],
        lazy="select",
    )

    def __repr__(self) -> str:
        return (
            "<PartComponent "
            f"assembled_part_id={self.assembled_part_id} "
            f"component_part_id={self.component_part_id} "
            f"quantity={self.quantity}>"
        )
