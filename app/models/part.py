"""Part model for Assembly Inventory."""

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Integer, String, Uuid, func
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.extensions import db

if TYPE_CHECKING:
    from app.models.part_component import PartComponent


class PartType(str, Enum):
    """Whether a part is stocked as-is or built from other parts."""

    RAW = "RAW"
    ASSEMBLED = "ASSEMBLED"


class Part(db.Model):  # type: ignore[name-defined]
    """Model representing a raw or assembled part with its on-hand stock."""

    __tablename__ = "parts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    type: Mapped[PartType] = mapped_column(
        SQLEnum(
            PartType,
            name="part_type",
            values_callable=lambda enum_cls: [item.value for item in enum_cls],
            native_enum=False,
        ),
        nullable=False,
    )
    quantity_in_stock: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "quantity_in_stock >= 0",
            name="ck_parts_quantity_in_stock_non_negative",
        ),
    )

    # Outgoing BOM edges; use explicit selectinload() where needed.
    components: Mapped[list["PartComponent"]] = relationship(
        "PartComponent",
        foreign_keys="PartComponent.assembled_part_id",
        back_populates="assembled_part",
        cascade="all, delete-orphan",
        lazy="select",
    )

    @property
    def is_assembled(self) -> bool:
        return self.type == PartType.ASSEMBLED

    def __repr__(self) -> str:
        return f"<Part {self.id}: {self.name} ({self.type.value}) qty={self.quantity_in_stock}>"
