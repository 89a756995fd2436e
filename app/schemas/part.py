"""Part schemas for request/response validation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.part import PartType

# Quantities are stored in 32-bit integer columns
MAX_QUANTITY = 2**31 - 1

if TYPE_CHECKING:
    from app.models.part import Part


class ComponentEntrySchema(BaseModel):
    """One component line of an assembled part creation request."""

    id: UUID = Field(
        ...,
        description="ID of the component part",
        json_schema_extra={"example": "3f2b8c1e-5d4a-4b7e-9c61-2a8f0e7d4c13"}
    )
    quantity: int = Field(
        ...,
        ge=1,
        le=MAX_QUANTITY,
        description="Units of the component consumed per unit of the assembly",
        json_schema_extra={"example": 2}
    )

    @field_validator("quantity", mode="before")
    @classmethod
    def _reject_boolean_quantity(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("Quantity must be a number")
        return value


class PartCreateSchema(BaseModel):
    """Schema for creating a new part."""

    name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="Unique part name",
        json_schema_extra={"example": "Widget"}
    )
    type: PartType = Field(
        ...,
        description="Part type: RAW parts are stocked directly, ASSEMBLED parts are built from components",
        json_schema_extra={"example": PartType.ASSEMBLED.value}
    )
    description: str | None = Field(
        None,
        max_length=500,
        description="Optional free text description",
        json_schema_extra={"example": "Bracket assembly for the front panel"}
    )
    parts: list[ComponentEntrySchema] | None = Field(
        None,
        description="Component parts; required for ASSEMBLED parts, forbidden for RAW parts",
    )

    @field_validator("name", mode="before")
    @classmethod
    def _strip_whitespace(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _normalize_description(cls, value: object) -> object:
        """Blank descriptions are stored as NULL."""
        if isinstance(value, str):
            return value.strip() or None
        return value

    @model_validator(mode="after")
    def _validate_components_for_type(self) -> PartCreateSchema:
        """Assembled parts need components; raw parts cannot have any."""
        if self.type == PartType.ASSEMBLED:
            if not self.parts:
                raise ValueError("Assembled part must have at least one component")
        elif self.parts:
            raise ValueError("Raw parts cannot have components")
        return self


class PartResponseSchema(BaseModel):
    """Schema for a persisted part without its components."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(
        description="Unique identifier for the part",
        json_schema_extra={"example": "3f2b8c1e-5d4a-4b7e-9c61-2a8f0e7d4c13"}
    )
    name: str = Field(
        description="Unique part name",
        json_schema_extra={"example": "Bolt"}
    )
    type: PartType = Field(
        description="Part type",
        json_schema_extra={"example": PartType.RAW.value}
    )
    quantity_in_stock: int = Field(
        description="Units currently on hand",
        json_schema_extra={"example": 100}
    )
    description: str | None = Field(
        default=None,
        description="Optional free text description",
        json_schema_extra={"example": "M4 x 20mm stainless bolt"}
    )
    created_at: datetime = Field(
        description="Timestamp when the part was created",
        json_schema_extra={"example": "2024-01-15T10:30:00Z"}
    )
    updated_at: datetime = Field(
        description="Timestamp when the part was last modified",
        json_schema_extra={"example": "2024-01-15T14:45:00Z"}
    )


class PartComponentSummarySchema(BaseModel):
    """Flattened direct component of an assembled part."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(
        description="ID of the component part",
        json_schema_extra={"example": "3f2b8c1e-5d4a-4b7e-9c61-2a8f0e7d4c13"}
    )
    name: str = Field(
        description="Name of the component part",
        json_schema_extra={"example": "Bolt"}
    )
    quantity: int = Field(
        description="Units required per unit of the assembly",
        json_schema_extra={"example": 2}
    )


class PartWithComponentsSchema(PartResponseSchema):
    """Schema for a part including its direct components when assembled."""

    parts: list[PartComponentSummarySchema] | None = Field(
        default=None,
        description="Direct components; omitted for raw parts",
    )

    @classmethod
    def from_model(cls, part_with_components: PartWithComponentsModel) -> PartWithComponentsSchema:
        part = part_with_components.part
        components = part_with_components.components
        return cls(
            id=part.id,
            name=part.name,
            type=part.type,
            quantity_in_stock=part.quantity_in_stock,
            description=part.description,
            created_at=part.created_at,
            updated_at=part.updated_at,
            parts=(
                [PartComponentSummarySchema.model_validate(c) for c in components]
                if components is not None
                else None
            ),
        )


@dataclass
class ComponentSummary:
    """Service layer view of one direct component edge."""
    id: UUID
    name: str
    quantity: int


@dataclass
class PartWithComponentsModel:
    """Service layer model combining Part ORM model with its flattened components."""
    part: Part  # Forward reference to avoid circular imports
    components: list[ComponentSummary] | None = None
