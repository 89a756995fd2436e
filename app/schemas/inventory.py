"""Inventory schemas for request/response validation."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from app.schemas.part import MAX_QUANTITY


class AdjustmentStatus(str, Enum):
    """Outcome of a stock adjustment."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class QuantityAdjustmentSchema(BaseModel):
    """Schema for adjusting the stock of a part."""

    quantity: int = Field(
        ...,
        ge=-MAX_QUANTITY,
        le=MAX_QUANTITY,
        description="Signed change: positive adds or builds units, negative consumes them, zero is a no-op",
        json_schema_extra={"example": 10}
    )

    @field_validator("quantity", mode="before")
    @classmethod
    def _reject_boolean_quantity(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("Quantity must be a number")
        return value


class AdjustmentResultSchema(BaseModel):
    """Schema for the outcome of a stock adjustment."""

    status: AdjustmentStatus = Field(
        description="SUCCESS when stock was changed, FAILED when nothing was changed",
        json_schema_extra={"example": AdjustmentStatus.SUCCESS.value}
    )
    message: str = Field(
        description="Human readable outcome",
        json_schema_extra={"example": "Updated quantity for Widget"}
    )


@dataclass
class InventoryAdjustmentResult:
    """Service layer result of InventoryService.adjust_quantity."""
    status: AdjustmentStatus
    message: str

    @property
    def succeeded(self) -> bool:
        return self.status == AdjustmentStatus.SUCCESS

    @classmethod
    def success(cls, message: str) -> "InventoryAdjustmentResult":
        return cls(status=AdjustmentStatus.SUCCESS, message=message)

    @classmethod
    def failed(cls, message: str) -> "InventoryAdjustmentResult":
        return cls(status=AdjustmentStatus.FAILED, message=message)
