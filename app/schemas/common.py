"""
Common response schemas for consistent API structure.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponseSchema(BaseModel):
    """Standard error response format."""
    model_config = ConfigDict(from_attributes=True)

    error: str = Field(..., description="Error message", json_schema_extra={"example": "Validation failed"})
    details: list[Any] | dict[str, Any] | str | None = Field(None, description="Additional error details", json_schema_extra={"example": {"message": "The requested resource could not be found"}})
    code: str | None = Field(None, description="Machine readable error code", json_schema_extra={"example": "DUPLICATE_PART_NAME"})


class HealthResponse(BaseModel):
    """Health probe response."""

    status: str = Field(..., description="Probe status", json_schema_extra={"example": "ready"})
    ready: bool = Field(..., description="Whether the service can take traffic", json_schema_extra={"example": True})
