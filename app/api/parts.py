"""Parts management API endpoints."""

from typing import Any
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, request
from spectree import Response as SpectreeResponse

from app.schemas.common import ErrorResponseSchema
from app.schemas.inventory import AdjustmentResultSchema, QuantityAdjustmentSchema
from app.schemas.part import (
    PartCreateSchema,
    PartResponseSchema,
    PartWithComponentsModel,
    PartWithComponentsSchema,
)
from app.services.container import ServiceContainer
from app.services.inventory_service import InventoryService
from app.services.part_service import PartService
from app.utils.error_handling import handle_api_errors
from app.utils.spectree_config import api

parts_bp = Blueprint("parts", __name__, url_prefix="/parts")


class PartIdError(Exception):
    """Exception raised for part ids that are not valid UUIDs."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def _parse_part_id(part_id: str) -> UUID:
    """Parse a path segment into a part UUID.

    Raises:
        PartIdError: If the value is not a UUID
    """
    try:
        return UUID(part_id)
    except ValueError as exc:
        raise PartIdError(f"'{part_id}' is not a valid part id") from exc


def _invalid_part_id_response(error: PartIdError) -> tuple[dict[str, Any], int]:
    return {
        "error": error.message,
        "details": {"message": "Part ids must be UUIDs"},
    }, 400


def _serialize(part_with_components: PartWithComponentsModel) -> dict[str, Any]:
    """Dump a part for JSON, leaving out the components key for raw parts."""
    schema = PartWithComponentsSchema.from_model(part_with_components)
    exclude = {"parts"} if schema.parts is None else None
    return schema.model_dump(mode="json", exclude=exclude)


@parts_bp.route("", methods=["POST"])
@api.validate(
    json=PartCreateSchema,
    resp=SpectreeResponse(
        HTTP_201=PartResponseSchema,
        HTTP_400=ErrorResponseSchema,
        HTTP_404=ErrorResponseSchema,
        HTTP_409=ErrorResponseSchema,
    ),
)
@handle_api_errors
@inject
def create_part(part_service: PartService = Provide[ServiceContainer.part_service]) -> Any:
    """Create a raw part, or an assembled part together with its components."""
    data = PartCreateSchema.model_validate(request.get_json())
    components = [(entry.id, entry.quantity) for entry in data.parts or []]

    part = part_service.create_part(
        name=data.name,
        part_type=data.type,
        description=data.description,
        components=components,
    )

    return PartResponseSchema.model_validate(part).model_dump(mode="json"), 201


@parts_bp.route("/<string:part_id>", methods=["POST"])
@api.validate(
    json=QuantityAdjustmentSchema,
    resp=SpectreeResponse(HTTP_200=AdjustmentResultSchema, HTTP_400=ErrorResponseSchema),
)
@handle_api_errors
@inject
def adjust_part_quantity(
    part_id: str,
    inventory_service: InventoryService = Provide[ServiceContainer.inventory_service],
) -> Any:
    """Adjust the stock of a part by a signed quantity.

    Positive quantities on assembled parts build units and consume their
    components. Rejected adjustments are reported with status FAILED.
    """
    try:
        parsed_id = _parse_part_id(part_id)
    except PartIdError as e:
        return _invalid_part_id_response(e)

    data = QuantityAdjustmentSchema.model_validate(request.get_json())
    result = inventory_service.adjust_quantity(parsed_id, data.quantity)

    return AdjustmentResultSchema(status=result.status, message=result.message).model_dump(mode="json")


@parts_bp.route("/<string:part_id>", methods=["GET"])
@api.validate(
    resp=SpectreeResponse(
        HTTP_200=PartWithComponentsSchema,
        HTTP_400=ErrorResponseSchema,
        HTTP_404=ErrorResponseSchema,
    )
)
@handle_api_errors
@inject
def get_part(
    part_id: str,
    part_service: PartService = Provide[ServiceContainer.part_service],
) -> Any:
    """Get a single part with its direct components."""
    try:
        parsed_id = _parse_part_id(part_id)
    except PartIdError as e:
        return _invalid_part_id_response(e)

    return _serialize(part_service.get_part_with_components(parsed_id))


@parts_bp.route("", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=list[PartWithComponentsSchema]))
@handle_api_errors
@inject
def list_parts(part_service: PartService = Provide[ServiceContainer.part_service]) -> Any:
    """List all parts ordered by name."""
    return [_serialize(part) for part in part_service.list_parts()]
