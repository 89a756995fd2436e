"""Centralized error handling utilities."""

import functools
import logging
from collections.abc import Callable
from typing import Any

from flask import current_app, jsonify
from flask.wrappers import Response
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import BadRequest

from app.exceptions import (
    BusinessLogicException,
    CircularDependencyException,
    ComponentPartsNotFoundException,
    InvalidOperationException,
    RecordNotFoundException,
    ResourceConflictException,
)
from app.utils import get_current_correlation_id

logger = logging.getLogger(__name__)

ApiResult = Response | tuple[Response | str, int]

# Checked in order; subclasses must precede their bases.
DOMAIN_ERROR_STATUS: list[tuple[type[BusinessLogicException], int, str]] = [
    (ComponentPartsNotFoundException, 404, "Every component must reference an existing part"),
    (RecordNotFoundException, 404, "The requested resource could not be found"),
    (ResourceConflictException, 409, "A resource with those details already exists"),
    (CircularDependencyException, 400, "A component already depends on this part"),
    (InvalidOperationException, 409, "The requested operation cannot be performed"),
    (BusinessLogicException, 400, "An inventory operation failed"),
]


def _mark_request_failed() -> None:
    """Flag the request-scoped session so teardown rolls back instead of committing."""
    try:
        current_app.container.db_session().info['needs_rollback'] = True
    except (RuntimeError, AttributeError):
        # Outside an application context or before the container is attached
        pass


def _domain_error_response(error: BusinessLogicException) -> tuple[Response, int]:
    status, hint = next(
        (status, hint) for exc_type, status, hint in DOMAIN_ERROR_STATUS
        if isinstance(error, exc_type)
    )

    details: dict[str, Any] = {"message": hint}
    if isinstance(error, ComponentPartsNotFoundException):
        details["missing_ids"] = [str(part_id) for part_id in error.missing_ids]

    return jsonify({
        "error": error.message,
        "details": details,
        "code": error.error_code,
    }), status


def _integrity_error_response(error: IntegrityError) -> tuple[Response, int]:
    error_msg = str(error.orig) if error.orig is not None else str(error)
    lowered = error_msg.lower()

    if "unique constraint failed" in lowered or "duplicate key" in lowered:
        return jsonify({
            "error": "Resource already exists",
            "details": {"message": "A record with these values already exists"}
        }), 409
    if "foreign key" in lowered:
        return jsonify({
            "error": "Invalid reference",
            "details": {"message": "Referenced resource does not exist"}
        }), 400
    if "check constraint" in lowered or "violates check" in lowered:
        return jsonify({
            "error": "Invalid quantity",
            "details": {"message": "Quantities cannot go below their allowed minimum"}
        }), 400
    return jsonify({
        "error": "Database constraint violation",
        "details": {"message": "The operation violates a database constraint"}
    }), 400


def handle_api_errors(func: Callable[..., Any]) -> Callable[..., ApiResult]:
    """Decorator to turn raised errors into JSON error responses.

    Domain exceptions map to the status in DOMAIN_ERROR_STATUS. Any handled
    error marks the session for rollback, so a view never commits the writes
    of a failed request.
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except BadRequest:
            _mark_request_failed()
            return jsonify({
                "error": "Invalid JSON",
                "details": {"message": "Request body must be valid JSON"}
            }), 400
        except ValidationError as e:
            _mark_request_failed()
            return jsonify({
                "error": "Validation failed",
                "details": [
                    {"message": err["msg"], "field": ".".join(str(x) for x in err["loc"])}
                    for err in e.errors()
                ]
            }), 400
        except BusinessLogicException as e:
            _mark_request_failed()
            return _domain_error_response(e)
        except IntegrityError as e:
            _mark_request_failed()
            return _integrity_error_response(e)
        except Exception as e:
            _mark_request_failed()
            logger.exception(
                f"Unhandled error in {func.__name__} (request {get_current_correlation_id()})"
            )

            expose = current_app.container.config().expose_error_details
            return jsonify({
                "error": "Internal server error",
                "details": {"message": str(e) if expose else "An unexpected error occurred"}
            }), 500

    return wrapper
