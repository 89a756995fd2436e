"""Flask application error handlers for errors raised outside decorated views."""

import logging

from flask import Flask, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Render routing errors, aborts and stray validation errors as JSON."""

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        return jsonify({
            "error": "Validation failed",
            "details": [
                f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}"
                for err in error.errors()
            ]
        }), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        """Unknown routes (404), wrong methods (405) and other werkzeug aborts."""
        return jsonify({
            "error": error.name,
            "details": error.description,
        }), error.code or 500

    @app.errorhandler(500)
    def handle_internal_server_error(error):
        logger.error(f"Unhandled server error: {error}")
        return jsonify({
            "error": "Internal server error",
            "details": "An unexpected error occurred"
        }), 500
