from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from utils.auth_errors import AuthError

logger = logging.getLogger(__name__)

# Machine codes for plain abort() calls, keyed by status
STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "AUTH_FAILED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
}


def error_response(message: str, status: int, code: str | None = None, details: dict | None = None):
    """Uniform failure envelope: {success: false, error, code?, details?}."""
    payload = {"success": False, "error": message}
    if code:
        payload["code"] = code
    if details:
        payload["details"] = details
    return jsonify(payload), status


def _rollback():
    storage = current_app.extensions.get("storage")
    if storage is not None:
        storage.rollback()


def register_error_handlers(app):
    @app.errorhandler(AuthError)
    def handle_auth_error(err: AuthError):
        return error_response(err.message, err.status, code=err.code)

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("Invalid input", 422, code="VALIDATION_ERROR", details=err.messages)

    # Integrity errors (unique constraints, FK violations, check constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        _rollback()
        lower_msg = str(getattr(err, "orig", err)).lower()
        logger.warning("Integrity error: %s", lower_msg)
        if "unique constraint" in lower_msg or "unique violation" in lower_msg:
            return error_response("Resource already exists", 409, code="CONFLICT")
        if "foreign key" in lower_msg:
            return error_response("Referenced resource not found", 400, code="BAD_REQUEST")
        return error_response("Constraint violated", 400, code="BAD_REQUEST")

    # Werkzeug HTTPExceptions (abort()) map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(err.description, status, code=STATUS_CODES.get(status))

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        _rollback()
        logger.exception("Unhandled exception", exc_info=err)
        # In dev, include exception details to speed up debugging
        details = None
        if current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("An unexpected error occurred", 500, code="SERVER_ERROR", details=details)
