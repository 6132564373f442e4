"""
Centralized error handling for the rental API.

Error Hierarchy:
- APIError (4xx): Expected errors with messages safe to expose to clients
- InternalError (5xx): Unexpected errors - never expose internal details

Usage:
    from core.errors import NotFoundError, ValidationError

    # For expected errors (4xx) - raise with safe message
    raise NotFoundError(f"Equipment {equipment_id} not found")

    # Collaborator faults (store unreachable, signing failure) propagate
    # to the global handler and are returned as a generic 500.
"""

import logging
import uuid
from typing import Any, Optional

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


# =============================================================================
# Exception Classes (4xx - Expected Errors)
# =============================================================================

class APIError(Exception):
    """
    Base class for expected API errors (4xx status codes).
    Messages are safe to expose to clients.
    """
    status_code = 400

    def __init__(self, message: str, status_code: int = None, details: Optional[list[dict]] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ValidationError(APIError):
    """Request validation failed (400).

    ``details`` carries field-level problems as ``{"field", "message"}`` dicts.
    """
    status_code = 400


class NotFoundError(APIError):
    """Resource not found (404)."""
    status_code = 404


class AuthenticationError(APIError):
    """Authentication failed (401)."""
    status_code = 401


class InvalidTokenError(AuthenticationError):
    """Token signature, structure, kind, or expiry check failed (401)."""


class PermissionDeniedError(APIError):
    """Permission denied (403)."""
    status_code = 403


class ConflictError(APIError):
    """Resource conflict (409)."""
    status_code = 409


class DuplicateEmailError(ConflictError):
    """Email already registered for this principal kind (409)."""


class RateLimitError(APIError):
    """Rate limit exceeded (429)."""
    status_code = 429


# =============================================================================
# Internal Error (5xx - Never Expose)
# =============================================================================

class InternalError(Exception):
    """
    Unexpected internal errors (5xx status codes).
    Raised when a collaborator fails (e.g. token signing). The message is
    logged and NEVER exposed to clients.
    """
    pass


# =============================================================================
# Response Helpers
# =============================================================================

def _new_error_id() -> str:
    return str(uuid.uuid4())[:8]


def error_payload(e: APIError, error_id: str) -> dict[str, Any]:
    """Serialize an APIError into the wire error body."""
    body: dict[str, Any] = {"error": str(e), "error_id": error_id}
    if e.details:
        body["details"] = e.details
    return body


def register_error_handlers(app):
    """
    Register Flask error handlers for APIError exceptions and HTTP errors.

    Call this in your Flask app factory:
        from core.errors import register_error_handlers
        register_error_handlers(app)
    """

    @app.errorhandler(APIError)
    def handle_api_error(e):
        """Handle all APIError subclasses."""
        error_id = _new_error_id()
        logger.warning(f"API error ({e.status_code}): {e}", extra={'error_id': error_id})
        return jsonify(error_payload(e, error_id)), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        """Render werkzeug HTTP errors (404, 405, 429, ...) as JSON."""
        error_id = _new_error_id()
        if e.code == RateLimitError.status_code:
            body = error_payload(RateLimitError("Rate limit exceeded"), error_id)
            body["message"] = str(e.description)
            body["retry_after"] = e.get_response().headers.get("Retry-After", 60)
            return jsonify(body), RateLimitError.status_code
        return jsonify({"error": e.description or e.name, "error_id": error_id}), e.code

    @app.errorhandler(Exception)
    def handle_internal_error(e):
        """Handle unexpected errors: log full detail, return a generic 500.

        InternalError marks faults already recognised by the code that raised
        them; everything else is logged as unexpected. Neither is echoed.
        """
        error_id = _new_error_id()
        if isinstance(e, InternalError):
            logger.error(f"Internal error: {e}", exc_info=e, extra={'error_id': error_id})
        else:
            logger.exception("Internal server error", extra={'error_id': error_id})
        return jsonify({
            "error": "Internal server error",
            "error_id": error_id
        }), 500
