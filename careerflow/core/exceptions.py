"""
Application error taxonomy.

Services raise these; main.py renders every AppError as
{"message": ..., "errors": [...]} with the matching HTTP status.
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationFailed(AppError):
    """Malformed or out-of-range input. Always client-recoverable."""
    status_code = 400
    default_message = "Invalid request payload"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls(message, errors=[{"field": field, "message": message}])


class AuthenticationFailed(AppError):
    status_code = 401
    default_message = "Unauthorized"


class PermissionDenied(AppError):
    status_code = 403
    default_message = "You are not allowed to perform this action"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Resource already exists"


class StateConflict(Conflict):
    """Operation is invalid for the entity's current state."""

    def __init__(self, message: str, current_state: str):
        super().__init__(message)
        self.current_state = current_state

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["current_status"] = self.current_state
        return body


class ServiceUnavailable(AppError):
    """
    Upstream dependency failed (store or AI model).
    The original detail is kept for logging and never sent to the client.
    """
    status_code = 503
    default_message = "Service is temporarily unavailable. Please try again."

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


class PayloadTooLarge(ValidationFailed):
    status_code = 413
    default_message = "Uploaded document is too large"
