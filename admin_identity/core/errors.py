# admin_identity/core/errors.py
"""
Typed failures for the admin identity core.

Every error carries the HTTP status the API layer answers with, so routes
can raise them directly and a single exception handler renders them.
"""

from typing import Any, Dict, Optional


class AdminIdentityError(Exception):
    """Base class for all admin identity failures"""

    status_code: int = 500
    default_message: str = "Admin identity error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


class ValidationError(AdminIdentityError):
    """Malformed or missing input, rejected before any write"""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_response(self) -> Dict[str, Any]:
        body = super().to_response()
        if self.errors:
            body["errors"] = self.errors
        return body


class AuthenticationError(AdminIdentityError):
    status_code = 401
    default_message = "Invalid credentials"


class AuthorizationError(AdminIdentityError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(AdminIdentityError):
    status_code = 404
    default_message = "Admin not found"


class ConflictError(AdminIdentityError):
    status_code = 409
    default_message = "Resource already exists"


class TokenInvalidError(AdminIdentityError):
    """Reset token missing, mismatched or expired. Never says which."""

    status_code = 400
    default_message = "Invalid or expired reset token"


class PersistenceError(AdminIdentityError):
    status_code = 503
    default_message = "Admin store unavailable"


class MailDeliveryError(AdminIdentityError):
    """Mail could not be sent. The caller may retry the send step."""

    status_code = 503
    default_message = "Unable to send email. Please try again later."
    retryable = True

    def to_response(self) -> Dict[str, Any]:
        body = super().to_response()
        body["retryable"] = self.retryable
        return body
