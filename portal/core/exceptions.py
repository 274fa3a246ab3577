"""
Exception hierarchy for the portal core.
Every remote-store failure is re-raised as one of these typed errors at the
service boundary, carrying a human-readable message.
"""

from http import HTTPStatus
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class EntityNotFoundException(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Entity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, HTTPStatus.NOT_FOUND, details)


class BusinessRuleViolationException(AppError):
    """Business logic violation error."""
    def __init__(self, message: str = "Business rule violation", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, HTTPStatus.UNPROCESSABLE_ENTITY, details)


class UnauthorizedException(AppError):
    """Authentication failure error."""
    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, HTTPStatus.UNAUTHORIZED, details)


class ForbiddenException(AppError):
    """Authorization failure error."""
    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, HTTPStatus.FORBIDDEN, details)


# --- Authentication ---

class InvalidCredentials(UnauthorizedException):
    def __init__(self, message: str = "Invalid email or password", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class AccountInactive(UnauthorizedException):
    def __init__(self, message: str = "This account has been deactivated", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class NotAuthenticated(UnauthorizedException):
    def __init__(self, message: str = "You must be logged in", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class LoginFailed(AppError):
    """The credential store could not be reached; distinct from a credential mismatch."""
    def __init__(self, message: str = "Login failed. Please try again.", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, HTTPStatus.SERVICE_UNAVAILABLE, details)


class TooManyAttempts(ForbiddenException):
    def __init__(self, message: str = "Too many attempts. Try again later.", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class PermissionDenied(ForbiddenException):
    def __init__(self, message: str = "You do not have permission to perform this action", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


# --- Lookup / recovery ---

class NotFound(EntityNotFoundException):
    pass


class NoRecoverySetup(BusinessRuleViolationException):
    def __init__(self, message: str = "This account has no security question set up", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class WrongAnswer(UnauthorizedException):
    def __init__(self, message: str = "Incorrect answer to the security question", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class RecoveryStepError(BusinessRuleViolationException):
    def __init__(self, message: str = "Password recovery step out of order", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ValidationFailed(BusinessRuleViolationException):
    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


# --- Mutations ---

class MutationFailed(AppError):
    """Generic wrapper for any remote write failure."""
    def __init__(self, message: str = "The change could not be saved", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, HTTPStatus.BAD_GATEWAY, details)


class DuplicateEmail(MutationFailed):
    def __init__(self, message: str = "Failed to create account: email already exists", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


def error_payload(exc: Exception) -> Dict[str, Any]:
    """Render any exception as the error structure shown by presentation code."""
    if isinstance(exc, AppError):
        return {
            "error": {
                "code": exc.__class__.__name__,
                "message": exc.message,
                "details": exc.details,
            }
        }

    return {
        "error": {
            "code": "InternalError",
            "message": "An unexpected error occurred. Please try again later.",
        }
    }
