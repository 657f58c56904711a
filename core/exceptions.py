"""
Domain errors raised by the service layer.

Each error carries the HTTP status and machine-readable code it maps to, so
routes never inspect message text to pick a status.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for errors that surface to API clients."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "BAD_REQUEST"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class AuthenticationError(ServiceError):
    """Missing or invalid credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"


class PermissionDenied(ServiceError):
    """Caller lacks the role or ownership the operation requires."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ConflictError(ServiceError):
    """Duplicate membership/invitation or an already-resolved invitation."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class GoneError(ServiceError):
    """The invitation existed but has expired."""

    status_code = status.HTTP_410_GONE
    code = "GONE"


class EmailDeliveryError(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "EMAIL_DELIVERY_FAILED"
