# ============================================================================
# FILE: album_finder/core/exceptions.py
# Application error taxonomy, mapped to HTTP responses in album_finder/main.py
# ============================================================================
from typing import Optional
from fastapi import status


class AppError(Exception):
    """Base class for errors that carry their own HTTP status and message"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"


class ConflictError(AppError):
    # Uniqueness violations are reported as plain bad requests
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ServiceUnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service unavailable"


class ExternalServiceError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream request failed"
