"""
Error taxonomy shared by services and endpoints.

Every error is an HTTPException carrying a machine readable ``code`` so the
handlers in app.main can render the uniform ``{"error": ..., "code": ...}``
body. Services raise these directly; endpoints let them propagate.
"""

from typing import Dict, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"
    message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            status_code=self.status_code,
            detail=message or self.message,
            headers=headers,
        )
        if code:
            self.code = code


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    message = "Invalid request"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "NO_AUTH"
    message = "Authentication required."

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, code, headers={"WWW-Authenticate": "Bearer"})


class MissingToken(Unauthorized):
    code = "NO_TOKEN"
    message = "Access denied. No token provided."


class TokenExpired(Unauthorized):
    code = "TOKEN_EXPIRED"
    message = "Token has expired. Please log in again."


class InvalidToken(Unauthorized):
    code = "INVALID_TOKEN"
    message = "Invalid token."


class InvalidCredentials(Unauthorized):
    code = "INVALID_CREDENTIALS"
    message = "Invalid email or password"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "INSUFFICIENT_PRIVILEGES"
    message = "Admin access required."


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    message = "Resource already exists"


class IncompleteRoadmap(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INCOMPLETE_ROADMAP"
    message = "Roadmap must be completed first"


class Internal(AppError):
    pass
