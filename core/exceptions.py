"""
API error types.

Each error maps to one HTTP status and a stable ``error_code`` that the
exception handler in ``main.py`` puts next to ``detail`` in the response body.
"""
from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class APIException(HTTPException):
    """Base API exception. Subclasses set ``status_code`` and ``error_code``."""

    default_status: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "BAD_REQUEST"
    default_detail: str = "Bad request"

    def __init__(
        self,
        detail: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status_code or self.default_status,
            detail=detail or self.default_detail,
            headers=headers,
        )
        self.error_code = error_code or self.default_code


class NotFoundError(APIException):
    """A user, exercise or history entry does not exist (or the id is malformed)."""

    default_status = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = str(identifier)
        super().__init__(f"{resource} with ID {self.identifier} not found")


class UnauthorizedError(APIException):
    """No bearer token, a token that fails verification, or bad credentials."""

    default_status = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"
    default_detail = "Authentication required"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(APIException):
    """Authenticated, but not the owner of the resource."""

    default_status = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"
    default_detail = "Access denied"


class ConflictError(APIException):
    """Username or email already in use."""

    default_status = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"
    default_detail = "Resource already exists"
