"""
Centralized exception handling utilities for consistent error responses.
"""
from fastapi import HTTPException, status
from typing import List, Optional


# Map HTTP status codes to error code strings
STATUS_CODE_MAP = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
    429: "RATE_LIMITED",
}


class APIException(HTTPException):
    """Base API exception with consistent error formatting."""
    error_code: str = "ERROR"

    def __init__(self, status_code: int, detail: str, headers: Optional[dict] = None, extra: Optional[dict] = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        # Default error_code from status code if subclass didn't set one
        if self.error_code == "ERROR":
            self.error_code = STATUS_CODE_MAP.get(status_code, "ERROR")
        self.extra = extra or {}


class NotFoundError(APIException):
    """Resource not found exception."""
    error_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        if resource_id:
            detail = f"{resource} {resource_id} not found"
        else:
            detail = f"{resource} not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ForbiddenError(APIException):
    """Access forbidden exception."""
    error_code = "FORBIDDEN"

    def __init__(self, message: str = "Access forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=message)


class BadRequestError(APIException):
    """Bad request exception."""
    error_code = "BAD_REQUEST"

    def __init__(self, message: str = "Bad request", extra: Optional[dict] = None):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message, extra=extra)


class UnauthorizedError(APIException):
    """Unauthorized access exception."""
    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication required", extra: Optional[dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=message,
            headers={"WWW-Authenticate": "Bearer"},
            extra=extra,
        )


class ConflictError(APIException):
    """Resource conflict exception."""
    error_code = "CONFLICT"

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=message)


class RateLimitedError(APIException):
    """Too many attempts within the rate-limit window."""
    error_code = "RATE_LIMITED"

    def __init__(self, message: str = "Too many attempts. Please try again later."):
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=message)


# Authentication specific exceptions
class InvalidTokenError(UnauthorizedError):
    """Token could not be verified (bad signature, malformed, wrong type)."""
    error_code = "INVALID_TOKEN"

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class TokenExpiredError(UnauthorizedError):
    """Token was valid but has expired; the client should refresh it."""
    error_code = "TOKEN_EXPIRED"

    def __init__(self, message: str = "Your session has expired. Please refresh your token."):
        super().__init__(message, extra={"requires_refresh": True})


# Business logic specific exceptions
class PermissionDeniedError(ForbiddenError):
    """Permission denied for specific action."""
    error_code = "PERMISSION_DENIED"

    def __init__(self, action: str, resource: str = "resource"):
        message = f"You don't have permission to {action} this {resource}"
        super().__init__(message)


class MediaUploadError(BadRequestError):
    """One or more review images could not be decoded or uploaded."""
    error_code = "MEDIA_UPLOAD_FAILED"

    def __init__(self, reason: str):
        super().__init__("Failed to upload images", extra={"details": reason})


# Non-HTTP errors raised below the service layer
class RepositoryError(Exception):
    """Storage-layer failure. Translated to a 500 response by the app."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class MediaStoreError(Exception):
    """Media host rejected or failed an upload/delete call."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


def validation_details(errors: List[dict]) -> dict:
    """Collapse pydantic error entries into a ``{field: message}`` map."""
    details = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        details.setdefault(field, err.get("msg", "Invalid value"))
    return details
