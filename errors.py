"""
Error taxonomy for the Hobit API.

Every error carries the HTTP status it is reported with. The app-level
handler in main.py turns them into `{"success": false, "response": ...}`.
"""
from typing import Optional


class ApiError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    """Bad input shape or length."""


class ConflictError(ApiError):
    """Username already taken."""


class AuthError(ApiError):
    """Bad credentials or missing/unknown access token."""

    status_code = 401


class NotFoundError(ApiError):
    pass


class StoreError(ApiError):
    """The document store failed to answer."""
