"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class TrackerError(Exception):
    """Base exception for the project tracker."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(TrackerError):
    """Resource not found."""

    pass


class ValidationError(TrackerError):
    """Validation error."""

    pass


class AuthenticationError(TrackerError):
    """Authentication failed."""

    pass


class AuthorizationError(TrackerError):
    """Authorization failed."""

    pass


class ForbiddenError(AuthorizationError):
    """Forbidden operation (access rule rejected the request)."""

    pass


class InfrastructureError(TrackerError):
    """Document store or network failure."""

    pass


class CascadeDeleteError(InfrastructureError):
    """One or more deletes inside a cascade failed.

    Deletes that already completed are not rolled back; calling the same
    cascade again finishes the cleanup.
    """

    def __init__(self, message: str, failed_ids: list[str], stage: str):
        super().__init__(message, details={"failed_ids": failed_ids, "stage": stage})
        self.failed_ids = failed_ids
        self.stage = stage
