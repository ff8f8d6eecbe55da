"""Custom exception hierarchy for the takeoff engine."""

from typing import Dict, Optional


class TakeoffError(Exception):
    """Base exception for all takeoff-specific errors."""

    http_status = 500

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(TakeoffError):
    """Raised when geometry, units or cost entries violate the caller contract."""

    http_status = 400


class PreconditionError(TakeoffError):
    """Raised when a business rule blocks the operation (e.g. uncalibrated map)."""

    http_status = 412


class ConfigurationError(TakeoffError):
    """Raised when settings are invalid or unreadable."""
    pass


class NotFoundError(TakeoffError):
    """Raised by collaborators when a map, project or record does not exist."""

    http_status = 404


class ForbiddenError(TakeoffError):
    """Raised by collaborators when the caller does not own the resource."""

    http_status = 403
