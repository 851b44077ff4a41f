"""Central error types used across the application."""

from __future__ import annotations


class JourneyEngineError(RuntimeError):
    """Base error for the journey engine."""


class EmptyPingSetError(JourneyEngineError):
    """Raised when meetings must be matched but no pings are available."""


# Short name used by callers that match on the condition itself.
EmptyPingSet = EmptyPingSetError


class InvalidCoordinateError(JourneyEngineError, ValueError):
    """Raised when a latitude/longitude is missing, non-finite or out of range."""


class DataUnavailableError(JourneyEngineError):
    """Raised when source data cannot be fetched and no cached snapshot exists."""


class BackendAPIError(JourneyEngineError):
    """Base error for admin backend failures."""


class BackendPermissionError(BackendAPIError):
    """Raised when the backend rejects the token (401/403)."""


class BackendNotFoundError(BackendAPIError):
    """Raised when an agent or collection does not exist."""


__all__ = [
    "JourneyEngineError",
    "EmptyPingSetError",
    "EmptyPingSet",
    "InvalidCoordinateError",
    "DataUnavailableError",
    "BackendAPIError",
    "BackendPermissionError",
    "BackendNotFoundError",
]
