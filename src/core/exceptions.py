"""Standardized exception hierarchy for the ride matching service."""

from typing import Any


class RideShareError(Exception):
    """Base exception for all ride matching errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransientError(RideShareError):
    """Errors that may succeed on retry."""

    pass


class NetworkError(TransientError):
    """Network-related transient errors (timeout, connection refused)."""

    pass


class ServiceUnavailableError(TransientError):
    """External service temporarily unavailable (5xx responses)."""

    pass


class NoDriversAvailableError(TransientError):
    """No available driver matches the requested preference.

    The service never retries on its own; callers may try again later.
    """

    pass


class PermanentError(RideShareError):
    """Errors that will not succeed on retry."""

    pass


class ValidationError(PermanentError):
    """Invalid input or data format."""

    pass


class NotFoundError(PermanentError):
    """Requested entity does not exist."""

    pass


class StateError(PermanentError):
    """Invalid state for the requested operation."""

    pass


class InvalidStateTransitionError(StateError):
    """Ride status change that the lifecycle does not allow."""

    pass


class InvalidConstructionError(PermanentError):
    """Entity built outside of the component that owns its construction."""

    pass


class ConfigurationError(PermanentError):
    """Missing or invalid configuration."""

    pass
