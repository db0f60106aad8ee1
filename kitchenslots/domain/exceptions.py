"""
Domain-specific exception hierarchy for the availability service.
"""


class AvailabilityError(Exception):
    """Base class for all application-level errors."""


class InvalidInput(AvailabilityError, ValueError):
    """Raised when a caller supplies a malformed date, duration or buffer."""


class UpstreamUnavailable(AvailabilityError):
    """Raised when the reservation store cannot be reached or returns garbage."""
