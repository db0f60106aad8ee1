"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityCalculator, compute_availability
from .exceptions import AvailabilityError, InvalidInput, UpstreamUnavailable
from .models import AvailabilityResult, Reservation, TimeSlotDefinition

__all__ = [
    "AvailabilityCalculator",
    "AvailabilityError",
    "AvailabilityResult",
    "InvalidInput",
    "Reservation",
    "TimeSlotDefinition",
    "UpstreamUnavailable",
    "compute_availability",
]
