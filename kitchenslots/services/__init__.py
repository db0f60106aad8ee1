"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_service import AvailabilityService, ReservationStoreProtocol, build_service

__all__ = ["AvailabilityService", "ReservationStoreProtocol", "build_service"]
