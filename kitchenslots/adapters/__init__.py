"""
Adapters layer - Reservation store integrations.
"""

from .mock_store import MockReservationStore
from .rest_store import RestReservationStore

__all__ = ["MockReservationStore", "RestReservationStore"]
