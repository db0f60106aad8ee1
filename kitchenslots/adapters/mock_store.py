"""
Mock reservation store for running without database credentials.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..domain.models import Reservation
from .rows import reservation_from_row

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_bookings.json"


class MockReservationStore:
    """
    Store that serves bookings from a JSON file.

    Each entry carries event_date, event_time, duration_minutes and status,
    mirroring the columns of the real bookings table.
    """

    def __init__(
        self,
        data_file: Optional[Path] = None,
        bookings: Optional[List[Dict[str, Any]]] = None
    ):
        """
        Initialize the mock store.

        Args:
            data_file: JSON file to load bookings from
            bookings: In-memory bookings, used instead of the file when given
        """
        if bookings is not None:
            self.bookings = list(bookings)
        else:
            self.bookings = self._load_bookings(data_file or DEFAULT_DATA_FILE)

    @staticmethod
    def _load_bookings(data_file: Path) -> List[Dict[str, Any]]:
        if not data_file.exists():
            logger.warning("Mock bookings file %s not found, starting empty", data_file)
            return []

        with open(data_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def get_occupying_reservations(
        self,
        date: str,
        statuses: Sequence[str]
    ) -> List[Reservation]:
        """Return bookings on the date whose status is occupying."""
        wanted = {status.lower() for status in statuses}
        reservations: List[Reservation] = []

        for booking in self.bookings:
            if booking.get("event_date") != date:
                continue
            if str(booking.get("status", "")).lower() not in wanted:
                continue

            reservation = reservation_from_row(booking)
            if reservation is not None:
                reservations.append(reservation)

        return reservations
