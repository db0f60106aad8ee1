"""
Reservation lookup against the hosted bookings table (PostgREST API).
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..config import StoreConfig
from ..domain.exceptions import UpstreamUnavailable
from ..domain.models import Reservation
from .rows import reservation_from_row

logger = logging.getLogger(__name__)


class RestReservationStore:
    """
    Reads occupying bookings for one date from the hosted Postgres REST API.

    Uses the service key, so row-level security does not hide bookings made
    by other customers.
    """

    def __init__(self, config: StoreConfig, session: Optional[requests.Session] = None):
        """
        Initialize the store client.

        Args:
            config: Store connection settings
            session: Optional requests session (injected in tests)
        """
        if not config.is_configured:
            raise ValueError("Store URL is not configured")

        self.config = config
        self.session = session or requests.Session()
        self.headers = {
            "apikey": config.api_key,
            "Authorization": f"Bearer {config.api_key}",
            "Accept": "application/json",
        }

    @property
    def endpoint(self) -> str:
        return f"{self.config.url.rstrip('/')}/rest/v1/{self.config.table}"

    def get_occupying_reservations(
        self,
        date: str,
        statuses: Sequence[str]
    ) -> List[Reservation]:
        """
        Fetch bookings on the date whose status occupies the venue.

        Args:
            date: Calendar date as YYYY-MM-DD
            statuses: Booking statuses that count as occupying

        Returns:
            List of Reservation objects

        Raises:
            UpstreamUnavailable: If the API call fails or returns malformed data
        """
        params = {
            "select": "event_time,duration_minutes",
            "event_date": f"eq.{date}",
            "status": f"in.({','.join(statuses)})",
        }

        try:
            response = self.session.get(
                self.endpoint,
                headers=self.headers,
                params=params,
                timeout=self.config.timeout_seconds
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise UpstreamUnavailable(f"Failed to fetch bookings for {date}: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamUnavailable(f"Bookings response for {date} is not JSON: {e}") from e

        if not isinstance(data, list):
            raise UpstreamUnavailable(f"Unexpected bookings payload for {date}: {type(data).__name__}")

        return self._parse_rows(data)

    def _parse_rows(self, rows: List[Dict[str, Any]]) -> List[Reservation]:
        """
        Convert raw rows into Reservation objects.

        Rows with an unparseable time are skipped with a warning; rows with no
        time at all are kept and ignored by the calculator.
        """
        reservations: List[Reservation] = []

        for row in rows:
            if not isinstance(row, dict):
                logger.warning("Skipping malformed booking row %r", row)
                continue

            reservation = reservation_from_row(row)
            if reservation is not None:
                reservations.append(reservation)

        return reservations
