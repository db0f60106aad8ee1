"""
Application service for answering "which slots are still open on this date".

The service fetches occupying reservations via a store adapter and delegates
the overlap calculation to the domain-level ``AvailabilityCalculator``. The
store is typed as a protocol so tests can plug in a stub.

Availability is advisory: two clients may both see a slot as open before
either booking lands. The booking insert itself must be guarded at the
storage layer.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

from ..adapters.mock_store import MockReservationStore
from ..adapters.rest_store import RestReservationStore
from ..config import AppConfig
from ..domain.availability import AvailabilityCalculator, DateInput, parse_date
from ..domain.exceptions import AvailabilityError, UpstreamUnavailable
from ..domain.models import AvailabilityResult, Reservation, TimeSlotDefinition

logger = logging.getLogger(__name__)


class ReservationStoreProtocol(Protocol):
    """Protocol describing the reservation lookup needed by the service."""

    def get_occupying_reservations(
        self,
        date: str,
        statuses: Sequence[str],
    ) -> List[Reservation]:
        """Return reservations on the date whose status is in statuses."""


class AvailabilityService:
    """
    Orchestrates reservation lookup and availability calculation.
    """

    def __init__(
        self,
        store: Optional[ReservationStoreProtocol],
        calculator: AvailabilityCalculator,
        slot_calendar: Sequence[TimeSlotDefinition],
        occupying_statuses: Sequence[str],
    ) -> None:
        self._store = store
        self._calculator = calculator
        self._slot_calendar = list(slot_calendar)
        self._occupying_statuses = list(occupying_statuses)

    @property
    def slot_calendar(self) -> List[TimeSlotDefinition]:
        return list(self._slot_calendar)

    @property
    def buffer_minutes(self) -> int:
        return self._calculator.buffer_minutes

    def get_availability(
        self,
        date: DateInput,
        *,
        requested_duration_minutes: Optional[int] = None,
    ) -> AvailabilityResult:
        """
        Validate the date, fetch reservations and compute availability.

        Raises:
            InvalidInput: If the date or duration is malformed
            UpstreamUnavailable: If the reservation store fails
        """
        day = parse_date(date).isoformat()

        if self._store is None:
            # Development fallback only: the day's slots with unknown status,
            # listed neither as available nor as blocked.
            logger.warning(
                "No reservation store configured, returning unfiltered slots for %s", day
            )
            result = self._calculator.compute(
                day,
                self._slot_calendar,
                [],
                requested_duration_minutes=requested_duration_minutes,
            )
            result.available_slots = []
            result.blocked_slots = []
            result.degraded = True
            return result

        reservations = self.fetch_reservations(day)

        return self._calculator.compute(
            day,
            self._slot_calendar,
            reservations,
            requested_duration_minutes=requested_duration_minutes,
        )

    def fetch_reservations(self, date: str) -> List[Reservation]:
        """Fetch occupying reservations, normalising store failures."""
        try:
            reservations = self._store.get_occupying_reservations(
                date=date,
                statuses=self._occupying_statuses,
            )
        except AvailabilityError:
            raise
        except Exception as exc:
            raise UpstreamUnavailable(f"Reservation lookup failed for {date}: {exc}") from exc

        logger.debug("Found %d occupying reservation(s) on %s", len(reservations), date)
        return list(reservations)


def build_service(config: AppConfig, *, mock: bool = False) -> AvailabilityService:
    """
    Wire the service from configuration.

    Uses the mock store when requested, the REST store when a URL is
    configured, and no store at all otherwise.
    """
    store: Optional[ReservationStoreProtocol]
    if mock:
        store = MockReservationStore()
    elif config.store.is_configured:
        store = RestReservationStore(config.store)
    else:
        store = None

    return AvailabilityService(
        store=store,
        calculator=config.build_calculator(),
        slot_calendar=config.slot_calendar(),
        occupying_statuses=config.occupying_statuses,
    )
