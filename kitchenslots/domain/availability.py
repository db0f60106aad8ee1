"""
Core business logic for deciding which venue slots can still be booked.

Pure domain logic: no store access, no HTTP, no clock. The caller fetches
the occupying reservations and hands them in.
"""

from datetime import date as date_type, datetime
from typing import List, Optional, Sequence, Tuple, Union

import pendulum

from .exceptions import InvalidInput
from .models import AvailabilityResult, Reservation, TimeSlotDefinition

DEFAULT_BUFFER_MINUTES = 60
DEFAULT_DURATION_MINUTES = 120

DateInput = Union[str, date_type]


def parse_date(value: Optional[DateInput]) -> date_type:
    """
    Normalise a caller-supplied date into a plain date.

    Raises:
        InvalidInput: If the value is empty or not a valid YYYY-MM-DD date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date_type):
        return value

    if not value or not isinstance(value, str):
        raise InvalidInput("Date parameter is required")

    try:
        return pendulum.from_format(value.strip(), "YYYY-MM-DD").date()
    except ValueError as exc:
        raise InvalidInput(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc


def day_of_week(value: date_type) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday."""
    return value.isoweekday() % 7


def slots_for_day(
    slot_calendar: Sequence[TimeSlotDefinition],
    weekday: int
) -> List[TimeSlotDefinition]:
    """Return the slots offered on the given weekday, in calendar order."""
    return [slot for slot in slot_calendar if slot.is_offered_on(weekday)]


class AvailabilityCalculator:
    """
    Splits a day's slots into available and blocked.

    Algorithm:
    1. Derive the weekday and keep only slots offered on it
    2. Extend every slot and every reservation by the buffer at its end
    3. A slot is blocked when its extended window overlaps any extended
       reservation (half-open test, so touching windows do not conflict)
    4. Partition the day's slots, preserving calendar order
    """

    def __init__(
        self,
        buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
        default_duration_minutes: int = DEFAULT_DURATION_MINUTES
    ):
        if buffer_minutes < 0:
            raise InvalidInput(f"buffer_minutes must not be negative, got {buffer_minutes}")
        if default_duration_minutes <= 0:
            raise InvalidInput(
                f"default_duration_minutes must be positive, got {default_duration_minutes}"
            )
        self.buffer_minutes = buffer_minutes
        self.default_duration_minutes = default_duration_minutes

    def compute(
        self,
        date: DateInput,
        slot_calendar: Sequence[TimeSlotDefinition],
        reservations: Sequence[Reservation],
        requested_duration_minutes: Optional[int] = None
    ) -> AvailabilityResult:
        """
        Compute availability for a single date.

        Args:
            date: Calendar date, as YYYY-MM-DD or a date object
            slot_calendar: All slot definitions, in display order
            reservations: Occupying reservations on that date
            requested_duration_minutes: Length of the booking being planned;
                when omitted each slot's own end time is used

        Returns:
            AvailabilityResult for the date

        Raises:
            InvalidInput: If the date or the requested duration is malformed
        """
        parsed = parse_date(date)
        weekday = day_of_week(parsed)

        if requested_duration_minutes is not None and requested_duration_minutes <= 0:
            raise InvalidInput(
                f"Requested duration must be positive, got {requested_duration_minutes}"
            )

        day_slots = slots_for_day(slot_calendar, weekday)
        windows = self._reservation_windows(reservations)

        available: List[TimeSlotDefinition] = []
        blocked: List[TimeSlotDefinition] = []

        for slot in day_slots:
            if self._is_blocked(slot, windows, requested_duration_minutes):
                blocked.append(slot)
            else:
                available.append(slot)

        return AvailabilityResult(
            date=parsed.isoformat(),
            day_of_week=weekday,
            all_slots=day_slots,
            available_slots=available,
            blocked_slots=blocked,
            buffer_minutes=self.buffer_minutes,
            requested_duration_minutes=requested_duration_minutes,
        )

    def _reservation_windows(self, reservations: Sequence[Reservation]) -> List[Tuple[int, int]]:
        """
        Convert reservations to (start, end) minute pairs, buffer included.

        Reservations without a start time place no constraint and are dropped.
        """
        windows = []

        for reservation in reservations:
            try:
                start = reservation.start_minutes()
            except ValueError as exc:
                raise InvalidInput(str(exc)) from exc

            if start is None:
                continue

            duration = reservation.effective_duration(self.default_duration_minutes)
            windows.append((start, start + duration + self.buffer_minutes))

        return windows

    def _is_blocked(
        self,
        slot: TimeSlotDefinition,
        windows: List[Tuple[int, int]],
        requested_duration_minutes: Optional[int]
    ) -> bool:
        slot_start = slot.start_minutes
        if requested_duration_minutes is None:
            slot_end = slot.end_minutes + self.buffer_minutes
        else:
            slot_end = slot_start + requested_duration_minutes + self.buffer_minutes

        for reservation_start, reservation_end in windows:
            if slot_start < reservation_end and slot_end > reservation_start:
                return True

        return False


def compute_availability(
    date: DateInput,
    slot_calendar: Sequence[TimeSlotDefinition],
    occupying_reservations: Sequence[Reservation],
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
    *,
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
    requested_duration_minutes: Optional[int] = None
) -> AvailabilityResult:
    """Functional entry point around AvailabilityCalculator."""
    calculator = AvailabilityCalculator(
        buffer_minutes=buffer_minutes,
        default_duration_minutes=default_duration_minutes
    )
    return calculator.compute(
        date,
        slot_calendar,
        occupying_reservations,
        requested_duration_minutes=requested_duration_minutes
    )
