"""
Domain models for slot calendars, reservations and availability results.
"""

from dataclasses import dataclass
from datetime import time
from typing import Any, Dict, FrozenSet, List, Optional

# 0=Sunday .. 6=Saturday
ALL_DAYS: FrozenSet[int] = frozenset(range(7))

WEEKDAY_NAMES = {
    0: "Sunday",
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
}


def parse_clock(value: str) -> time:
    """
    Parse a wall-clock string into a time object.

    Accepts ``HH:MM`` and ``HH:MM:SS`` (the latter is what Postgres ``time``
    columns serialise to).

    Raises:
        ValueError: If the string is not a valid 24h clock time
    """
    if not isinstance(value, str):
        raise ValueError(f"Invalid clock time: {value!r}")

    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid clock time: {value!r}")

    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour=hour, minute=minute, second=second)


def parse_duration(value: Any) -> Optional[int]:
    """
    Parse a stored booking duration in whole minutes.

    None and empty strings mean "not recorded".

    Raises:
        ValueError: If the value is not a positive whole number of minutes
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")

    if isinstance(value, str):
        minutes = int(value.strip())
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Duration must be whole minutes, got {value!r}")
        minutes = int(value)
    elif isinstance(value, int):
        minutes = value
    else:
        raise ValueError(f"Invalid duration: {value!r}")

    if minutes <= 0:
        raise ValueError(f"Duration must be positive, got {value!r}")
    return minutes


def minutes_since_midnight(value: time) -> int:
    return value.hour * 60 + value.minute


@dataclass(frozen=True)
class TimeSlotDefinition:
    """
    A bookable window of the venue, offered on a fixed set of weekdays.

    Invariant: start must be before end and days_offered must be a
    non-empty subset of 0..6.
    """
    start: time
    end: time
    label: str
    days_offered: FrozenSet[int] = ALL_DAYS

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Slot start {self.start} must be before end {self.end}")
        if not self.days_offered:
            raise ValueError(f"Slot {self.label!r} must be offered on at least one day")
        invalid_days = sorted(day for day in self.days_offered if day not in ALL_DAYS)
        if invalid_days:
            raise ValueError(f"days_offered must be between 0 and 6, got {invalid_days}")

    @property
    def start_minutes(self) -> int:
        return minutes_since_midnight(self.start)

    @property
    def end_minutes(self) -> int:
        return minutes_since_midnight(self.end)

    @property
    def duration_minutes(self) -> int:
        """Nominal slot length, for display only."""
        return self.end_minutes - self.start_minutes

    def is_offered_on(self, day_of_week: int) -> bool:
        return day_of_week in self.days_offered

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.strftime("%H:%M"),
            "end": self.end.strftime("%H:%M"),
            "durationMinutes": self.duration_minutes,
            "label": self.label,
            "daysOffered": sorted(self.days_offered),
        }

    def __str__(self) -> str:
        return f"{self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')}"


@dataclass(frozen=True)
class Reservation:
    """
    An occupying booking on the requested date.

    Both fields may be missing in older records: an empty event_time means
    the reservation places no constraint, a missing duration falls back to
    the configured default.
    """
    event_time: Optional[str]
    duration_minutes: Optional[int] = None

    def start_minutes(self) -> Optional[int]:
        """Start as minutes since midnight, or None when no time is recorded."""
        if not self.event_time:
            return None
        return minutes_since_midnight(parse_clock(self.event_time))

    def effective_duration(self, default_minutes: int) -> int:
        if self.duration_minutes is None or self.duration_minutes <= 0:
            return default_minutes
        return self.duration_minutes


@dataclass
class AvailabilityResult:
    """
    Open versus blocked slots for one calendar date.
    """
    date: str
    day_of_week: int
    all_slots: List[TimeSlotDefinition]
    available_slots: List[TimeSlotDefinition]
    blocked_slots: List[TimeSlotDefinition]
    buffer_minutes: int
    requested_duration_minutes: Optional[int] = None
    degraded: bool = False

    @property
    def weekday_name(self) -> str:
        return WEEKDAY_NAMES[self.day_of_week]

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to the JSON shape returned by the query endpoint."""
        return {
            "date": self.date,
            "dayOfWeek": self.day_of_week,
            "allSlots": [slot.to_dict() for slot in self.all_slots],
            "availableSlots": [slot.to_dict() for slot in self.available_slots],
            "blockedSlots": [slot.to_dict() for slot in self.blocked_slots],
            "bufferMinutes": self.buffer_minutes,
            "requestedDuration": self.requested_duration_minutes,
            "degraded": self.degraded,
        }
