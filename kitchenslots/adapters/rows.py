"""
Conversion of raw booking rows into Reservation objects.
"""

import logging
from typing import Any, Dict, Optional

from ..domain.models import Reservation, parse_clock, parse_duration

logger = logging.getLogger(__name__)


def reservation_from_row(row: Dict[str, Any]) -> Optional[Reservation]:
    """
    Build a Reservation from a bookings row.

    A row whose time cannot be parsed is skipped (returns None) with a warning.
    A row without a time is kept; the calculator ignores it. An invalid
    duration is logged and replaced by the default, never dropped, so a
    booking is not under-counted.
    """
    event_time = row.get("event_time") or None

    if event_time is not None:
        try:
            parse_clock(event_time)
        except ValueError as exc:
            logger.warning("Skipping malformed booking row %r: %s", row, exc)
            return None

    try:
        duration = parse_duration(row.get("duration_minutes"))
    except ValueError as exc:
        logger.warning("Booking row %r has an invalid duration, using the default: %s", row, exc)
        duration = None

    return Reservation(event_time=event_time, duration_minutes=duration)
