"""
Tests for the reservation store adapters.
"""

import json

import pytest
import requests

from kitchenslots.adapters.mock_store import MockReservationStore
from kitchenslots.adapters.rest_store import RestReservationStore
from kitchenslots.config import AppConfig, StoreConfig
from kitchenslots.domain.availability import AvailabilityCalculator
from kitchenslots.domain.exceptions import UpstreamUnavailable
from kitchenslots.domain.models import Reservation
from kitchenslots.services.availability_service import AvailabilityService

STATUSES = ["confirmed", "pending", "deposit_paid"]


class FakeResponse:
    def __init__(self, payload, status_code=200, text=None):
        self._payload = payload
        self.status_code = status_code
        self._text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self._text is not None:
            return json.loads(self._text)
        return self._payload


class FakeSession:
    """Records requests and replays a canned response."""

    def __init__(self, response):
        self.response = response
        self.requests = []

    def get(self, url, headers=None, params=None, timeout=None):
        self.requests.append({"url": url, "headers": headers, "params": params, "timeout": timeout})
        return self.response


def _store(response) -> RestReservationStore:
    config = StoreConfig(url="https://db.example.com/", api_key="service-key", timeout_seconds=5)
    return RestReservationStore(config, session=FakeSession(response))


class TestRestReservationStore:
    """Tests for RestReservationStore."""

    def test_builds_filtered_query(self):
        store = _store(FakeResponse([]))

        store.get_occupying_reservations("2025-03-12", STATUSES)

        request = store.session.requests[0]
        assert request["url"] == "https://db.example.com/rest/v1/service_bookings"
        assert request["params"] == {
            "select": "event_time,duration_minutes",
            "event_date": "eq.2025-03-12",
            "status": "in.(confirmed,pending,deposit_paid)",
        }
        assert request["headers"]["apikey"] == "service-key"
        assert request["headers"]["Authorization"] == "Bearer service-key"
        assert request["timeout"] == 5

    def test_parses_rows(self):
        store = _store(FakeResponse([
            {"event_time": "13:30:00", "duration_minutes": 90},
            {"event_time": "18:30", "duration_minutes": None},
            {"event_time": None, "duration_minutes": 120},
            {"event_time": "16:00", "duration_minutes": 0},
        ]))

        reservations = store.get_occupying_reservations("2025-03-12", STATUSES)

        assert reservations == [
            Reservation(event_time="13:30:00", duration_minutes=90),
            Reservation(event_time="18:30", duration_minutes=None),
            Reservation(event_time=None, duration_minutes=120),
            Reservation(event_time="16:00", duration_minutes=None),
        ]

    def test_skips_rows_with_malformed_time(self, caplog):
        store = _store(FakeResponse([
            {"event_time": "half past one", "duration_minutes": 90},
            {"event_time": 1330, "duration_minutes": 90},
            {"event_time": ["13:30"], "duration_minutes": 90},
            "not a row",
            {"event_time": "16:00", "duration_minutes": "90"},
        ]))

        with caplog.at_level("WARNING"):
            reservations = store.get_occupying_reservations("2025-03-12", STATUSES)

        assert reservations == [Reservation(event_time="16:00", duration_minutes=90)]
        assert "Skipping malformed booking row" in caplog.text

    @pytest.mark.parametrize("duration", [-200, 90.9, "long", True, {"minutes": 90}])
    def test_invalid_duration_falls_back_to_default(self, caplog, duration):
        """A bad duration must not shrink or drop the booking."""
        store = _store(FakeResponse([{"event_time": "13:30", "duration_minutes": duration}]))

        with caplog.at_level("WARNING"):
            reservations = store.get_occupying_reservations("2025-03-12", STATUSES)

        assert reservations == [Reservation(event_time="13:30", duration_minutes=None)]
        assert "invalid duration" in caplog.text

    def test_whole_float_duration_accepted(self):
        store = _store(FakeResponse([{"event_time": "13:30", "duration_minutes": 90.0}]))

        assert store.get_occupying_reservations("2025-03-12", STATUSES) == [
            Reservation(event_time="13:30", duration_minutes=90)
        ]

    def test_http_error_raises_upstream_unavailable(self):
        store = _store(FakeResponse([], status_code=500))

        with pytest.raises(UpstreamUnavailable, match="500"):
            store.get_occupying_reservations("2025-03-12", STATUSES)

    def test_non_json_raises_upstream_unavailable(self):
        store = _store(FakeResponse(None, text="<html>gateway</html>"))

        with pytest.raises(UpstreamUnavailable, match="not JSON"):
            store.get_occupying_reservations("2025-03-12", STATUSES)

    def test_unexpected_payload_raises_upstream_unavailable(self):
        store = _store(FakeResponse({"message": "permission denied"}))

        with pytest.raises(UpstreamUnavailable, match="Unexpected bookings payload"):
            store.get_occupying_reservations("2025-03-12", STATUSES)

    def test_requires_url(self):
        with pytest.raises(ValueError):
            RestReservationStore(StoreConfig())


class TestMockReservationStore:
    """Tests for MockReservationStore."""

    def test_filters_by_date_and_status(self):
        store = MockReservationStore(bookings=[
            {"event_date": "2025-03-13", "event_time": "10:00", "duration_minutes": 150, "status": "deposit_paid"},
            {"event_date": "2025-03-13", "event_time": "16:00", "duration_minutes": 90, "status": "cancelled"},
            {"event_date": "2025-03-14", "event_time": "21:00", "duration_minutes": 90, "status": "confirmed"},
            {"event_date": "2025-03-13", "event_time": "18:30", "duration_minutes": None, "status": "PENDING"},
        ])

        reservations = store.get_occupying_reservations("2025-03-13", STATUSES)

        assert reservations == [
            Reservation(event_time="10:00", duration_minutes=150),
            Reservation(event_time="18:30", duration_minutes=None),
        ]

    def test_negative_duration_still_blocks_slot(self):
        """A booking stored with a negative duration keeps its slot blocked."""
        store = MockReservationStore(bookings=[
            {"event_date": "2025-03-12", "event_time": "13:30", "duration_minutes": -200, "status": "confirmed"},
        ])
        service = AvailabilityService(
            store=store,
            calculator=AvailabilityCalculator(buffer_minutes=60),
            slot_calendar=AppConfig().slot_calendar(),
            occupying_statuses=STATUSES,
        )

        result = service.get_availability("2025-03-12")

        # treated as the 120 minute default, so the following slot is blocked too
        assert [str(slot) for slot in result.blocked_slots] == ["13:30 - 15:00", "16:00 - 17:30"]

    def test_skips_non_string_time(self):
        store = MockReservationStore(bookings=[
            {"event_date": "2025-03-12", "event_time": 1330, "duration_minutes": 90, "status": "confirmed"},
            {"event_date": "2025-03-12", "event_time": "16:00", "duration_minutes": 90, "status": "confirmed"},
        ])

        assert store.get_occupying_reservations("2025-03-12", STATUSES) == [
            Reservation(event_time="16:00", duration_minutes=90)
        ]

    def test_loads_bundled_data(self):
        store = MockReservationStore()

        assert store.get_occupying_reservations("2025-03-12", STATUSES) == [
            Reservation(event_time="13:30", duration_minutes=90)
        ]

    def test_loads_from_file(self, tmp_path):
        data_file = tmp_path / "bookings.json"
        data_file.write_text(json.dumps([
            {"event_date": "2025-03-10", "event_time": "11:00", "duration_minutes": 60, "status": "confirmed"}
        ]), encoding="utf-8")

        store = MockReservationStore(data_file=data_file)

        assert store.get_occupying_reservations("2025-03-10", STATUSES) == [
            Reservation(event_time="11:00", duration_minutes=60)
        ]

    def test_missing_file_starts_empty(self, tmp_path):
        store = MockReservationStore(data_file=tmp_path / "missing.json")

        assert store.get_occupying_reservations("2025-03-10", STATUSES) == []
