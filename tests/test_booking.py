"""Tests for the booking workflow."""
from datetime import date, datetime

import pytest

from mindcare_booking.booking import booking_window
from mindcare_booking.exceptions import (
    BookingError,
    DateOutOfRangeError,
    IncompleteBookingError,
    ProviderNotFoundError,
    SlotUnavailableError,
)
from mindcare_booking.schemas import BookingRequest, Patient, SessionType

NOW = datetime(2024, 1, 3, 9, 0)  # Wednesday


def _request(**overrides) -> BookingRequest:
    data = {
        "provider_id": "1",
        "date": date(2024, 1, 4),
        "time_label": "9:00 AM",
        "patient": Patient(id="p-1", name="Alex Doe", email="alex@example.com"),
    }
    data.update(overrides)
    return BookingRequest(**data)


class TestCreateBooking:
    """Booking records built from validated selections."""

    def test_builds_pending_record(self, service, booking_repo):
        booking = service.create_booking(_request(), NOW)

        assert booking.provider_id == "1"
        assert booking.provider_name == "Dr. Sarah Smith"
        assert booking.time_label == "9:00 AM"
        assert booking.amount == "$120"
        assert booking.status == "pending_confirmation"
        assert booking.created_at == NOW
        assert booking.session_type is SessionType.VIDEO
        assert booking.notes == "video session with Dr. Sarah Smith"
        assert booking.patient_email == "alex@example.com"
        assert booking_repo.list() == [booking]

    def test_phone_session_notes(self, service):
        booking = service.create_booking(_request(session_type=SessionType.PHONE), NOW)
        assert booking.notes == "phone session with Dr. Sarah Smith"

    def test_tracker_and_notifier_receive_booking(self, service, recorded):
        booking = service.create_booking(_request(), NOW)
        assert recorded["tracked"] == [booking]
        assert recorded["notified"] == [booking]

    @pytest.mark.parametrize(
        "overrides",
        [{"provider_id": None}, {"date": None}, {"time_label": None}, {"time_label": "  "}],
    )
    def test_incomplete_request(self, service, recorded, overrides):
        with pytest.raises(IncompleteBookingError, match="complete all booking details"):
            service.create_booking(_request(**overrides), NOW)
        assert recorded["tracked"] == []

    def test_unknown_provider(self, service):
        with pytest.raises(ProviderNotFoundError):
            service.create_booking(_request(provider_id="99"), NOW)

    @pytest.mark.parametrize("day", [date(2024, 1, 2), date(2024, 2, 3), date(2024, 6, 5)])
    def test_date_outside_window(self, service, day):
        with pytest.raises(DateOutOfRangeError):
            service.create_booking(_request(date=day), NOW)

    def test_last_day_of_window_is_bookable(self, service):
        assert booking_window(NOW.date()) == (date(2024, 1, 3), date(2024, 2, 2))
        booking = service.create_booking(_request(date=date(2024, 2, 2)), NOW)
        assert booking.date == date(2024, 2, 2)

    def test_same_day_slot_inside_lead_time_rejected(self, service, booking_repo):
        with pytest.raises(SlotUnavailableError):
            service.create_booking(_request(date=date(2024, 1, 3), time_label="10:00 AM"), NOW)
        assert booking_repo.list() == []

    def test_same_day_slot_outside_lead_time_accepted(self, service):
        now = datetime(2024, 1, 3, 8, 59)
        booking = service.create_booking(_request(date=date(2024, 1, 3), time_label="10:00 AM"), now)
        assert booking.time_label == "10:00 AM"

    def test_weekend_has_no_slots(self, service):
        with pytest.raises(SlotUnavailableError):
            service.create_booking(_request(date=date(2024, 1, 6)), NOW)

    def test_provider_without_template_has_no_slots(self, service):
        with pytest.raises(SlotUnavailableError):
            service.create_booking(_request(provider_id="2"), NOW)

    def test_unknown_label_rejected(self, service):
        with pytest.raises(SlotUnavailableError):
            service.create_booking(_request(time_label="9:30 AM"), NOW)

    def test_errors_are_value_errors(self):
        assert issubclass(BookingError, ValueError)
        assert issubclass(SlotUnavailableError, BookingError)

    def test_same_slot_can_be_booked_twice(self, service, booking_repo):
        # No collision detection between bookers.
        first = service.create_booking(_request(), NOW)
        second = service.create_booking(_request(patient=Patient(id="p-2")), NOW)
        assert first.id != second.id
        assert len(booking_repo.list()) == 2


class TestListBookings:
    def test_filter_by_patient(self, service):
        mine = service.create_booking(_request(), NOW)
        service.create_booking(_request(patient=Patient(id="p-2")), NOW)

        assert service.list_bookings("p-1") == [mine]
        assert len(service.list_bookings()) == 2
        assert service.list_bookings("nobody") == []
