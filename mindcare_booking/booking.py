from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from .db.repository import BookingRepository, ProviderRepository
from .exceptions import (
    DateOutOfRangeError,
    IncompleteBookingError,
    ProviderNotFoundError,
    SlotUnavailableError,
)
from .logging_config import get_logger
from .scheduling.slots import list_available_slots
from .schemas import Booking, BookingRequest, Provider

logger = get_logger(__name__)

PENDING_CONFIRMATION = "pending_confirmation"
DEFAULT_BOOKING_WINDOW_DAYS = 30

BookingHook = Callable[[Booking], None]


def booking_window(today: date, window_days: int = DEFAULT_BOOKING_WINDOW_DAYS) -> tuple[date, date]:
    return today, today + timedelta(days=window_days)


def check_date_in_window(day: date, now: datetime, window_days: int = DEFAULT_BOOKING_WINDOW_DAYS) -> None:
    first, last = booking_window(now.date(), window_days)
    if not first <= day <= last:
        raise DateOutOfRangeError(
            f"Date {day.isoformat()} is outside the bookable range {first.isoformat()}..{last.isoformat()}."
        )


class BookingService:
    """Turns a completed wizard selection into a persisted booking record.

    Persistence is a plain save: there is no transaction and no check for
    another patient holding the same slot.
    """

    def __init__(
        self,
        bookings: BookingRepository,
        providers: ProviderRepository,
        tracker: Optional[BookingHook] = None,
        notifier: Optional[BookingHook] = None,
        window_days: int = DEFAULT_BOOKING_WINDOW_DAYS,
    ) -> None:
        self.bookings = bookings
        self.providers = providers
        self.tracker = tracker
        self.notifier = notifier
        self.window_days = window_days

    def get_provider(self, provider_id: str) -> Provider:
        provider = self.providers.get(provider_id)
        if provider is None:
            raise ProviderNotFoundError(f"Provider {provider_id} not found.")
        return provider

    def available_slots(self, provider: Provider, day: date, now: datetime) -> list[str]:
        return list_available_slots(provider.weekly_availability, day, now)

    def create_booking(self, request: BookingRequest, now: datetime) -> Booking:
        if not request.provider_id or request.date is None or not (request.time_label or "").strip():
            raise IncompleteBookingError("Please complete all booking details")
        provider = self.get_provider(request.provider_id)
        check_date_in_window(request.date, now, self.window_days)
        time_label = request.time_label.strip()
        if time_label not in self.available_slots(provider, request.date, now):
            raise SlotUnavailableError(
                f"{time_label} on {request.date.isoformat()} is not available with {provider.name}."
            )

        booking = Booking(
            id=uuid.uuid4().hex,
            patient_id=request.patient.id,
            patient_name=request.patient.name,
            patient_email=request.patient.email,
            provider_id=provider.id,
            provider_name=provider.name,
            date=request.date,
            time_label=time_label,
            session_type=request.session_type,
            amount=f"${provider.hourly_rate}",
            status=PENDING_CONFIRMATION,
            created_at=now,
            notes=f"{request.session_type.value} session with {provider.name}",
        )
        self.bookings.save(booking)
        logger.info(
            "booking_created",
            booking_id=booking.id,
            provider_id=provider.id,
            date=booking.date.isoformat(),
            time=booking.time_label,
        )
        if self.tracker:
            self.tracker(booking)
        if self.notifier:
            self.notifier(booking)
        return booking

    def list_bookings(self, patient_id: str | None = None) -> list[Booking]:
        bookings = self.bookings.list()
        if patient_id is None:
            return bookings
        return [booking for booking in bookings if booking.patient_id == patient_id]
