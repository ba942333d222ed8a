from __future__ import annotations

import uuid
from datetime import datetime

from ..schemas import Booking, BookingEvent


def build_event(
    name: str,
    detail: str,
    status: str = "completed",
    payload: dict | None = None,
    timestamp: datetime | None = None,
) -> BookingEvent:
    return BookingEvent(
        id=uuid.uuid4().hex,
        name=name,
        status=status,
        detail=detail,
        payload=payload or {},
        timestamp=timestamp or datetime.utcnow(),
    )


def _mask_email(email: str | None) -> str:
    if not email or "@" not in email:
        return "anonymous"
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}"


def event_slots_listed(provider_id: str, date: str, count: int) -> BookingEvent:
    detail = f"Returned {count} slots for provider {provider_id} on {date}"
    return build_event("slots_listed", detail, payload={"provider_id": provider_id, "date": date, "count": count})


def event_payment_tracked(booking: Booking) -> BookingEvent:
    detail = f"Tracked {booking.amount} {booking.session_type.value} session for {_mask_email(booking.patient_email)}"
    return build_event(
        "payment_tracked",
        detail,
        payload={
            "booking_id": booking.id,
            "provider_id": booking.provider_id,
            "amount": booking.amount,
            "session_type": booking.session_type.value,
        },
        timestamp=booking.created_at,
    )


def event_booking_confirmed(booking: Booking, message: str) -> BookingEvent:
    return build_event(
        "booking_confirmed",
        message,
        payload={"booking_id": booking.id, "date": booking.date.isoformat(), "time": booking.time_label},
        timestamp=booking.created_at,
    )


def event_booking_rejected(reason: str) -> BookingEvent:
    return build_event("booking_rejected", reason, status="failed")
