"""Shared test fixtures."""
import os
from datetime import datetime

import pytest

os.environ["STORAGE_BACKEND"] = "memory"

from mindcare_booking.booking import BookingService
from mindcare_booking.db.repository import InMemoryBookingRepository, InMemoryProviderRepository
from mindcare_booking.scheduling.slots import Slot, Weekday
from mindcare_booking.store import InMemoryStore
from mindcare_booking.wizard import BookingWizard


@pytest.fixture
def wednesday_template() -> list[Slot]:
    return [
        Slot(Weekday.MONDAY, "9:00 AM"),
        Slot(Weekday.WEDNESDAY, "9:00 AM"),
        Slot(Weekday.WEDNESDAY, "10:00 AM"),
        Slot(Weekday.WEDNESDAY, "2:00 PM"),
        Slot(Weekday.FRIDAY, "4:00 PM"),
    ]


@pytest.fixture
def nine_am() -> datetime:
    return datetime(2024, 1, 3, 9, 0)


@pytest.fixture
def booking_repo() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@pytest.fixture
def provider_repo() -> InMemoryProviderRepository:
    return InMemoryProviderRepository.seeded()


@pytest.fixture
def recorded() -> dict:
    return {"tracked": [], "notified": []}


@pytest.fixture
def service(booking_repo, provider_repo, recorded) -> BookingService:
    return BookingService(
        booking_repo,
        provider_repo,
        tracker=recorded["tracked"].append,
        notifier=recorded["notified"].append,
    )


@pytest.fixture
def wizard(service) -> BookingWizard:
    return BookingWizard(InMemoryStore(), service)
