from __future__ import annotations

from datetime import date, datetime

from .booking import BookingService, check_date_in_window
from .exceptions import IncompleteBookingError, SlotUnavailableError, StepNotReachableError
from .logging_config import get_logger
from .schemas import Booking, Patient, PaymentMethod, SessionType
from .store import FIRST_STEP, LAST_STEP, InMemoryStore, WizardSession

logger = get_logger(__name__)


class BookingWizard:
    """Step navigation for the four-step booking flow.

    1 Choose Therapist -> 2 Select Date & Time -> 3 Session Details -> 4 Payment.
    Moving back is always allowed; moving forward needs the data the earlier
    steps collect.
    """

    def __init__(self, store: InMemoryStore, service: BookingService) -> None:
        self.store = store
        self.service = service

    def start(self, now: datetime) -> WizardSession:
        session = self.store.create_session(now)
        logger.info("wizard_started", session_id=session.session_id)
        return session

    def select_provider(self, session_id: str, provider_id: str) -> WizardSession:
        session = self.store.get_session(session_id)
        provider = self.service.get_provider(provider_id)
        session.provider_id = provider.id
        session.time_label = None
        session.current_step = 2
        return session

    def select_date(self, session_id: str, day: date, now: datetime) -> WizardSession:
        session = self.store.get_session(session_id)
        check_date_in_window(day, now, self.service.window_days)
        session.selected_date = day
        # A new date invalidates the chosen time.
        session.time_label = None
        return session

    def available_slots(self, session_id: str, now: datetime) -> list[str]:
        session = self.store.get_session(session_id)
        if not session.provider_id:
            return []
        provider = self.service.get_provider(session.provider_id)
        return self.service.available_slots(provider, session.selected_date, now)

    def select_time(self, session_id: str, time_label: str, now: datetime) -> WizardSession:
        session = self.store.get_session(session_id)
        if not session.provider_id:
            raise IncompleteBookingError("Choose a therapist before picking a time.")
        # The chosen date may have left the window since it was selected.
        check_date_in_window(session.selected_date, now, self.service.window_days)
        label = time_label.strip()
        if label not in self.available_slots(session_id, now):
            raise SlotUnavailableError(f"{label} is not available on {session.selected_date.isoformat()}.")
        session.time_label = label
        return session

    def update_details(
        self,
        session_id: str,
        session_type: SessionType | None = None,
        payment_method: PaymentMethod | None = None,
        patient: Patient | None = None,
    ) -> WizardSession:
        session = self.store.get_session(session_id)
        if session_type is not None:
            session.session_type = session_type
        if payment_method is not None:
            session.payment_method = payment_method
        if patient is not None:
            session.patient = patient
        return session

    def go_to_step(self, session_id: str, step: int) -> WizardSession:
        session = self.store.get_session(session_id)
        if not FIRST_STEP <= step <= LAST_STEP:
            raise StepNotReachableError(f"Step {step} does not exist.")
        if step > session.current_step:
            if step >= 2 and not session.provider_id:
                raise StepNotReachableError("Choose a therapist first.")
            if step >= 3 and not session.time_label:
                raise StepNotReachableError("Pick a date and time first.")
        session.current_step = step
        return session

    def submit(self, session_id: str, now: datetime) -> Booking:
        session = self.store.get_session(session_id)
        if session.current_step != LAST_STEP:
            raise StepNotReachableError("Bookings are confirmed from the payment step.")
        booking = self.service.create_booking(session.to_request(), now)
        session.reset(now.date())
        logger.info("wizard_submitted", session_id=session_id, booking_id=booking.id)
        return booking
