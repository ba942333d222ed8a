from __future__ import annotations

import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Deque, Dict, List

from .config import settings
from .exceptions import SessionNotFoundError
from .schemas import BookingEvent, BookingRequest, Patient, PaymentMethod, SessionType, WizardStep

STEPS = [
    WizardStep(step=1, title="Choose Therapist", description="Select from our verified professionals"),
    WizardStep(step=2, title="Select Date & Time", description="Pick your preferred appointment slot"),
    WizardStep(step=3, title="Session Details", description="Confirm your booking details"),
    WizardStep(step=4, title="Payment", description="Secure payment processing"),
]
FIRST_STEP = STEPS[0].step
LAST_STEP = STEPS[-1].step


@dataclass
class WizardSession:
    session_id: str
    selected_date: date
    started_at: datetime
    current_step: int = FIRST_STEP
    provider_id: str | None = None
    time_label: str | None = None
    session_type: SessionType = SessionType.VIDEO
    payment_method: PaymentMethod = PaymentMethod.CARD
    patient: Patient = field(default_factory=Patient)
    events: List[BookingEvent] = field(default_factory=list)

    def reset(self, today: date) -> None:
        self.current_step = FIRST_STEP
        self.provider_id = None
        self.selected_date = today
        self.time_label = None

    def to_request(self) -> BookingRequest:
        return BookingRequest(
            provider_id=self.provider_id,
            date=self.selected_date,
            time_label=self.time_label,
            session_type=self.session_type,
            patient=self.patient,
        )

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "started_at": self.started_at.isoformat(),
            "current_step": self.current_step,
            "steps": [step.model_dump() for step in STEPS],
            "provider_id": self.provider_id,
            "date": self.selected_date.isoformat(),
            "time": self.time_label,
            "session_type": self.session_type.value,
            "payment_method": self.payment_method.value,
            "patient": self.patient.model_dump(),
        }


class InMemoryStore:
    def __init__(self, max_events: int = 1000) -> None:
        self.sessions: Dict[str, WizardSession] = {}
        # Oldest events fall off once the log is full.
        self.events: Deque[BookingEvent] = deque(maxlen=max_events)

    def create_session(self, now: datetime) -> WizardSession:
        session_id = uuid.uuid4().hex
        session = WizardSession(session_id=session_id, selected_date=now.date(), started_at=now)
        self.sessions[session_id] = session
        return session

    def get_session(self, session_id: str) -> WizardSession:
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found.")
        return session

    def add_event(self, event: BookingEvent, session_id: str | None = None) -> None:
        self.events.append(event)
        if session_id is not None:
            self.attach_event(session_id, event)

    def attach_event(self, session_id: str, event: BookingEvent) -> None:
        self.get_session(session_id).events.append(event)

    def list_events(self, session_id: str | None = None) -> List[BookingEvent]:
        if session_id is None:
            return list(self.events)
        return list(self.get_session(session_id).events)


store = InMemoryStore(max_events=settings.event_log_size)
