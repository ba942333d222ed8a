import datetime as dt
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .scheduling.slots import Slot, Weekday


class SessionType(str, Enum):
    VIDEO = "video"
    PHONE = "phone"


class PaymentMethod(str, Enum):
    CARD = "card"
    PAYPAL = "paypal"


class AvailabilityEntry(BaseModel):
    weekday: Weekday
    time: str

    @model_validator(mode="before")
    @classmethod
    def _from_compact(cls, value: Any) -> Any:
        # Templates may be stored as "Monday 9:00 AM" strings.
        if isinstance(value, str):
            slot = Slot.parse(value)
            return {"weekday": slot.weekday, "time": slot.time}
        return value

    @field_validator("weekday", mode="before")
    @classmethod
    def _normalize_weekday(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Weekday.from_name(value)
        return value


class Provider(BaseModel):
    id: str
    name: str
    title: str = ""
    specialization: list[str] = Field(default_factory=list)
    experience: int = 0
    rating: float = 0.0
    review_count: int = 0
    hourly_rate: int
    location: str = "Online"
    avatar: str = ""
    verified: bool = False
    next_available: str = ""
    bio: str = ""
    languages: list[str] = Field(default_factory=list)
    weekly_availability: list[AvailabilityEntry] = Field(default_factory=list)


class SlotView(BaseModel):
    time: str
    end_time: str | None = None
    locked: bool
    display: str


class SlotListing(BaseModel):
    provider_id: str
    date: dt.date
    weekday: Weekday
    duration_minutes: int
    slots: list[SlotView]


class Patient(BaseModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None


class BookingRequest(BaseModel):
    provider_id: str | None = None
    date: dt.date | None = None
    time_label: str | None = None
    session_type: SessionType = SessionType.VIDEO
    patient: Patient = Field(default_factory=Patient)


class Booking(BaseModel):
    id: str
    patient_id: str | None = None
    patient_name: str | None = None
    patient_email: str | None = None
    provider_id: str
    provider_name: str
    date: dt.date
    time_label: str
    session_type: SessionType
    amount: str
    status: str = "pending_confirmation"
    created_at: dt.datetime
    notes: str = ""


class BookingEvent(BaseModel):
    id: str
    name: str
    status: str
    detail: str
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: dt.datetime = Field(default_factory=dt.datetime.utcnow)


class WizardStep(BaseModel):
    step: int
    title: str
    description: str


class SessionStartResponse(BaseModel):
    session_id: str
    url: str
