from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from dotenv import load_dotenv

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from .booking import BookingService
from .config import settings
from .db.repository import build_repositories
from .directory import list_specializations, search_providers
from .exceptions import (
    BookingError,
    IncompleteBookingError,
    InvalidDateError,
    ProviderNotFoundError,
    SessionNotFoundError,
)
from .logging_config import get_logger, setup_structured_logging
from .scheduling.handlers import (
    event_booking_confirmed,
    event_booking_rejected,
    event_payment_tracked,
    event_slots_listed,
)
from .scheduling.slots import (
    format_slot,
    is_slot_locked,
    list_available_slots,
    session_end_label,
    slots_for_weekday,
    weekday_of,
)
from .schemas import (
    Booking,
    BookingEvent,
    BookingRequest,
    Patient,
    PaymentMethod,
    Provider,
    SessionStartResponse,
    SessionType,
    SlotListing,
    SlotView,
)
from .store import WizardSession, store
from .wizard import BookingWizard
from dateutil import parser as date_parser

setup_structured_logging(settings.log_level, json_logs=settings.environment != "development")
logger = get_logger(__name__)

app = FastAPI(title="MindCare Booking API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

booking_repo, provider_repo = build_repositories(
    settings.storage_backend,
    settings.supabase_url,
    settings.supabase_key,
)


def _track_payment(booking: Booking) -> None:
    store.add_event(event_payment_tracked(booking))


def _notify_patient(booking: Booking) -> None:
    store.add_event(event_booking_confirmed(booking, settings.booking_confirmation_message))


booking_service = BookingService(
    booking_repo,
    provider_repo,
    tracker=_track_payment,
    notifier=_notify_patient,
    window_days=settings.booking_window_days,
)
wizard = BookingWizard(store, booking_service)


def get_clock() -> datetime:
    return datetime.now()


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    status_code = 404 if isinstance(exc, (ProviderNotFoundError, SessionNotFoundError)) else 400
    # Reads that miss (unknown provider or session) are not rejected bookings.
    if request.method != "GET":
        store.add_event(event_booking_rejected(str(exc)))
    logger.info("booking_rejected", path=request.url.path, reason=str(exc), status_code=status_code)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def _slot_view(label: str, day: date, now: datetime) -> SlotView:
    try:
        end_time = session_end_label(label, settings.session_duration_minutes)
    except ValueError:
        end_time = None
    return SlotView(
        time=label,
        end_time=end_time,
        locked=is_slot_locked(label, day, now),
        display=format_slot(day, label),
    )


def _normalize_date(date_str: str, now: datetime) -> date:
    # Accept flexible inputs ("Jan 3 2024", "Jan 4") and keep only the calendar date.
    # Missing fields come from the injected clock; a yearless date already past rolls to next year.
    try:
        parsed = date_parser.parse(date_str, fuzzy=True, default=now).date()
        # Reparsing against a leap-year default shows whether the input carried its own year.
        marker_year = 2000 if now.year != 2000 else 2004
        marked = date_parser.parse(date_str, fuzzy=True, default=now.replace(year=marker_year))
        yearless = parsed.year == now.year and marked.year == marker_year
    except (ValueError, OverflowError) as exc:
        raise InvalidDateError(f"Could not understand the date {date_str!r}.") from exc
    if yearless and parsed < now.date():
        try:
            parsed = parsed.replace(year=parsed.year + 1)
        except ValueError:
            # Feb 29 has no counterpart next year.
            parsed = parsed.replace(year=parsed.year + 1, day=28)
    return parsed


def _session_view(session: WizardSession, now: datetime) -> dict:
    view = session.to_dict()
    view["available_slots"] = wizard.available_slots(session.session_id, now)
    return view


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/providers", response_model=list[Provider])
async def list_providers(search: str = "", specialization: str = "all") -> list[Provider]:
    return search_providers(provider_repo.list(), search, specialization)


@app.get("/providers/specializations")
async def get_specializations() -> dict:
    return {"specializations": ["all"] + list_specializations(provider_repo.list())}


@app.get("/providers/{provider_id}", response_model=Provider)
async def get_provider(provider_id: str) -> Provider:
    return booking_service.get_provider(provider_id)


@app.get("/providers/{provider_id}/slots", response_model=SlotListing)
async def get_provider_slots(
    provider_id: str,
    date: Optional[date] = None,
    include_locked: bool = False,
    now: datetime = Depends(get_clock),
) -> SlotListing:
    provider = booking_service.get_provider(provider_id)
    day = date or now.date()
    if include_locked:
        labels = slots_for_weekday(provider.weekly_availability, day)
    else:
        labels = list_available_slots(provider.weekly_availability, day, now)
    store.add_event(event_slots_listed(provider.id, day.isoformat(), len(labels)))
    return SlotListing(
        provider_id=provider.id,
        date=day,
        weekday=weekday_of(day),
        duration_minutes=settings.session_duration_minutes,
        slots=[_slot_view(label, day, now) for label in labels],
    )


@app.post("/bookings", response_model=Booking)
async def create_booking(request: BookingRequest, now: datetime = Depends(get_clock)) -> Booking:
    return booking_service.create_booking(request, now)


@app.get("/bookings", response_model=list[Booking])
async def list_bookings(patient_id: Optional[str] = None) -> list[Booking]:
    return booking_service.list_bookings(patient_id)


@app.get("/events", response_model=list[BookingEvent])
async def list_events(session_id: Optional[str] = None) -> list[BookingEvent]:
    return store.list_events(session_id)


@app.post("/session/start", response_model=SessionStartResponse)
async def start_session(now: datetime = Depends(get_clock)) -> SessionStartResponse:
    session = wizard.start(now)
    return SessionStartResponse(
        session_id=session.session_id,
        url=f"{settings.http_base_url}/session/{session.session_id}",
    )


@app.get("/session/{session_id}")
async def get_session(session_id: str, now: datetime = Depends(get_clock)) -> dict:
    return _session_view(store.get_session(session_id), now)


@app.post("/session/{session_id}/provider")
async def select_provider(session_id: str, payload: dict, now: datetime = Depends(get_clock)) -> dict:
    provider_id = payload.get("provider_id")
    if not provider_id:
        raise IncompleteBookingError("provider_id is required.")
    session = wizard.select_provider(session_id, str(provider_id))
    return _session_view(session, now)


@app.post("/session/{session_id}/date")
async def select_date(session_id: str, payload: dict, now: datetime = Depends(get_clock)) -> dict:
    date_input = payload.get("date")
    if not date_input:
        raise IncompleteBookingError("date is required.")
    session = wizard.select_date(session_id, _normalize_date(str(date_input), now), now)
    return _session_view(session, now)


@app.post("/session/{session_id}/time")
async def select_time(session_id: str, payload: dict, now: datetime = Depends(get_clock)) -> dict:
    time_input = payload.get("time")
    if not time_input:
        raise IncompleteBookingError("time is required.")
    session = wizard.select_time(session_id, str(time_input), now)
    return _session_view(session, now)


@app.post("/session/{session_id}/details")
async def update_details(session_id: str, payload: dict, now: datetime = Depends(get_clock)) -> dict:
    try:
        session_type = SessionType(payload["session_type"]) if payload.get("session_type") else None
        payment_method = PaymentMethod(payload["payment_method"]) if payload.get("payment_method") else None
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    patient = Patient(**payload["patient"]) if payload.get("patient") else None
    session = wizard.update_details(
        session_id,
        session_type=session_type,
        payment_method=payment_method,
        patient=patient,
    )
    return _session_view(session, now)


@app.post("/session/{session_id}/step")
async def go_to_step(session_id: str, payload: dict, now: datetime = Depends(get_clock)) -> dict:
    try:
        step = int(payload.get("step"))
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=422, detail="step must be an integer") from exc
    session = wizard.go_to_step(session_id, step)
    return _session_view(session, now)


@app.post("/session/{session_id}/submit")
async def submit_session(session_id: str, now: datetime = Depends(get_clock)) -> dict:
    booking = wizard.submit(session_id, now)
    # The notifier already logged the confirmation globally.
    store.attach_event(session_id, event_booking_confirmed(booking, settings.booking_confirmation_message))
    return {
        "booking": booking.model_dump(mode="json"),
        "message": settings.booking_confirmation_message,
        "session": _session_view(store.get_session(session_id), now),
    }
