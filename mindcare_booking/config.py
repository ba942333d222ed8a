import os
from typing import Optional

from pydantic import BaseModel


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "development")
    http_base_url: str = os.getenv("HTTP_BASE_URL", "http://localhost:8000")
    storage_backend: str = os.getenv("STORAGE_BACKEND", "memory")
    supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
    supabase_key: Optional[str] = os.getenv("SUPABASE_KEY")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    booking_window_days: int = int(os.getenv("BOOKING_WINDOW_DAYS", "30"))
    session_duration_minutes: int = int(os.getenv("SESSION_DURATION_MINUTES", "50"))
    event_log_size: int = int(os.getenv("EVENT_LOG_SIZE", "1000"))
    booking_confirmation_message: str = os.getenv(
        "BOOKING_CONFIRMATION_MESSAGE",
        "Booking confirmed! You will receive a confirmation email shortly.",
    )


settings = Settings()
