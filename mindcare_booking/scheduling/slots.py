from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Protocol

from ..logging_config import get_logger

logger = get_logger(__name__)

# A slot must start strictly more than this many minutes after "now" to be bookable.
LEAD_TIME_MINUTES = 60
SESSION_DURATION_MINUTES = 50
MINUTES_PER_DAY = 24 * 60

_TIME_LABEL = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def from_name(cls, name: str) -> "Weekday":
        """Accept full ("Wednesday") or abbreviated ("Wed") day names, any case."""
        key = name.strip().lower()
        for day in cls:
            if key == day.value.lower() or (len(key) >= 3 and day.value.lower().startswith(key)):
                return day
        raise ValueError(f"unknown weekday: {name!r}")


WEEKDAYS = list(Weekday)


class TemplateEntry(Protocol):
    weekday: str
    time: str


@dataclass(frozen=True)
class Slot:
    weekday: Weekday
    time: str

    @classmethod
    def parse(cls, text: str) -> "Slot":
        """Parse the compact "Monday 9:00 AM" form."""
        day, _, label = text.strip().partition(" ")
        if not label:
            raise ValueError(f"expected '<weekday> <time>', got {text!r}")
        return cls(weekday=Weekday.from_name(day), time=label.strip())

    def __str__(self) -> str:
        return f"{self.weekday.value} {self.time}"


def weekday_of(day: date) -> Weekday:
    # Proleptic ordinal 1 (0001-01-01) is a Monday.
    return WEEKDAYS[(day.toordinal() - 1) % 7]


def parse_time_label(label: str) -> int:
    """Convert a 12-hour label such as "2:00 PM" into minutes since midnight.

    12 AM maps to hour 0 and 12 PM to hour 12; any other PM hour gets 12 added.
    Raises ValueError for anything that is not a well-formed label.
    """
    match = _TIME_LABEL.match(label or "")
    if not match:
        raise ValueError(f"invalid time label: {label!r}")
    hours, minutes, meridiem = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if not 1 <= hours <= 12 or minutes > 59:
        raise ValueError(f"invalid time label: {label!r}")
    if meridiem == "AM" and hours == 12:
        hours = 0
    elif meridiem == "PM" and hours != 12:
        hours += 12
    return hours * 60 + minutes


def format_time_label(minutes: int) -> str:
    minutes %= MINUTES_PER_DAY
    hours, minute = divmod(minutes, 60)
    meridiem = "AM" if hours < 12 else "PM"
    hour_12 = hours % 12 or 12
    return f"{hour_12}:{minute:02d} {meridiem}"


def minutes_since_midnight(now: datetime) -> int:
    return now.hour * 60 + now.minute


def is_slot_locked(label: str, day: date, now: datetime) -> bool:
    """Whether ``label`` on ``day`` is unbookable because of the lead time.

    Only the current day (``now``'s calendar date) is ever locked. A slot
    exactly LEAD_TIME_MINUTES away is locked; malformed labels are always locked.
    """
    if day != now.date():
        return False
    try:
        slot_minutes = parse_time_label(label)
    except ValueError:
        logger.warning("malformed_time_label", label=label, date=day.isoformat())
        return True
    return slot_minutes <= minutes_since_midnight(now) + LEAD_TIME_MINUTES


def slots_for_weekday(template: Iterable[TemplateEntry] | None, day: date) -> list[str]:
    weekday = weekday_of(day)
    return [entry.time for entry in template or () if entry.weekday == weekday]


def list_available_slots(
    template: Iterable[TemplateEntry] | None,
    day: date,
    now: datetime,
) -> list[str]:
    """Bookable slot labels for ``day``, in template order.

    Entries are matched on weekday; for the current day, labels inside the
    lead-time window are dropped. Duplicate entries are passed through.
    """
    labels = slots_for_weekday(template, day)
    if day == now.date():
        labels = [label for label in labels if not is_slot_locked(label, day, now)]
    return labels


def session_end_label(label: str, duration_minutes: int = SESSION_DURATION_MINUTES) -> str:
    return format_time_label(parse_time_label(label) + duration_minutes)


def format_slot(day: date, label: str) -> str:
    return f"{day.strftime('%a %b %d')} at {label}"
