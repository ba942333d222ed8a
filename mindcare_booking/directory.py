from __future__ import annotations

from typing import Iterable

from .scheduling.slots import Weekday
from .schemas import AvailabilityEntry, Provider

ALL_SPECIALIZATIONS = "all"

_WORKDAYS = [Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY]
_OFFICE_HOURS = ["9:00 AM", "10:00 AM", "11:00 AM", "12:00 PM", "1:00 PM", "2:00 PM", "3:00 PM", "4:00 PM", "5:00 PM"]


def default_providers() -> list[Provider]:
    return [
        Provider(
            id="1",
            name="Dr. Sarah Smith",
            title="Ph.D. in Clinical Psychology",
            specialization=["Anxiety", "Depression", "CBT"],
            experience=8,
            rating=4.9,
            review_count=127,
            hourly_rate=120,
            location="Online",
            avatar="https://images.pexels.com/photos/5327580/pexels-photo-5327580.jpeg?auto=compress&cs=tinysrgb&w=150",
            verified=True,
            next_available="Today, 2:00 PM",
            bio=(
                "Experienced therapist specializing in CBT with a passion for helping "
                "patients overcome anxiety and depression."
            ),
            languages=["English", "Spanish"],
            weekly_availability=[
                AvailabilityEntry(weekday=day, time=label) for day in _WORKDAYS for label in _OFFICE_HOURS
            ],
        ),
        Provider(
            id="2",
            name="Dr. Emily Rodriguez",
            title="Licensed Family Therapist",
            specialization=["Family Therapy", "Couples Counseling", "EMDR"],
            experience=10,
            rating=4.7,
            review_count=89,
            hourly_rate=140,
            location="Online",
            avatar="https://images.pexels.com/photos/5327647/pexels-photo-5327647.jpeg?auto=compress&cs=tinysrgb&w=150",
            verified=True,
            next_available="Tomorrow, 10:00 AM",
            bio="Specializing in family dynamics and trauma recovery with over 10 years of experience.",
            languages=["English", "Spanish", "Portuguese"],
        ),
    ]


def search_providers(
    providers: Iterable[Provider],
    term: str = "",
    specialization: str = ALL_SPECIALIZATIONS,
) -> list[Provider]:
    """Filter providers by a free-text term and an exact specialization.

    The term matches case-insensitively against the name or any specialization.
    """
    needle = (term or "").strip().lower()
    matches = []
    for provider in providers:
        matches_term = needle in provider.name.lower() or any(
            needle in specialty.lower() for specialty in provider.specialization
        )
        matches_specialization = (
            not specialization
            or specialization == ALL_SPECIALIZATIONS
            or specialization in provider.specialization
        )
        if matches_term and matches_specialization:
            matches.append(provider)
    return matches


def list_specializations(providers: Iterable[Provider]) -> list[str]:
    return sorted({specialty for provider in providers for specialty in provider.specialization})
