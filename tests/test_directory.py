"""Tests for the provider directory and availability schemas."""
from datetime import date, datetime

import pytest
from pydantic import ValidationError

from mindcare_booking.directory import default_providers, list_specializations, search_providers
from mindcare_booking.scheduling.slots import Weekday, list_available_slots
from mindcare_booking.schemas import AvailabilityEntry, Provider


class TestSearchProviders:
    """Free-text and specialization filters."""

    def test_empty_filters_return_everyone(self):
        providers = default_providers()
        assert search_providers(providers) == providers

    def test_term_matches_name_case_insensitively(self):
        result = search_providers(default_providers(), term="sarah")
        assert [provider.id for provider in result] == ["1"]

    def test_term_matches_specialization_substring(self):
        result = search_providers(default_providers(), term="couples")
        assert [provider.id for provider in result] == ["2"]

    def test_specialization_is_exact(self):
        providers = default_providers()
        assert [p.id for p in search_providers(providers, specialization="CBT")] == ["1"]
        assert search_providers(providers, specialization="cbt") == []

    def test_filters_combine(self):
        assert search_providers(default_providers(), term="emily", specialization="CBT") == []

    def test_list_specializations(self):
        specs = list_specializations(default_providers())
        assert specs == sorted(specs)
        assert "EMDR" in specs and "Anxiety" in specs
        assert len(specs) == len(set(specs))


class TestDefaultRoster:
    def test_sarah_smith_works_weekdays(self):
        sarah = default_providers()[0]
        assert len(sarah.weekly_availability) == 45
        assert {entry.weekday for entry in sarah.weekly_availability} == {
            Weekday.MONDAY,
            Weekday.TUESDAY,
            Weekday.WEDNESDAY,
            Weekday.THURSDAY,
            Weekday.FRIDAY,
        }

    def test_provider_records_resolve_directly(self):
        sarah = default_providers()[0]
        now = datetime(2024, 1, 3, 15, 30)
        assert list_available_slots(sarah.weekly_availability, date(2024, 1, 3), now) == ["5:00 PM"]
        assert list_available_slots(sarah.weekly_availability, date(2024, 1, 7), now) == []


class TestAvailabilityEntry:
    """Template entries accept the compact string form."""

    def test_compact_string(self):
        entry = AvailabilityEntry.model_validate("Tuesday 2:00 PM")
        assert entry.weekday is Weekday.TUESDAY
        assert entry.time == "2:00 PM"

    def test_abbreviated_weekday(self):
        entry = AvailabilityEntry(weekday="Fri", time="9:00 AM")
        assert entry.weekday is Weekday.FRIDAY

    def test_provider_from_stored_record(self):
        provider = Provider.model_validate(
            {
                "id": "7",
                "name": "Dr. Lee",
                "hourly_rate": 100,
                "weekly_availability": ["Wednesday 9:00 AM", {"weekday": "Wednesday", "time": "1:00 PM"}],
            }
        )
        assert list_available_slots(provider.weekly_availability, date(2024, 1, 10), datetime(2024, 1, 3)) == [
            "9:00 AM",
            "1:00 PM",
        ]

    def test_invalid_weekday_rejected(self):
        with pytest.raises(ValidationError):
            AvailabilityEntry.model_validate("Someday 9:00 AM")
