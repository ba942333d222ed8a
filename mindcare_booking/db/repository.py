from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from ..directory import default_providers
from ..schemas import Booking, Provider


class BookingRepository(Protocol):
    def save(self, booking: Booking) -> Booking:
        ...

    def list(self) -> list[Booking]:
        ...


class ProviderRepository(Protocol):
    def list(self) -> list[Provider]:
        ...

    def get(self, provider_id: str) -> Provider | None:
        ...


@dataclass
class InMemoryBookingRepository:
    store: list[Booking] = field(default_factory=list)

    def save(self, booking: Booking) -> Booking:
        self.store.append(booking)
        return booking

    def list(self) -> list[Booking]:
        return list(self.store)


@dataclass
class InMemoryProviderRepository:
    store: dict[str, Provider] = field(default_factory=dict)

    @classmethod
    def seeded(cls) -> "InMemoryProviderRepository":
        return cls({provider.id: provider for provider in default_providers()})

    def list(self) -> list[Provider]:
        return list(self.store.values())

    def get(self, provider_id: str) -> Provider | None:
        return self.store.get(provider_id)


class SupabaseBookingRepository:
    def __init__(self, client) -> None:
        self.client = client

    def save(self, booking: Booking) -> Booking:
        payload = booking.model_dump(mode="json")
        self.client.table("bookings").insert(payload).execute()
        return booking

    def list(self) -> list[Booking]:
        response = self.client.table("bookings").select("*").order("created_at").execute()
        return [Booking(**row) for row in response.data or []]


class SupabaseProviderRepository:
    def __init__(self, client) -> None:
        self.client = client

    def list(self) -> list[Provider]:
        response = self.client.table("providers").select("*").execute()
        return [Provider(**row) for row in response.data or []]

    def get(self, provider_id: str) -> Provider | None:
        response = self.client.table("providers").select("*").eq("id", provider_id).execute()
        rows = response.data or []
        return Provider(**rows[0]) if rows else None


def build_repositories(
    storage_backend: str,
    supabase_url: str | None = None,
    supabase_key: str | None = None,
) -> tuple[BookingRepository, ProviderRepository]:
    if storage_backend == "memory":
        return InMemoryBookingRepository(), InMemoryProviderRepository.seeded()
    if storage_backend != "supabase":
        raise ValueError(f"Unknown storage backend {storage_backend!r} (expected 'memory' or 'supabase').")
    if not supabase_url or not supabase_key:
        raise ValueError("Missing Supabase configuration (SUPABASE_URL/SUPABASE_KEY).")

    from supabase import create_client

    client = create_client(supabase_url, supabase_key)
    return SupabaseBookingRepository(client), SupabaseProviderRepository(client)
