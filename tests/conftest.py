from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from app.application.ports.analytics import AnalyticsPort
from app.application.ports.crm import CrmSyncPort
from app.application.use_cases.availability import AvailabilityEngine
from app.application.use_cases.booking import BookingUseCase
from app.domain.entities.booking_request import BookingRequest
from app.infrastructure.cache.availability_cache import AvailabilityCache
from app.infrastructure.crm.mock_crm import MockCrm
from app.infrastructure.knowledge.catalog_store import StaticCatalog
from app.infrastructure.locks.slot_lock_manager import SlotLockManager
from app.infrastructure.store.memory_booking_store import MemoryBookingStore

TZ = ZoneInfo("Africa/Johannesburg")
# Wednesday morning, before every date the tests book.
NOW = datetime(2024, 1, 10, 8, 0, tzinfo=TZ)
MONDAY = date(2024, 1, 15)
SATURDAY = date(2024, 1, 13)
SUNDAY = date(2024, 1, 14)


@dataclass
class Salon:
    catalog: StaticCatalog
    store: MemoryBookingStore
    cache: AvailabilityCache
    engine: AvailabilityEngine
    locks: SlotLockManager
    crm: CrmSyncPort | None
    bookings: BookingUseCase


def build_salon(now: datetime = NOW, crm: CrmSyncPort | None = None, analytics: AnalyticsPort | None = None) -> Salon:
    catalog = StaticCatalog()
    store = MemoryBookingStore()
    cache = AvailabilityCache()
    engine = AvailabilityEngine(catalog=catalog, store=store, cache=cache)
    locks = SlotLockManager()
    bookings = BookingUseCase(
        store=store,
        availability=engine,
        locks=locks,
        timezone=TZ,
        crm=crm,
        clock=lambda: now,
        analytics=analytics,
    )
    return Salon(catalog, store, cache, engine, locks, crm, bookings)


def booking_request(**overrides) -> BookingRequest:
    fields = {
        "customer_name": "Jane Doe",
        "customer_phone": "+27821234567",
        "service_id": "haircut",
        "date": MONDAY.isoformat(),
        "time": "10:00",
    }
    fields.update(overrides)
    return BookingRequest(**fields)


@pytest.fixture
def salon() -> Salon:
    return build_salon(crm=MockCrm())
