from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum


class BookingStatus(str, Enum):
    confirmed = "confirmed"
    cancelled = "cancelled"


@dataclass(frozen=True)
class CustomerIdentity:
    phone: str
    name: str
    email: str | None = None


@dataclass(frozen=True)
class Booking:
    id: str
    customer: CustomerIdentity
    service_id: str
    service_name: str
    date: date
    time: int  # minute of day
    duration_minutes: int  # frozen at creation
    price: int  # frozen at creation
    stylist_id: str | None = None
    stylist_name: str = "Any Available"
    status: BookingStatus = BookingStatus.confirmed
    notes: str = ""
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def end_time(self) -> int:
        return self.time + self.duration_minutes

    @property
    def is_active(self) -> bool:
        return self.status is BookingStatus.confirmed

    def cancelled(self, reason: str, at: datetime) -> "Booking":
        return replace(self, status=BookingStatus.cancelled, cancellation_reason=reason, updated_at=at)

    def moved_to(self, new_date: date, new_time: int, at: datetime) -> "Booking":
        return replace(self, date=new_date, time=new_time, updated_at=at)
