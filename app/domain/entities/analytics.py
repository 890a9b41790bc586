from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime

from app.domain.entities.booking import Booking


@dataclass(frozen=True)
class ConversationRecord:
    customer_id: str
    channel: str
    context: str
    response_time_ms: int
    at: datetime


@dataclass(frozen=True)
class BookingRecord:
    booking_id: str
    customer_id: str
    service_name: str
    stylist_id: str | None
    value: int
    booked_for: date
    at: datetime
    cancelled_at: datetime | None = None

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingRecord":
        return cls(
            booking_id=booking.id,
            customer_id=booking.customer.phone,
            service_name=booking.service_name,
            stylist_id=booking.stylist_id,
            value=booking.price,
            booked_for=booking.date,
            at=booking.created_at,
        )

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled_at is not None

    def cancelled(self, at: datetime) -> "BookingRecord":
        return replace(self, cancelled_at=at)
