from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class BookingRequest:
    customer_name: str | None
    customer_phone: str | None
    service_id: str | None
    date: date | str | None
    time: int | str | None
    customer_email: str | None = None
    stylist_id: str | None = None
    notes: str = ""
