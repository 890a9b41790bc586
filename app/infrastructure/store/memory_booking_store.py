from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date

from app.application.ports.booking_store import BookingStorePort
from app.domain.entities.booking import Booking


class MemoryBookingStore(BookingStorePort):
    """
    In-process booking arena indexed by id, with secondary indexes by date
    (for availability scans) and by customer phone.

    A single re-entrant lock serializes writers. Bookings are frozen
    dataclasses, so readers get consistent snapshots without copying.
    """

    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}
        self._by_date: dict[date, set[str]] = {}
        self._by_phone: dict[str, list[str]] = {}
        self._write_lock = threading.RLock()

    def get(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    def add(self, booking: Booking) -> None:
        with self._write_lock:
            if booking.id in self._bookings:
                raise ValueError(f"Booking id {booking.id} already exists")
            self._bookings[booking.id] = booking
            self._by_date.setdefault(booking.date, set()).add(booking.id)
            self._by_phone.setdefault(booking.customer.phone, []).append(booking.id)

    def replace(self, booking: Booking) -> None:
        with self._write_lock:
            previous = self._bookings.get(booking.id)
            if previous is None:
                raise KeyError(booking.id)
            if previous.date != booking.date:
                ids = self._by_date.get(previous.date)
                if ids is not None:
                    ids.discard(booking.id)
                    if not ids:
                        del self._by_date[previous.date]
                self._by_date.setdefault(booking.date, set()).add(booking.id)
            self._bookings[booking.id] = booking

    def list_for_date(self, day: date) -> list[Booking]:
        with self._write_lock:
            ids = list(self._by_date.get(day, ()))
            bookings = [self._bookings[i] for i in ids]
        return sorted(bookings, key=lambda b: (b.time, b.id))

    def list_for_customer(self, phone: str) -> list[Booking]:
        with self._write_lock:
            ids = list(self._by_phone.get(phone, ()))
            return [self._bookings[i] for i in ids]

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._write_lock:
            yield
