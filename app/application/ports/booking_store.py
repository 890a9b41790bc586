from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date

from app.domain.entities.booking import Booking


class BookingStorePort(ABC):
    """
    Owns the set of bookings. Writes are serialized by the store itself;
    reads return snapshots and are safe to run concurrently with writes.
    """

    @abstractmethod
    def get(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def add(self, booking: Booking) -> None:
        """Insert a new booking. Raises ValueError if the id is already taken."""
        raise NotImplementedError

    @abstractmethod
    def replace(self, booking: Booking) -> None:
        """Overwrite an existing booking with an updated copy, re-indexing by date if it moved."""
        raise NotImplementedError

    @abstractmethod
    def list_for_date(self, day: date) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def list_for_customer(self, phone: str) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Exclusive write section: reads and writes inside it see no interleaved writers."""
        raise NotImplementedError
