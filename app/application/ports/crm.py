from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.domain.entities.booking import Booking, CustomerIdentity


@dataclass(frozen=True)
class BookingCreatedEvent:
    customer: CustomerIdentity
    booking: Booking


class CrmSyncPort(ABC):
    @abstractmethod
    def booking_created(self, event: BookingCreatedEvent) -> None:
        """Deliver a booking snapshot to the CRM. Retries are the adapter's business."""
        raise NotImplementedError

    @abstractmethod
    def escalate(self, customer: CustomerIdentity, message: str) -> str | None:
        """Open a high-priority ticket. Returns the ticket reference if one was created."""
        raise NotImplementedError
