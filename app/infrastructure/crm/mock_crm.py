from __future__ import annotations

import itertools
import logging

from app.application.ports.crm import BookingCreatedEvent, CrmSyncPort
from app.domain.entities.booking import CustomerIdentity


class MockCrm(CrmSyncPort):
    def __init__(self) -> None:
        self.events: list[BookingCreatedEvent] = []
        self.tickets: list[tuple[CustomerIdentity, str]] = []
        self._ticket_ids = itertools.count(1)
        self._logger = logging.getLogger(__name__)

    def booking_created(self, event: BookingCreatedEvent) -> None:
        self.events.append(event)
        self._logger.info("Mock CRM booking sync", extra={"booking_id": event.booking.id})

    def escalate(self, customer: CustomerIdentity, message: str) -> str | None:
        self.tickets.append((customer, message))
        ticket_id = f"TK{next(self._ticket_ids):05d}"
        self._logger.info("Mock CRM ticket opened", extra={"ticket_id": ticket_id})
        return ticket_id
