from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class ConversationContext(str, Enum):
    booking = "booking"
    support = "support"
    sales = "sales"
    complaint = "complaint"
    general = "general"


class SuggestedAction(str, Enum):
    book_appointment = "BOOK_APPOINTMENT"
    reschedule_appointment = "RESCHEDULE_APPOINTMENT"
    cancel_appointment = "CANCEL_APPOINTMENT"
    show_pricing = "SHOW_PRICING"
    show_services = "SHOW_SERVICES"
    check_availability = "CHECK_AVAILABILITY"
    escalate_to_manager = "ESCALATE_TO_MANAGER"


@dataclass(frozen=True)
class PartialBookingRequest:
    """Whatever could be pulled out of one free-text message. Every field is optional."""

    service_id: str | None = None
    date: date | None = None
    time: int | None = None
    stylist_id: str | None = None
    booking_id: str | None = None
    reason: str | None = None
    date_was_explicit: bool = False

    @property
    def mentions_booking_details(self) -> bool:
        return bool(self.service_id or self.time is not None or self.date_was_explicit or self.stylist_id)


@dataclass(frozen=True)
class DispatchDecision:
    context: ConversationContext
    actions: tuple[SuggestedAction, ...] = ()
    request: PartialBookingRequest = field(default_factory=PartialBookingRequest)
