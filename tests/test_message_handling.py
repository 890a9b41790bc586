"""
End-to-end chat turns through HandleIncomingMessageUseCase.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from app.application.ports.message_platform import MessagePlatformPort
from app.application.use_cases.dispatch_message import ConversationDispatcher
from app.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from app.application.use_cases.send_reply import SendReplyUseCase
from app.application.utils.booking_extraction import KeywordBookingExtractor
from app.domain.entities.booking import BookingStatus
from app.domain.entities.message import Message
from app.infrastructure.crm.mock_crm import MockCrm
from app.infrastructure.store.memory_store import MemoryConversationStore
from app.infrastructure.whatsapp.whatsapp_platform import MockWhatsAppPlatform
from conftest import MONDAY, NOW, TZ, booking_request, build_salon

CUSTOMER = "27821234567"


class FailingPlatform(MessagePlatformPort):
    def send_text(self, recipient_id: str, text: str) -> None:
        raise RuntimeError("gateway down")


def _handler(platform: MessagePlatformPort | None = None, auto_reply: bool = True):
    salon = build_salon(crm=MockCrm())
    store = MemoryConversationStore()
    platform = platform or MockWhatsAppPlatform()
    handler = HandleIncomingMessageUseCase(
        store=store,
        dispatcher=ConversationDispatcher(KeywordBookingExtractor(salon.catalog)),
        bookings=salon.bookings,
        availability=salon.engine,
        catalog=salon.catalog,
        timezone=TZ,
        business_name="Glamour Hair Studio",
        crm=salon.crm,
        send_reply=SendReplyUseCase(platform=platform, auto_reply_enabled=auto_reply),
        clock=lambda: NOW,
    )
    return handler, salon, store, platform


def _msg(text: str, mid: str, sender: str = CUSTOMER, name: str | None = "Jane Doe") -> Message:
    return Message(id=mid, sender_id=sender, text=text, timestamp=int(NOW.timestamp()), contact_name=name)


def test_booking_message_books_and_replies():
    handler, salon, store, platform = _handler()

    result = handler.handle(_msg("I'd like to book a haircut on Monday at 10:00", "wamid.1"))

    assert result.context == "booking"
    assert result.actions[0].success is True
    booking_id = result.actions[0].data["booking_id"]
    booking = salon.bookings.get_booking(booking_id)
    assert booking.customer.name == "Jane Doe"
    assert booking.customer.phone == "+27821234567"
    assert booking.date == MONDAY
    assert "Booking Confirmed" in result.response_text
    assert platform.sent == [(CUSTOMER, result.response_text)]
    assert [e.booking.id for e in salon.crm.events] == [booking_id]

    history = store.get_history(CUSTOMER)
    assert [h["role"] for h in history] == ["user", "assistant"]
    assert store.get_state(CUSTOMER).last_context == "booking"
    assert store.get_state(CUSTOMER).last_outbound_at is not None
    assert store.get_profile(CUSTOMER).conversation_count == 1


def test_duplicate_message_ids_are_ignored():
    handler, salon, store, platform = _handler()
    handler.handle(_msg("book a haircut on Monday at 10:00", "wamid.dup"))

    again = handler.handle(_msg("book a haircut on Monday at 10:00", "wamid.dup"))

    assert again.duplicate is True
    assert len(salon.store.list_for_date(MONDAY)) == 1
    assert len(platform.sent) == 1


def test_booking_without_service_asks_to_choose():
    handler, salon, _, _ = _handler()
    result = handler.handle(_msg("I want to book an appointment", "wamid.2"))

    assert result.actions[0].requires_input is True
    assert "Please select a service" in result.response_text
    assert salon.store.list_for_date(MONDAY) == []


def test_follow_up_turn_completes_the_booking():
    handler, salon, _, _ = _handler()
    handler.handle(_msg("I want to book an appointment", "wamid.3"))

    result = handler.handle(_msg("Haircut on Monday at 11:00 please", "wamid.4"))

    assert result.context == "booking"
    assert "Booking Confirmed" in result.response_text
    assert len(salon.store.list_for_date(MONDAY)) == 1


def test_booking_without_time_lists_slots():
    handler, _, _, _ = _handler()
    result = handler.handle(_msg("book a haircut on Monday", "wamid.5"))

    assert result.actions[0].requires_input is True
    assert "Available Time Slots on 2024-01-15" in result.response_text
    assert "09:00 - 10:00" in result.response_text


def test_taken_slot_asks_for_another_time():
    handler, salon, _, _ = _handler()
    salon.bookings.create_booking(booking_request(customer_phone="+27829999999", time="10:00"))

    result = handler.handle(_msg("book a haircut on Monday at 10:00", "wamid.6"))

    assert result.actions[0].success is False
    assert result.actions[0].code == "SLOT_UNAVAILABLE"
    assert "pick another time" in result.response_text


def test_cancel_without_id_lists_customer_bookings():
    handler, salon, _, _ = _handler()
    mine = salon.bookings.create_booking(booking_request(time="10:00")).booking

    result = handler.handle(_msg("I need to cancel", "wamid.7"))

    assert result.actions[0].requires_input is True
    assert mine.id in result.response_text


def test_cancel_with_id_cancels_own_booking():
    handler, salon, _, _ = _handler()
    mine = salon.bookings.create_booking(booking_request(time="10:00")).booking

    result = handler.handle(_msg(f"cancel {mine.id} because I'm travelling", "wamid.8"))

    assert "Booking Cancelled" in result.response_text
    cancelled = salon.bookings.get_booking(mine.id)
    assert cancelled.status is BookingStatus.cancelled
    assert "travelling" in cancelled.cancellation_reason


def test_cannot_cancel_someone_elses_booking():
    handler, salon, _, _ = _handler()
    theirs = salon.bookings.create_booking(booking_request(customer_phone="+27829999999")).booking

    result = handler.handle(_msg(f"cancel {theirs.id}", "wamid.9"))

    assert result.actions[0].code == "NOT_FOUND"
    assert "doesn't exist" in result.response_text
    assert salon.bookings.get_booking(theirs.id).status is BookingStatus.confirmed


def test_cancel_with_no_bookings():
    handler, _, _, _ = _handler()
    result = handler.handle(_msg("please cancel", "wamid.10"))
    assert result.response_text == "No existing bookings found to cancel."


def test_reschedule_by_chat():
    handler, salon, _, _ = _handler()
    mine = salon.bookings.create_booking(booking_request(time="10:00")).booking

    result = handler.handle(_msg(f"reschedule {mine.id} to Tuesday at 15:00", "wamid.11"))

    assert "Booking Rescheduled" in result.response_text
    moved = salon.bookings.get_booking(mine.id)
    assert moved.date.isoformat() == "2024-01-16"
    assert moved.time == 15 * 60


def test_pricing_and_escalation():
    handler, salon, _, _ = _handler()

    pricing = handler.handle(_msg("what are your prices?", "wamid.12"))
    assert "Haircut & Styling: R250" in pricing.response_text

    complaint = handler.handle(_msg("I have a complaint, get me the manager", "wamid.13"))
    assert "TK00001" in complaint.response_text
    assert salon.crm.tickets[0][0].name == "Jane Doe"


def test_general_message_gets_welcome_text():
    handler, _, _, _ = _handler()
    result = handler.handle(_msg("hello", "wamid.14"))
    assert result.context == "general"
    assert "Welcome to Glamour Hair Studio" in result.response_text


def test_auto_reply_disabled_skips_delivery():
    platform = MockWhatsAppPlatform()
    handler, _, store, _ = _handler(platform=platform, auto_reply=False)
    handler.handle(_msg("hello", "wamid.15"))

    assert platform.sent == []
    assert store.get_state(CUSTOMER).last_outbound_at is None


def test_gateway_failure_keeps_the_booking():
    handler, salon, store, _ = _handler(platform=FailingPlatform())

    result = handler.handle(_msg("book a haircut on Monday at 10:00", "wamid.16"))

    assert result.actions[0].success is True
    assert len(salon.store.list_for_date(MONDAY)) == 1
    assert store.get_state(CUSTOMER).last_outbound_at is None


def test_evening_booking_ends_at_closing():
    handler, salon, _, _ = _handler()

    result = handler.handle(_msg("I'd like to book a haircut tomorrow evening", "wamid.17"))

    assert result.actions[0].success is True
    booking = salon.bookings.get_booking(result.actions[0].data["booking_id"])
    assert booking.date == NOW.date() + timedelta(days=1)
    assert booking.time == 17 * 60
    assert booking.end_time == 18 * 60


class RacingStore(MemoryConversationStore):
    """Lines up concurrent deliveries right before the dedupe check."""

    def __init__(self, parties: int) -> None:
        super().__init__()
        self.barrier = threading.Barrier(parties)

    def mark_processed(self, message_id: str) -> bool:
        self.barrier.wait()
        return super().mark_processed(message_id)


def test_concurrent_redelivery_is_handled_once():
    salon = build_salon()
    platform = MockWhatsAppPlatform()
    handler = HandleIncomingMessageUseCase(
        store=RacingStore(parties=2),
        dispatcher=ConversationDispatcher(KeywordBookingExtractor(salon.catalog)),
        bookings=salon.bookings,
        availability=salon.engine,
        catalog=salon.catalog,
        timezone=TZ,
        business_name="Glamour Hair Studio",
        send_reply=SendReplyUseCase(platform=platform, auto_reply_enabled=True),
        clock=lambda: NOW,
    )
    message = _msg("book a haircut tomorrow at 10:00", "wamid.race")

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(handler.handle, [message, message]))

    assert sorted(r.duplicate for r in results) == [False, True]
    assert len(salon.store.list_for_date(NOW.date() + timedelta(days=1))) == 1
    assert len(platform.sent) == 1
