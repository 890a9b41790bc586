"""
Tests for context classification, suggested actions and keyword extraction.
"""

from __future__ import annotations

from datetime import date, timedelta

from app.application.use_cases.dispatch_message import ConversationDispatcher
from app.application.utils.booking_extraction import KeywordBookingExtractor
from app.domain.entities.intent import ConversationContext, SuggestedAction
from app.infrastructure.knowledge.catalog_store import StaticCatalog

TODAY = date(2024, 1, 10)  # Wednesday


def _dispatcher() -> ConversationDispatcher:
    return ConversationDispatcher(KeywordBookingExtractor(StaticCatalog()))


def _dispatch(text: str, history=None):
    return _dispatcher().dispatch(text, history or [], None, today=TODAY)


def test_booking_message_extracts_details():
    decision = _dispatch("Hi, I'd like to book a haircut with Sarah on Monday at 2pm")

    assert decision.context is ConversationContext.booking
    assert decision.actions == (SuggestedAction.book_appointment,)
    assert decision.request.service_id == "haircut"
    assert decision.request.stylist_id == "sarah"
    assert decision.request.date == date(2024, 1, 15)
    assert decision.request.time == 14 * 60


def test_cancel_wording_suppresses_booking():
    decision = _dispatch("Please cancel my appointment BK1A2B3C4D5E because I'm sick")

    assert SuggestedAction.cancel_appointment in decision.actions
    assert SuggestedAction.book_appointment not in decision.actions
    assert decision.request.booking_id == "BK1A2B3C4D5E"
    assert "sick" in decision.request.reason


def test_reschedule_wording_suppresses_booking():
    decision = _dispatch("Can I reschedule my booking to Friday at 11:00?")

    assert decision.actions[0] is SuggestedAction.reschedule_appointment
    assert SuggestedAction.book_appointment not in decision.actions
    assert decision.context is ConversationContext.booking


def test_price_question_is_sales():
    decision = _dispatch("How much does balayage cost?")
    assert decision.context is ConversationContext.sales
    assert decision.actions == (SuggestedAction.show_pricing,)


def test_complaint_escalates():
    decision = _dispatch("I have a complaint about my last visit, I want the manager")
    assert decision.context is ConversationContext.complaint
    assert SuggestedAction.escalate_to_manager in decision.actions


def test_services_and_availability_questions():
    assert _dispatch("What services do you offer?").actions == (SuggestedAction.show_services,)
    decision = _dispatch("Is there any time free for a haircut tomorrow?")
    assert SuggestedAction.check_availability in decision.actions


def test_plain_greeting_is_general_without_actions():
    decision = _dispatch("hello there")
    assert decision.context is ConversationContext.general
    assert decision.actions == ()
    # no date mentioned: defaults to tomorrow
    assert decision.request.date == TODAY + timedelta(days=1)
    assert decision.request.date_was_explicit is False


def test_follow_up_continues_a_booking_turn():
    history = [
        {"role": "user", "content": "I want to book", "meta": {"context": "booking"}},
        {"role": "assistant", "content": "Please select a service:", "meta": {"context": "booking"}},
    ]
    decision = _dispatch("A haircut at 10:00 please", history)

    assert decision.context is ConversationContext.booking
    assert decision.actions == (SuggestedAction.book_appointment,)
    assert decision.request.time == 600


def test_follow_up_needs_booking_history():
    assert _dispatch("A haircut at 10:00 please").actions == ()

    history = [{"role": "user", "content": "how much?", "meta": {"context": "sales"}}]
    assert _dispatch("A haircut at 10:00 please", history).actions == ()


def test_vague_time_of_day_maps_to_clock_time():
    decision = _dispatch("book mens grooming tomorrow afternoon")
    assert decision.request.service_id == "mens"
    assert decision.request.time == 14 * 60
    assert decision.request.date == date(2024, 1, 11)
    assert decision.request.date_was_explicit is True
