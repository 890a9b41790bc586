from __future__ import annotations

from datetime import date
from typing import Any

from app.application.ports.booking_extractor import BookingExtractorPort
from app.application.utils.message_rules import (
    COMPLAINT_KEYWORDS,
    SALES_KEYWORDS,
    SUPPORT_KEYWORDS,
    asks_about_availability,
    asks_about_services,
    contains_any,
    has_price_intent,
    is_booking_request,
    is_cancel_request,
    is_complaint,
    is_reschedule_request,
)
from app.domain.entities.intent import (
    ConversationContext,
    DispatchDecision,
    PartialBookingRequest,
    SuggestedAction,
)
from app.domain.entities.profile import CustomerProfile


def determine_context(text: str) -> ConversationContext:
    if is_booking_request(text):
        return ConversationContext.booking
    if contains_any(text, SUPPORT_KEYWORDS):
        return ConversationContext.support
    if contains_any(text, SALES_KEYWORDS):
        return ConversationContext.sales
    if contains_any(text, COMPLAINT_KEYWORDS):
        return ConversationContext.complaint
    return ConversationContext.general


def last_user_context(history: list[dict[str, Any]]) -> str | None:
    for entry in reversed(history):
        if entry.get("role") == "user":
            return (entry.get("meta") or {}).get("context")
    return None


def suggest_actions(
    text: str,
    request: PartialBookingRequest,
    previous_context: str | None,
) -> tuple[SuggestedAction, ...]:
    actions: list[SuggestedAction] = []

    cancel = is_cancel_request(text)
    reschedule = is_reschedule_request(text) and not cancel
    if cancel:
        actions.append(SuggestedAction.cancel_appointment)
    if reschedule:
        actions.append(SuggestedAction.reschedule_appointment)

    book = not (cancel or reschedule) and (
        is_booking_request(text)
        or (previous_context == ConversationContext.booking.value and request.mentions_booking_details)
    )
    if book:
        actions.append(SuggestedAction.book_appointment)
    elif not (cancel or reschedule) and asks_about_availability(text):
        actions.append(SuggestedAction.check_availability)

    if has_price_intent(text):
        actions.append(SuggestedAction.show_pricing)
    elif asks_about_services(text) and not book:
        actions.append(SuggestedAction.show_services)

    if is_complaint(text):
        actions.append(SuggestedAction.escalate_to_manager)

    return tuple(actions)


class ConversationDispatcher:
    """
    Pure mapping from (message, retained history, profile) to a context and
    suggested actions. Never touches booking state.
    """

    def __init__(self, extractor: BookingExtractorPort) -> None:
        self._extractor = extractor

    def dispatch(
        self,
        text: str,
        history: list[dict[str, Any]],
        profile: CustomerProfile | None,
        today: date | None = None,
    ) -> DispatchDecision:
        request = self._extractor.extract(text, today or date.today())
        previous_context = last_user_context(history)

        context = determine_context(text)
        actions = suggest_actions(text, request, previous_context)
        if context is ConversationContext.general and SuggestedAction.book_appointment in actions:
            # Follow-up turn of a booking conversation ("haircut at 10:00 please").
            context = ConversationContext.booking

        return DispatchDecision(context=context, actions=actions, request=request)
