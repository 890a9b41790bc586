from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.application.exceptions import BookingError, InternalError, NotFoundError
from app.application.ports.analytics import AnalyticsPort
from app.application.ports.catalog import CatalogPort
from app.application.ports.conversation_store import ConversationStorePort
from app.application.ports.crm import CrmSyncPort
from app.application.use_cases.availability import AvailabilityEngine
from app.application.use_cases.booking import BookingUseCase
from app.application.use_cases.dispatch_message import ConversationDispatcher
from app.application.use_cases.reply_composer import (
    availability_message,
    booking_selection_message,
    compose_reply,
    escalation_message,
    general_message,
    no_bookings_message,
    pricing_message,
    service_selection_message,
    services_message,
)
from app.application.use_cases.send_reply import SendReplyUseCase
from app.application.utils.validation import normalize_phone, validate_name
from app.domain.entities.analytics import ConversationRecord
from app.domain.entities.booking import Booking, CustomerIdentity
from app.domain.entities.booking_request import BookingRequest
from app.domain.entities.conversation_state import ConversationState
from app.domain.entities.intent import PartialBookingRequest, SuggestedAction
from app.domain.entities.message import Message
from app.domain.entities.profile import CustomerProfile
from app.domain.entities.reply import ActionResult, MessageResult


class HandleIncomingMessageUseCase:
    """
    One chat turn: dedupe, refresh the customer's profile, dispatch, run the
    suggested actions against the booking core and answer in a single reply.

    Booking errors are translated to chat text here; nothing raised by the
    core escapes to the gateway.
    """

    def __init__(
        self,
        store: ConversationStorePort,
        dispatcher: ConversationDispatcher,
        bookings: BookingUseCase,
        availability: AvailabilityEngine,
        catalog: CatalogPort,
        timezone: ZoneInfo,
        business_name: str,
        crm: CrmSyncPort | None = None,
        send_reply: SendReplyUseCase | None = None,
        currency: str = "R",
        clock: Callable[[], datetime] | None = None,
        analytics: AnalyticsPort | None = None,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._bookings = bookings
        self._availability = availability
        self._catalog = catalog
        self._timezone = timezone
        self._business_name = business_name
        self._crm = crm
        self._send_reply = send_reply
        self._currency = currency
        self._clock = clock
        self._analytics = analytics
        self._logger = logging.getLogger(__name__)

    def handle(self, message: Message) -> MessageResult:
        if not self._store.mark_processed(message.id):
            self._logger.info("Duplicate message ignored", extra={"message_id": message.id})
            return MessageResult(response_text="", context="general", duplicate=True)

        started = time.perf_counter()
        now = self._now()
        now_ts = now.timestamp()
        customer_id = message.sender_id

        profile = self._store.get_profile(customer_id) or CustomerProfile.from_contact(customer_id, None)
        profile = profile.touched(now_ts, message.contact_name)
        self._store.save_profile(profile)

        history = self._store.get_history(customer_id)
        decision = self._dispatcher.dispatch(message.text, history, profile, today=now.date())

        results = [self._execute(action, decision.request, profile, message.text) for action in decision.actions]
        response_text = compose_reply([r.message for r in results], fallback=general_message(self._business_name))

        context = decision.context.value
        self._store.append_message(
            customer_id,
            role="user",
            text=message.text,
            meta={"message_id": message.id, "context": context, "ts": now_ts},
        )
        self._store.append_message(customer_id, role="assistant", text=response_text, meta={"context": context, "ts": now_ts})

        state = replace(
            self._store.get_state(customer_id),
            last_context=context,
            last_actions=tuple(a.value for a in decision.actions),
            last_seen_at=now_ts,
        )
        if self._deliver(customer_id, response_text, message.id):
            state = replace(state, last_outbound_at=now_ts)
        self._store.set_state(customer_id, state)
        self._track_conversation(message, context, now, started)

        self._logger.info(
            "Message handled",
            extra={"message_id": message.id, "context": context, "actions": ",".join(a.value for a in decision.actions)},
        )
        return MessageResult(response_text=response_text, context=context, actions=results)

    def _execute(
        self,
        action: SuggestedAction,
        request: PartialBookingRequest,
        profile: CustomerProfile,
        text: str,
    ) -> ActionResult:
        try:
            if action is SuggestedAction.book_appointment:
                return self._book(request, profile, text)
            if action is SuggestedAction.cancel_appointment:
                return self._cancel(request, profile)
            if action is SuggestedAction.reschedule_appointment:
                return self._reschedule(request, profile)
            if action is SuggestedAction.check_availability:
                return self._check_availability(request)
            if action is SuggestedAction.show_pricing:
                return _ok(action, pricing_message(self._catalog.list_services(), self._currency))
            if action is SuggestedAction.show_services:
                return _ok(action, services_message(self._catalog.list_services()))
            if action is SuggestedAction.escalate_to_manager:
                return self._escalate(profile, text)
        except BookingError as e:
            self._logger.info("Action rejected", extra={"action": action.value, "code": e.code, "reason": e.message})
            return ActionResult(action=action.value, success=False, message=e.message, code=e.code)
        except Exception:
            self._logger.exception("Action failed", extra={"action": action.value})
            return ActionResult(
                action=action.value,
                success=False,
                message=InternalError.user_message,
                code=InternalError.code,
            )
        return ActionResult(action=action.value, success=False, message="")

    def _book(self, request: PartialBookingRequest, profile: CustomerProfile, text: str) -> ActionResult:
        action = SuggestedAction.book_appointment
        if not request.service_id:
            return _ask(action, service_selection_message(self._catalog.list_services(), self._currency))
        if request.time is None:
            return _ask(action, self._slots_text(request.date, request.service_id, request.stylist_id))

        outcome = self._bookings.create_booking(
            BookingRequest(
                customer_name=profile.name if not validate_name(profile.name) else "Customer",
                customer_phone=profile.phone,
                customer_email=profile.email,
                service_id=request.service_id,
                date=request.date,
                time=request.time,
                stylist_id=request.stylist_id,
                notes=text,
            )
        )
        return _ok(action, outcome.message, booking_id=outcome.booking.id)

    def _cancel(self, request: PartialBookingRequest, profile: CustomerProfile) -> ActionResult:
        action = SuggestedAction.cancel_appointment
        if not request.booking_id:
            active = self._active_bookings(profile)
            if not active:
                return ActionResult(action=action.value, success=False, message=no_bookings_message(for_cancel=True))
            return _ask(action, booking_selection_message(active, "cancel"))

        self._require_own_booking(request.booking_id, profile)
        outcome = self._bookings.cancel_booking(request.booking_id, request.reason)
        return _ok(action, outcome.message, booking_id=outcome.booking.id)

    def _reschedule(self, request: PartialBookingRequest, profile: CustomerProfile) -> ActionResult:
        action = SuggestedAction.reschedule_appointment
        if not request.booking_id:
            active = self._active_bookings(profile)
            if not active:
                return ActionResult(action=action.value, success=False, message=no_bookings_message(for_cancel=False))
            return _ask(action, booking_selection_message(active, "reschedule"))

        booking = self._require_own_booking(request.booking_id, profile)
        if request.time is None:
            return _ask(action, self._slots_text(request.date, booking.service_id, booking.stylist_id))

        outcome = self._bookings.reschedule_booking(booking.id, request.date, request.time)
        return _ok(action, outcome.message, booking_id=outcome.booking.id)

    def _check_availability(self, request: PartialBookingRequest) -> ActionResult:
        action = SuggestedAction.check_availability
        if not request.service_id:
            return _ask(action, service_selection_message(self._catalog.list_services(), self._currency))
        return _ok(action, self._slots_text(request.date, request.service_id, request.stylist_id))

    def _escalate(self, profile: CustomerProfile, text: str) -> ActionResult:
        ticket_id = None
        if self._crm is not None:
            customer = CustomerIdentity(phone=profile.phone, name=profile.name, email=profile.email)
            try:
                ticket_id = self._crm.escalate(customer, text)
            except Exception:
                self._logger.exception("CRM escalation failed", extra={"customer_id": profile.phone})
        return _ok(SuggestedAction.escalate_to_manager, escalation_message(ticket_id), ticket_id=ticket_id)

    def _slots_text(self, day: date | None, service_id: str, stylist_id: str | None) -> str:
        slots = self._availability.get_available_slots(day or self._now().date(), service_id, stylist_id)
        return availability_message(slots)

    def _active_bookings(self, profile: CustomerProfile) -> list[Booking]:
        return [b for b in self._bookings.list_customer_bookings(profile.phone) if b.is_active]

    def _require_own_booking(self, booking_id: str, profile: CustomerProfile) -> Booking:
        booking = self._bookings.get_booking(booking_id)
        if booking is None or booking.customer.phone != normalize_phone(profile.phone):
            raise NotFoundError(f"Booking {booking_id} doesn't exist. Please check the booking ID.")
        return booking

    def _deliver(self, recipient_id: str, text: str, message_id: str) -> bool:
        if self._send_reply is None:
            return False
        try:
            sent = self._send_reply.execute(recipient_id=recipient_id, text=text)
        except Exception:
            self._logger.exception("Reply delivery failed", extra={"message_id": message_id})
            return False
        if sent:
            self._logger.info("Reply sent", extra={"message_id": message_id})
        return sent

    def _track_conversation(self, message: Message, context: str, now: datetime, started: float) -> None:
        if self._analytics is None:
            return
        record = ConversationRecord(
            customer_id=message.sender_id,
            channel=message.platform,
            context=context,
            response_time_ms=round((time.perf_counter() - started) * 1000),
            at=now,
        )
        try:
            self._analytics.record_conversation(record)
        except Exception:
            self._logger.exception("Analytics tracking failed", extra={"message_id": message.id})

    def _now(self) -> datetime:
        now = self._clock() if self._clock else datetime.now(self._timezone)
        if now.tzinfo is None:
            return now.replace(tzinfo=self._timezone)
        return now.astimezone(self._timezone)


def _ok(action: SuggestedAction, message: str, **data) -> ActionResult:
    return ActionResult(action=action.value, success=True, message=message, data=data)


def _ask(action: SuggestedAction, message: str) -> ActionResult:
    return ActionResult(action=action.value, success=True, message=message, requires_input=True)
