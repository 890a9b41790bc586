from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.application.exceptions import (
    AlreadyCancelledError,
    InvalidInputError,
    NotFoundError,
    PastDateError,
    SlotUnavailableError,
)
from app.application.ports.analytics import AnalyticsPort
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.crm import BookingCreatedEvent, CrmSyncPort
from app.application.use_cases.availability import AvailabilityEngine
from app.application.use_cases.reply_composer import (
    booking_confirmation,
    cancellation_confirmation,
    reschedule_confirmation,
)
from app.application.utils.time_format import coerce_minute_of_day, combine, parse_iso_date
from app.application.utils.validation import (
    normalize_phone,
    validate_email,
    validate_name,
    validate_phone,
)
from app.domain.entities.analytics import BookingRecord
from app.domain.entities.booking import Booking, BookingStatus, CustomerIdentity
from app.domain.entities.booking_request import BookingRequest
from app.infrastructure.locks.slot_lock_manager import SlotKey, SlotLockManager


@dataclass(frozen=True)
class BookingOutcome:
    booking: Booking
    message: str


class BookingUseCase:
    """
    Create, cancel and reschedule bookings.

    Each operation either fully applies or raises a BookingError with nothing
    mutated. Create and reschedule hold the destination slot lock while they
    re-check the store and commit.
    """

    def __init__(
        self,
        store: BookingStorePort,
        availability: AvailabilityEngine,
        locks: SlotLockManager,
        timezone: ZoneInfo,
        crm: CrmSyncPort | None = None,
        clock: Callable[[], datetime] | None = None,
        currency: str = "R",
        analytics: AnalyticsPort | None = None,
    ) -> None:
        self._store = store
        self._availability = availability
        self._locks = locks
        self._timezone = timezone
        self._crm = crm
        self._clock = clock
        self._currency = currency
        self._analytics = analytics
        self._logger = logging.getLogger(__name__)

    def create_booking(self, request: BookingRequest) -> BookingOutcome:
        missing = [
            name
            for name, value in (
                ("customer name", request.customer_name),
                ("customer phone", request.customer_phone),
                ("service", request.service_id),
                ("date", request.date),
                ("time", request.time),
            )
            if value is None or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            raise InvalidInputError(
                "Missing required booking information: " + ", ".join(missing),
                errors=[f"{name} is required" for name in missing],
            )

        errors: list[str] = []
        for error in (
            validate_name(request.customer_name),
            validate_phone(request.customer_phone),
            validate_email(request.customer_email) if request.customer_email else None,
        ):
            if error:
                errors.append(error)
        day, minute = self._parse_slot(request.date, request.time, errors)
        if errors:
            raise InvalidInputError(errors=errors)

        service = self._availability.require_service(request.service_id)
        stylist = self._availability.require_stylist(request.stylist_id) if request.stylist_id else None
        if stylist is not None and not stylist.offers(service.id):
            raise InvalidInputError(f"{stylist.name} does not offer {service.name}")

        self._ensure_future(day, minute)
        if not self._availability.fits_business_hours(day, minute, service.duration_minutes):
            raise SlotUnavailableError("That time is outside our opening hours. Please pick another time.")

        customer = CustomerIdentity(
            phone=normalize_phone(request.customer_phone),
            name=request.customer_name.strip(),
            email=request.customer_email.strip().lower() if request.customer_email else None,
        )
        stylist_id = stylist.id if stylist else None

        with self._locks.hold(SlotKey(date=day, time=minute, service_id=service.id)):
            with self._store.atomic():
                if not self._availability.is_slot_free_now(day, minute, service.id, stylist_id):
                    raise SlotUnavailableError()
                now = self._now()
                booking = Booking(
                    id=self._new_booking_id(),
                    customer=customer,
                    service_id=service.id,
                    service_name=service.name,
                    date=day,
                    time=minute,
                    duration_minutes=service.duration_minutes,
                    price=service.price,
                    stylist_id=stylist_id,
                    stylist_name=stylist.name if stylist else "Any Available",
                    status=BookingStatus.confirmed,
                    notes=request.notes or "",
                    created_at=now,
                    updated_at=now,
                )
                self._store.add(booking)
            self._availability.invalidate(day)

        self._logger.info(
            "Booking created",
            extra={"booking_id": booking.id, "service": booking.service_id, "date": day.isoformat(), "time": minute},
        )
        self._publish_created(booking)
        self._track(lambda a: a.record_booking(BookingRecord.from_booking(booking)), booking.id)
        return BookingOutcome(booking=booking, message=booking_confirmation(booking, self._currency))

    def cancel_booking(self, booking_id: str, reason: str | None = None) -> BookingOutcome:
        reason = (reason or "").strip() or "Customer request"
        with self._store.atomic():
            booking = self._require_booking(booking_id)
            if booking.status is BookingStatus.cancelled:
                raise AlreadyCancelledError()
            cancelled = booking.cancelled(reason=reason, at=self._now())
            self._store.replace(cancelled)
        self._availability.invalidate(cancelled.date)

        self._logger.info("Booking cancelled", extra={"booking_id": cancelled.id, "reason": reason})
        self._track(lambda a: a.record_cancellation(cancelled.id, cancelled.updated_at or self._now()), cancelled.id)
        return BookingOutcome(booking=cancelled, message=cancellation_confirmation(cancelled))

    def reschedule_booking(self, booking_id: str, new_date: date | str, new_time: int | str) -> BookingOutcome:
        errors: list[str] = []
        day, minute = self._parse_slot(new_date, new_time, errors)
        if errors:
            raise InvalidInputError(errors=errors)

        booking = self._require_booking(booking_id)
        if booking.status is BookingStatus.cancelled:
            raise AlreadyCancelledError("Cannot reschedule a cancelled booking.")

        self._ensure_future(day, minute)
        if not self._availability.fits_business_hours(day, minute, booking.duration_minutes):
            raise SlotUnavailableError("That time is outside our opening hours. Please pick another time.")

        with self._locks.hold(SlotKey(date=day, time=minute, service_id=booking.service_id)):
            with self._store.atomic():
                # Re-read under the write lock; a concurrent cancel may have landed.
                current = self._require_booking(booking_id)
                if current.status is BookingStatus.cancelled:
                    raise AlreadyCancelledError("Cannot reschedule a cancelled booking.")
                free = self._availability.is_slot_free_now(
                    day,
                    minute,
                    current.service_id,
                    current.stylist_id,
                    ignore_booking_id=current.id,
                    duration_minutes=current.duration_minutes,
                )
                if not free:
                    raise SlotUnavailableError("The new time slot is not available. Please pick another time.")
                moved = current.moved_to(day, minute, at=self._now())
                self._store.replace(moved)
            self._availability.invalidate(current.date)
            self._availability.invalidate(day)

        self._logger.info(
            "Booking rescheduled",
            extra={"booking_id": moved.id, "date": day.isoformat(), "time": minute},
        )
        return BookingOutcome(booking=moved, message=reschedule_confirmation(moved, current.date, current.time))

    def get_booking(self, booking_id: str) -> Booking | None:
        return self._store.get((booking_id or "").strip().upper())

    def list_customer_bookings(self, phone: str) -> list[Booking]:
        if validate_phone(phone):
            return self._store.list_for_customer(phone)
        return self._store.list_for_customer(normalize_phone(phone))

    def _require_booking(self, booking_id: str) -> Booking:
        booking = self.get_booking(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} doesn't exist. Please check the booking ID.")
        return booking

    def _parse_slot(
        self, day: date | str | None, time: int | str | None, errors: list[str]
    ) -> tuple[date | None, int | None]:
        parsed_day = parsed_time = None
        try:
            parsed_day = parse_iso_date(day)
        except (TypeError, ValueError):
            errors.append("Invalid date format (YYYY-MM-DD)")
        try:
            parsed_time = coerce_minute_of_day(time)
        except (TypeError, ValueError):
            errors.append("Invalid time format (HH:MM)")
        return parsed_day, parsed_time

    def _ensure_future(self, day: date, minute: int) -> None:
        if combine(day, minute) <= self._now().replace(tzinfo=None):
            raise PastDateError()

    def _now(self) -> datetime:
        now = self._clock() if self._clock else datetime.now(self._timezone)
        if now.tzinfo is None:
            return now.replace(tzinfo=self._timezone)
        return now.astimezone(self._timezone)

    def _new_booking_id(self) -> str:
        while True:
            booking_id = "BK" + uuid.uuid4().hex[:10].upper()
            if self._store.get(booking_id) is None:
                return booking_id

    def _publish_created(self, booking: Booking) -> None:
        if self._crm is None:
            return
        try:
            self._crm.booking_created(BookingCreatedEvent(customer=booking.customer, booking=booking))
        except Exception as e:
            # The booking is committed regardless of CRM delivery.
            self._logger.exception("CRM sync failed", extra={"booking_id": booking.id, "reason": str(e)})

    def _track(self, record: Callable[[AnalyticsPort], None], booking_id: str) -> None:
        if self._analytics is None:
            return
        try:
            record(self._analytics)
        except Exception as e:
            self._logger.exception("Analytics tracking failed", extra={"booking_id": booking_id, "reason": str(e)})
