from __future__ import annotations

import logging
from datetime import date

from app.application.exceptions import InvalidInputError, NotFoundError
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.catalog import CatalogPort
from app.application.utils.time_format import coerce_minute_of_day, parse_iso_date
from app.domain.entities.booking import Booking
from app.domain.entities.catalog import Service, Stylist
from app.domain.entities.slot import Slot
from app.infrastructure.cache.availability_cache import AvailabilityCache


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    return not (end1 <= start2 or end2 <= start1)


def competes_for_slot(service_id: str, stylist_id: str | None, booking: Booking) -> bool:
    """
    Whether an existing booking competes with a candidate for the same resource.

    Two named stylists compete only with themselves. When either side is
    "any available", the booking holds the service for that interval, so it
    competes with every other booking of the same service.
    """
    if stylist_id and booking.stylist_id:
        return stylist_id == booking.stylist_id
    return service_id == booking.service_id


class AvailabilityEngine:
    def __init__(
        self,
        catalog: CatalogPort,
        store: BookingStorePort,
        cache: AvailabilityCache | None = None,
        slot_step_minutes: int = 30,
        buffer_minutes: int = 15,
    ) -> None:
        if slot_step_minutes <= 0:
            raise ValueError("slot_step_minutes must be positive")
        if buffer_minutes < 0:
            raise ValueError("buffer_minutes must not be negative")
        self._catalog = catalog
        self._store = store
        self._cache = cache if cache is not None else AvailabilityCache()
        self._step = slot_step_minutes
        self._buffer = buffer_minutes
        self._logger = logging.getLogger(__name__)

    @property
    def buffer_minutes(self) -> int:
        return self._buffer

    def get_available_slots(
        self,
        day: date | str,
        service_id: str,
        stylist_id: str | None = None,
    ) -> list[Slot]:
        """
        Chronological free slots for a service on a date.

        Candidates start at opening time and advance by the configured stride
        while start + duration + buffer still fits before closing. The buffer
        only bounds the search; slots report the service's own duration.
        A closed day yields an empty list.
        """
        target = self._parse_date(day)
        service = self.require_service(service_id)
        if stylist_id:
            self.require_stylist(stylist_id)

        hours = self._catalog.get_hours(target.weekday())
        if hours.is_closed:
            return []

        slots: list[Slot] = []
        start = hours.open_minute
        while start + service.duration_minutes + self._buffer <= hours.close_minute:
            if self.is_slot_available(target, start, service.id, stylist_id):
                slots.append(
                    Slot(
                        date=target,
                        time=start,
                        end_time=start + service.duration_minutes,
                        duration_minutes=service.duration_minutes,
                    )
                )
            start += self._step
        return slots

    def is_slot_available(
        self,
        day: date | str,
        time: int | str,
        service_id: str,
        stylist_id: str | None = None,
    ) -> bool:
        """Cached availability check. Fails closed: any lookup problem reads as unavailable."""
        try:
            target = parse_iso_date(day)
            minute = coerce_minute_of_day(time)
            if stylist_id:
                stylist_id = self.require_stylist(stylist_id).id
            key = (target, minute, service_id.lower().strip(), stylist_id or None)

            cached = self._cache.get(key)
            if cached is not None:
                return cached

            generation = self._cache.generation(target)
            available = self.is_slot_free_now(target, minute, service_id, stylist_id)
            self._cache.put(key, available, generation)
            return available
        except Exception as e:
            self._logger.warning(
                "Slot availability lookup failed; treating slot as taken",
                extra={"service_id": service_id, "date": str(day), "time": str(time), "reason": str(e)},
            )
            return False

    def is_slot_free_now(
        self,
        day: date,
        time: int,
        service_id: str,
        stylist_id: str | None = None,
        ignore_booking_id: str | None = None,
        duration_minutes: int | None = None,
    ) -> bool:
        """
        Authoritative check straight against the store, bypassing the cache.

        duration_minutes overrides the catalog duration, for bookings whose
        duration was frozen at creation. Raises NotFoundError for an unknown service.
        """
        service = self._catalog.get_service(service_id) if service_id else None
        if service is not None:
            service_id = service.id
            if duration_minutes is None:
                duration_minutes = service.duration_minutes
        elif duration_minutes is None:
            raise NotFoundError(f"Service {service_id} not found")
        if stylist_id:
            stylist = self._catalog.get_stylist(stylist_id)
            stylist_id = stylist.id if stylist is not None else stylist_id
        end = time + duration_minutes
        for booking in self._store.list_for_date(day):
            if not booking.is_active or booking.id == ignore_booking_id:
                continue
            if not competes_for_slot(service_id, stylist_id, booking):
                continue
            if intervals_overlap(time, end, booking.time, booking.end_time):
                return False
        return True

    def fits_business_hours(self, day: date, time: int, duration_minutes: int) -> bool:
        hours = self._catalog.get_hours(day.weekday())
        if hours.is_closed:
            return False
        return hours.open_minute <= time and time + duration_minutes <= hours.close_minute

    def invalidate(self, day: date) -> None:
        self._cache.invalidate_date(day)

    def require_service(self, service_id: str) -> Service:
        service = self._catalog.get_service(service_id) if service_id else None
        if service is None:
            raise NotFoundError(f"Service {service_id} not found")
        return service

    def require_stylist(self, stylist_id: str) -> Stylist:
        stylist = self._catalog.get_stylist(stylist_id)
        if stylist is None:
            raise NotFoundError(f"Stylist {stylist_id} not found")
        return stylist

    @staticmethod
    def _parse_date(day: date | str) -> date:
        try:
            return parse_iso_date(day)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e
