from __future__ import annotations

from datetime import date, timedelta

from app.application.ports.booking_extractor import BookingExtractorPort
from app.application.ports.catalog import CatalogPort
from app.application.utils.date_parser import map_vague_time, parse_date_preference, parse_time_preference
from app.application.utils.message_rules import extract_booking_id, extract_reason, normalize_text
from app.domain.entities.intent import PartialBookingRequest


class KeywordBookingExtractor(BookingExtractorPort):
    """
    Coarse keyword extraction against catalog names.

    Services and stylists match on id, full name or first name. Dates default
    to tomorrow when nothing is mentioned; vague times of day map to fixed
    clock times.
    """

    def __init__(self, catalog: CatalogPort) -> None:
        self._catalog = catalog

    def extract(self, text: str, today: date) -> PartialBookingRequest:
        normalized = normalize_text(text)
        parsed_date = parse_date_preference(text, today)
        time = parse_time_preference(text)
        if time is None:
            time = map_vague_time(normalized)

        return PartialBookingRequest(
            service_id=self._match_service(normalized),
            date=parsed_date or today + timedelta(days=1),
            date_was_explicit=parsed_date is not None,
            time=time,
            stylist_id=self._match_stylist(normalized),
            booking_id=extract_booking_id(text),
            reason=extract_reason(text),
        )

    def _match_service(self, normalized: str) -> str | None:
        padded = f" {normalized} "
        for service in self._catalog.list_services():
            if normalize_text(service.name) in normalized or f" {service.id} " in padded:
                return service.id
        return None

    def _match_stylist(self, normalized: str) -> str | None:
        padded = f" {normalized} "
        for stylist in self._catalog.list_stylists():
            full_name = normalize_text(stylist.name)
            first_name = full_name.split(" ")[0]
            if full_name in normalized or f" {stylist.id} " in padded or f" {first_name} " in padded:
                return stylist.id
        return None
