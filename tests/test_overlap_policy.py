"""
Which existing bookings compete with a candidate slot.
"""

from __future__ import annotations

import pytest

from app.application.exceptions import SlotUnavailableError
from app.application.use_cases.availability import competes_for_slot, intervals_overlap
from app.domain.entities.booking import Booking, CustomerIdentity
from conftest import MONDAY, booking_request


def _booking(service_id: str, stylist_id: str | None) -> Booking:
    return Booking(
        id="BK0000000001",
        customer=CustomerIdentity(phone="+27820000000", name="Existing"),
        service_id=service_id,
        service_name=service_id,
        date=MONDAY,
        time=600,
        duration_minutes=60,
        price=250,
        stylist_id=stylist_id,
    )


def test_intervals_touching_at_the_edge_do_not_overlap():
    assert intervals_overlap(600, 660, 660, 720) is False
    assert intervals_overlap(600, 660, 659, 720) is True
    assert intervals_overlap(600, 720, 630, 660) is True


def test_named_stylists_only_compete_with_themselves():
    assert competes_for_slot("haircut", "sarah", _booking("haircut", "sarah")) is True
    assert competes_for_slot("haircut", "mike", _booking("haircut", "sarah")) is False
    assert competes_for_slot("coloring", "sarah", _booking("haircut", "sarah")) is True


def test_unassigned_side_competes_per_service():
    # candidate "any available" against a named booking
    assert competes_for_slot("haircut", None, _booking("haircut", "sarah")) is True
    assert competes_for_slot("coloring", None, _booking("haircut", "sarah")) is False
    # named candidate against an unassigned booking
    assert competes_for_slot("haircut", "mike", _booking("haircut", None)) is True
    assert competes_for_slot("haircut", None, _booking("haircut", None)) is True


def test_same_stylist_overlap_is_rejected_but_another_stylist_books(salon):
    """Sarah 10:00, Sarah 10:30 (overlaps), Mike 10:00 (different stylist)."""
    first = salon.bookings.create_booking(booking_request(stylist_id="sarah", time="10:00"))
    assert first.booking.stylist_name == "Sarah Johnson"

    with pytest.raises(SlotUnavailableError):
        salon.bookings.create_booking(booking_request(stylist_id="sarah", time="10:30", customer_phone="+27821111111"))

    third = salon.bookings.create_booking(booking_request(stylist_id="mike", time="10:00", customer_phone="+27822222222"))
    assert third.booking.stylist_id == "mike"


def test_unassigned_booking_blocks_named_stylist_for_same_service(salon):
    salon.bookings.create_booking(booking_request(time="10:00"))

    assert salon.engine.is_slot_available(MONDAY, "10:00", "haircut", "david") is False
    assert salon.engine.is_slot_available(MONDAY, "10:00", "treatment", "david") is True


def test_stylist_filter_is_case_insensitive(salon):
    salon.bookings.create_booking(booking_request(stylist_id="Sarah", time="13:00"))
    assert salon.engine.is_slot_available(MONDAY, "13:00", "haircut", "SARAH") is False
