from __future__ import annotations

from datetime import date

from app.application.utils.time_format import format_hhmm
from app.domain.entities.booking import Booking
from app.domain.entities.catalog import Service
from app.domain.entities.slot import Slot

MAX_SLOTS_SHOWN = 5


def booking_confirmation(booking: Booking, currency: str = "R") -> str:
    return "\n".join(
        [
            "🎉 *Booking Confirmed!*",
            "",
            f"*Booking ID:* {booking.id}",
            f"*Customer:* {booking.customer.name}",
            f"*Service:* {booking.service_name}",
            f"*Date:* {booking.date.isoformat()}",
            f"*Time:* {format_hhmm(booking.time)}",
            f"*Stylist:* {booking.stylist_name}",
            f"*Price:* {currency}{booking.price}",
            "",
            "*Important:* Please arrive 10 minutes early. Cancel or reschedule at least 24 hours in advance.",
        ]
    )


def cancellation_confirmation(booking: Booking) -> str:
    return "\n".join(
        [
            "✅ *Booking Cancelled*",
            "",
            f"*Booking ID:* {booking.id}",
            f"*Service:* {booking.service_name}",
            f"*Date:* {booking.date.isoformat()}",
            f"*Time:* {format_hhmm(booking.time)}",
            "",
            "Your booking has been successfully cancelled. We hope to see you again soon!",
        ]
    )


def reschedule_confirmation(booking: Booking, old_date: date, old_time: int) -> str:
    return "\n".join(
        [
            "📅 *Booking Rescheduled*",
            "",
            f"*Booking ID:* {booking.id}",
            f"*Service:* {booking.service_name}",
            f"*Previous:* {old_date.isoformat()} at {format_hhmm(old_time)}",
            f"*New Date:* {booking.date.isoformat()}",
            f"*New Time:* {format_hhmm(booking.time)}",
            f"*Stylist:* {booking.stylist_name}",
            "",
            "Your appointment has been successfully rescheduled!",
        ]
    )


def pricing_message(services: list[Service], currency: str = "R") -> str:
    lines = [f"• {s.name}: {currency}{s.price} ({s.duration_minutes} minutes)" for s in services]
    return _join_blocks(["💇 *Our Services & Pricing*", "\n".join(lines), "*Book now by replying with your preferred service!*"])


def services_message(services: list[Service]) -> str:
    lines = [f"• {s.name} - {s.duration_minutes} minutes" for s in services]
    return _join_blocks(["✨ *Available Services*", "\n".join(lines), "*What service interests you?*"])


def service_selection_message(services: list[Service], currency: str = "R") -> str:
    lines = [f"{i}. {s.name} - {currency}{s.price}" for i, s in enumerate(services, start=1)]
    return _join_blocks(["Please select a service:", "\n".join(lines), "Reply with the service you'd like."])


def booking_selection_message(bookings: list[Booking], verb: str) -> str:
    lines = [
        f"{i}. {b.service_name} on {b.date.isoformat()} at {format_hhmm(b.time)} (ID: {b.id})"
        for i, b in enumerate(bookings, start=1)
    ]
    return _join_blocks([f"Please tell me which booking to {verb}:", "\n".join(lines), "Reply with the booking ID."])


def availability_message(slots: list[Slot]) -> str:
    if not slots:
        return no_slots_message()
    lines = [f"• {format_hhmm(s.time)} - {format_hhmm(s.end_time)}" for s in slots[:MAX_SLOTS_SHOWN]]
    day = slots[0].date.isoformat()
    return _join_blocks([f"📅 *Available Time Slots on {day}*", "\n".join(lines), "*Reply with your preferred time to book!*"])


def no_slots_message() -> str:
    return "Sorry, no available slots for that date and service. Please try a different date or service."


def no_bookings_message(for_cancel: bool) -> str:
    if for_cancel:
        return "No existing bookings found to cancel."
    return "No existing bookings found. Would you like to make a new appointment?"


def escalation_message(ticket_id: str | None) -> str:
    text = (
        "I understand your concern and have escalated this to our management team. "
        "They will contact you shortly."
    )
    if ticket_id:
        text += f" Your reference number is: {ticket_id}"
    return text


def general_message(business_name: str) -> str:
    return (
        f"Hi! Welcome to {business_name} 💇. I can book, reschedule or cancel appointments, "
        "show our services and prices, or check available times. How can I help?"
    )


def compose_reply(blocks: list[str], fallback: str) -> str:
    text = _join_blocks(blocks)
    return text or fallback


def _join_blocks(blocks: list[str]) -> str:
    return "\n\n".join(block.strip() for block in blocks if block and block.strip())
