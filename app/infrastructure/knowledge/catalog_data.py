from __future__ import annotations

from app.application.utils.time_format import parse_hhmm
from app.domain.entities.catalog import BusinessHours, DayHours, Service, Stylist


def _open(start: str, end: str) -> DayHours:
    return DayHours(open_minute=parse_hhmm(start), close_minute=parse_hhmm(end))


SERVICES: tuple[Service, ...] = (
    Service(id="haircut", name="Haircut & Styling", duration_minutes=60, price=250),
    Service(id="coloring", name="Hair Coloring", duration_minutes=120, price=450),
    Service(id="highlights", name="Highlights", duration_minutes=180, price=600),
    Service(id="balayage", name="Balayage", duration_minutes=240, price=800),
    Service(id="treatment", name="Hair Treatment", duration_minutes=90, price=300),
    Service(id="bridal", name="Bridal Hair", duration_minutes=180, price=1200),
    Service(id="mens", name="Men's Grooming", duration_minutes=45, price=180),
)

STYLISTS: tuple[Stylist, ...] = (
    Stylist(id="sarah", name="Sarah Johnson", specialties=frozenset({"haircut", "coloring", "highlights"})),
    Stylist(id="mike", name="Mike Chen", specialties=frozenset({"haircut", "mens", "treatment"})),
    Stylist(id="lisa", name="Lisa Williams", specialties=frozenset({"balayage", "bridal", "coloring"})),
    Stylist(id="david", name="David Brown", specialties=frozenset({"haircut", "mens", "treatment"})),
)

BUSINESS_HOURS = BusinessHours(
    days=(
        _open("09:00", "18:00"),  # Monday
        _open("09:00", "18:00"),
        _open("09:00", "18:00"),
        _open("09:00", "18:00"),
        _open("09:00", "18:00"),
        _open("09:00", "16:00"),  # Saturday
        DayHours.closed(),  # Sunday
    )
)
