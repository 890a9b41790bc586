"""
Dashboard KPIs, the in-memory tracker and the analytics route.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from app.application.exceptions import InvalidInputError
from app.application.use_cases.analytics import (
    AnalyticsDashboardUseCase,
    conversion_rate,
    count_by,
    total_revenue,
)
from app.application.use_cases.dispatch_message import ConversationDispatcher
from app.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from app.application.utils.booking_extraction import KeywordBookingExtractor
from app.domain.entities.analytics import BookingRecord, ConversationRecord
from app.domain.entities.message import Message
from app.infrastructure.analytics.memory_tracker import InMemoryAnalytics
from app.infrastructure.store.memory_store import MemoryConversationStore
from app.main import app
from app.wiring.dependencies import get_analytics_use_case
from conftest import MONDAY, NOW, TZ, booking_request, build_salon


def _conversation(hours_ago: float, channel: str = "whatsapp", context: str = "booking", ms: int = 100):
    return ConversationRecord(
        customer_id="+27821234567",
        channel=channel,
        context=context,
        response_time_ms=ms,
        at=NOW - timedelta(hours=hours_ago),
    )


def _booking(booking_id: str, hours_ago: float, value: int = 250, service: str = "Haircut & Styling", stylist=None):
    return BookingRecord(
        booking_id=booking_id,
        customer_id="+27821234567",
        service_name=service,
        stylist_id=stylist,
        value=value,
        booked_for=MONDAY,
        at=NOW - timedelta(hours=hours_ago),
    )


def _dashboard_use_case(tracker: InMemoryAnalytics) -> AnalyticsDashboardUseCase:
    return AnalyticsDashboardUseCase(tracker=tracker, timezone=TZ, clock=lambda: NOW)


def test_conversion_rate_is_a_rounded_percentage():
    assert conversion_rate(0, 0) == 0
    assert conversion_rate(3, 1) == 33
    assert conversion_rate(4, 4) == 100


def test_revenue_ignores_cancelled_bookings():
    kept = _booking("BK1", 1, value=450)
    dropped = _booking("BK2", 1, value=250).cancelled(NOW)
    assert total_revenue([kept, dropped]) == 450


def test_count_by_orders_most_common_first():
    assert list(count_by(["a", "b", "b"]).items()) == [("b", 2), ("a", 1)]


def test_dashboard_windows_and_groups():
    tracker = InMemoryAnalytics()
    conversations = [(1, "whatsapp", "booking", 100), (5, "whatsapp", "sales", 300), (30, "test", "general", 200)]
    for hours_ago, channel, context, ms in conversations:
        tracker.record_conversation(_conversation(hours_ago, channel, context, ms))
    tracker.record_booking(_booking("BK1", 2, value=250, stylist="sarah"))
    tracker.record_booking(_booking("BK2", 3, value=800, service="Balayage"))
    tracker.record_booking(_booking("BK3", 48, value=1200, service="Bridal Package"))
    tracker.record_cancellation("BK2", NOW)

    day = _dashboard_use_case(tracker).execute("day")
    assert day.total_conversations == 2
    assert day.total_bookings == 2
    assert day.cancelled_bookings == 1
    assert day.total_revenue == 250
    assert day.average_response_time_ms == 200
    assert day.conversion_rate == 100
    assert day.conversations_by_context == {"booking": 1, "sales": 1}
    assert day.bookings_by_stylist == {"sarah": 1, "any": 1}
    assert day.start == NOW - timedelta(days=1)

    week = _dashboard_use_case(tracker).execute("Week")
    assert week.period == "week"
    assert week.total_conversations == 3
    assert week.conversations_by_channel == {"whatsapp": 2, "test": 1}
    assert week.total_revenue == 1450
    assert week.conversion_rate == 100


def test_unknown_period_is_invalid_input():
    with pytest.raises(InvalidInputError):
        _dashboard_use_case(InMemoryAnalytics()).execute("year")


def test_cancelling_an_untracked_booking_is_ignored():
    tracker = InMemoryAnalytics()
    tracker.record_cancellation("BKUNKNOWN", NOW)
    assert tracker.bookings_between(NOW - timedelta(days=1), NOW) == []


def test_tracker_is_bounded():
    tracker = InMemoryAnalytics(max_records=2)
    for i in range(3):
        tracker.record_conversation(_conversation(i))
        tracker.record_booking(_booking(f"BK{i}", i))
    window = (NOW - timedelta(days=1), NOW)
    assert len(tracker.conversations_between(*window)) == 2
    assert [b.booking_id for b in tracker.bookings_between(*window)] == ["BK1", "BK2"]


def test_lifecycle_records_bookings_and_cancellations():
    tracker = InMemoryAnalytics()
    salon = build_salon(analytics=tracker)

    kept = salon.bookings.create_booking(booking_request(time="10:00")).booking
    dropped = salon.bookings.create_booking(booking_request(time="14:00", service_id="coloring")).booking
    salon.bookings.cancel_booking(dropped.id)

    dashboard = _dashboard_use_case(tracker).execute("day")
    assert dashboard.total_bookings == 2
    assert dashboard.cancelled_bookings == 1
    assert dashboard.total_revenue == kept.price
    assert dashboard.bookings_by_service == {"Haircut & Styling": 1, "Hair Coloring": 1}


def test_chat_turns_are_tracked():
    tracker = InMemoryAnalytics()
    salon = build_salon(analytics=tracker)
    handler = HandleIncomingMessageUseCase(
        store=MemoryConversationStore(),
        dispatcher=ConversationDispatcher(KeywordBookingExtractor(salon.catalog)),
        bookings=salon.bookings,
        availability=salon.engine,
        catalog=salon.catalog,
        timezone=TZ,
        business_name="Glamour Hair Studio",
        clock=lambda: NOW,
        analytics=tracker,
    )

    for mid, text in [("wamid.a1", "hello"), ("wamid.a2", "book a haircut on Monday at 10:00"), ("wamid.a2", "dup")]:
        handler.handle(
            Message(id=mid, sender_id="27821234567", text=text, timestamp=int(NOW.timestamp()), contact_name="Jane Doe")
        )

    dashboard = _dashboard_use_case(tracker).execute("day")
    assert dashboard.total_conversations == 2
    assert dashboard.conversations_by_context == {"general": 1, "booking": 1}
    assert dashboard.conversations_by_channel == {"whatsapp": 2}
    assert dashboard.total_bookings == 1
    assert dashboard.conversion_rate == 50


@pytest.fixture
def analytics_client():
    tracker = InMemoryAnalytics()
    tracker.record_conversation(_conversation(1))
    tracker.record_conversation(_conversation(2, context="sales"))
    tracker.record_booking(_booking("BK1", 1, stylist="mike"))
    app.dependency_overrides[get_analytics_use_case] = lambda: _dashboard_use_case(tracker)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_analytics_route_returns_dashboard(analytics_client):
    resp = analytics_client.get("/api/analytics/day")
    body = resp.json()

    assert resp.status_code == 200
    assert body["success"] is True
    data = body["data"]
    assert data["period"] == "day"
    assert data["dateRange"]["end"] == NOW.isoformat()
    assert data["kpis"] == {
        "totalConversations": 2,
        "totalBookings": 1,
        "totalRevenue": 250,
        "averageResponseTime": 100,
        "conversionRate": 50,
    }
    assert data["bookings"]["byStylist"] == {"mike": 1}
    assert data["conversations"]["byContext"] == {"booking": 1, "sales": 1}


def test_analytics_route_rejects_unknown_period(analytics_client):
    resp = analytics_client.get("/api/analytics/year")
    assert resp.status_code == 400
    assert resp.json() == {
        "success": False,
        "error": "Invalid period. Use: day, week, or month",
        "code": "INVALID_INPUT",
    }
