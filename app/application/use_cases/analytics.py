from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from app.application.exceptions import InvalidInputError
from app.application.ports.analytics import AnalyticsPort
from app.domain.entities.analytics import BookingRecord, ConversationRecord

PERIOD_DAYS = {"day": 1, "week": 7, "month": 30}


@dataclass(frozen=True)
class Dashboard:
    period: str
    start: datetime
    end: datetime
    total_conversations: int
    total_bookings: int
    cancelled_bookings: int
    total_revenue: int
    average_response_time_ms: int
    conversion_rate: int
    conversations_by_channel: dict[str, int]
    conversations_by_context: dict[str, int]
    bookings_by_service: dict[str, int]
    bookings_by_stylist: dict[str, int]


def conversion_rate(conversations: int, bookings: int) -> int:
    """Bookings per conversation as a rounded percentage; 0 with no conversations."""
    if conversations == 0:
        return 0
    return round(bookings / conversations * 100)


def total_revenue(bookings: Iterable[BookingRecord]) -> int:
    return sum(b.value for b in bookings if not b.is_cancelled)


def average_response_time(conversations: list[ConversationRecord]) -> int:
    if not conversations:
        return 0
    return round(sum(c.response_time_ms for c in conversations) / len(conversations))


def count_by(values: Iterable[str]) -> dict[str, int]:
    return dict(Counter(values).most_common())


class AnalyticsDashboardUseCase:
    def __init__(
        self,
        tracker: AnalyticsPort,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._tracker = tracker
        self._timezone = timezone
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def execute(self, period: str) -> Dashboard:
        days = PERIOD_DAYS.get((period or "").strip().lower())
        if days is None:
            raise InvalidInputError("Invalid period. Use: day, week, or month")

        end = self._clock() if self._clock else datetime.now(self._timezone)
        start = end - timedelta(days=days)
        conversations = self._tracker.conversations_between(start, end)
        bookings = self._tracker.bookings_between(start, end)

        self._logger.info(
            "Analytics dashboard built",
            extra={"period": period, "count": len(conversations) + len(bookings)},
        )
        return Dashboard(
            period=period.strip().lower(),
            start=start,
            end=end,
            total_conversations=len(conversations),
            total_bookings=len(bookings),
            cancelled_bookings=sum(1 for b in bookings if b.is_cancelled),
            total_revenue=total_revenue(bookings),
            average_response_time_ms=average_response_time(conversations),
            conversion_rate=conversion_rate(len(conversations), len(bookings)),
            conversations_by_channel=count_by(c.channel for c in conversations),
            conversations_by_context=count_by(c.context for c in conversations),
            bookings_by_service=count_by(b.service_name for b in bookings),
            bookings_by_stylist=count_by(b.stylist_id or "any" for b in bookings),
        )
