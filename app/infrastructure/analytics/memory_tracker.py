from __future__ import annotations

import threading
from collections import OrderedDict, deque
from datetime import datetime

from app.application.ports.analytics import AnalyticsPort
from app.domain.entities.analytics import BookingRecord, ConversationRecord


class InMemoryAnalytics(AnalyticsPort):
    """
    Process-local event log for the dashboard. Bounded: the oldest records
    fall off once `max_records` is reached, so long periods undercount on a
    busy instance.
    """

    def __init__(self, max_records: int = 50_000) -> None:
        self._lock = threading.Lock()
        self._max_records = max_records
        self._conversations: deque[ConversationRecord] = deque(maxlen=max_records)
        self._bookings: OrderedDict[str, BookingRecord] = OrderedDict()

    def record_conversation(self, record: ConversationRecord) -> None:
        with self._lock:
            self._conversations.append(record)

    def record_booking(self, record: BookingRecord) -> None:
        with self._lock:
            self._bookings[record.booking_id] = record
            while len(self._bookings) > self._max_records:
                self._bookings.popitem(last=False)

    def record_cancellation(self, booking_id: str, at: datetime) -> None:
        with self._lock:
            record = self._bookings.get(booking_id)
            if record is not None:
                self._bookings[booking_id] = record.cancelled(at)

    def conversations_between(self, start: datetime, end: datetime) -> list[ConversationRecord]:
        with self._lock:
            return [c for c in self._conversations if start <= c.at <= end]

    def bookings_between(self, start: datetime, end: datetime) -> list[BookingRecord]:
        with self._lock:
            return [b for b in self._bookings.values() if start <= b.at <= end]
