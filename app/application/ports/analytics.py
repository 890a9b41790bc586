from abc import ABC, abstractmethod
from datetime import datetime

from app.domain.entities.analytics import BookingRecord, ConversationRecord


class AnalyticsPort(ABC):
    @abstractmethod
    def record_conversation(self, record: ConversationRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    def record_booking(self, record: BookingRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    def record_cancellation(self, booking_id: str, at: datetime) -> None:
        """Mark a tracked booking cancelled. Unknown ids are ignored."""
        raise NotImplementedError

    @abstractmethod
    def conversations_between(self, start: datetime, end: datetime) -> list[ConversationRecord]:
        raise NotImplementedError

    @abstractmethod
    def bookings_between(self, start: datetime, end: datetime) -> list[BookingRecord]:
        """Bookings created in [start, end], cancelled ones included."""
        raise NotImplementedError
