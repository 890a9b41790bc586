from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from app.domain.entities.intent import PartialBookingRequest


class BookingExtractorPort(ABC):
    @abstractmethod
    def extract(self, text: str, today: date) -> PartialBookingRequest:
        """
        Pull booking parameters out of free text.

        Best effort: unknown fields stay None. Implementations must not raise
        on unrecognised text.
        """
        raise NotImplementedError
