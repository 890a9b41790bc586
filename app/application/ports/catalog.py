from __future__ import annotations

from abc import ABC, abstractmethod

from app.domain.entities.catalog import DayHours, Service, Stylist


class CatalogPort(ABC):
    @abstractmethod
    def get_service(self, service_id: str) -> Service | None:
        raise NotImplementedError

    @abstractmethod
    def list_services(self) -> list[Service]:
        raise NotImplementedError

    @abstractmethod
    def get_stylist(self, stylist_id: str) -> Stylist | None:
        raise NotImplementedError

    @abstractmethod
    def list_stylists(self) -> list[Stylist]:
        raise NotImplementedError

    @abstractmethod
    def get_hours(self, weekday: int) -> DayHours:
        """Opening hours for a weekday (0=Monday). Closed days return DayHours.closed()."""
        raise NotImplementedError
