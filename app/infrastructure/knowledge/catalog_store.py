from __future__ import annotations

from app.application.ports.catalog import CatalogPort
from app.domain.entities.catalog import BusinessHours, DayHours, Service, Stylist
from app.infrastructure.knowledge.catalog_data import BUSINESS_HOURS, SERVICES, STYLISTS


class StaticCatalog(CatalogPort):
    """Read-only catalog loaded once at startup."""

    def __init__(
        self,
        services: tuple[Service, ...] | list[Service] | None = None,
        stylists: tuple[Stylist, ...] | list[Stylist] | None = None,
        hours: BusinessHours | None = None,
    ) -> None:
        self._services = {s.id: s for s in (services if services is not None else SERVICES)}
        self._stylists = {s.id: s for s in (stylists if stylists is not None else STYLISTS)}
        self._hours = hours or BUSINESS_HOURS

    def get_service(self, service_id: str) -> Service | None:
        if not service_id:
            return None
        return self._services.get(service_id.lower().strip())

    def list_services(self) -> list[Service]:
        return list(self._services.values())

    def get_stylist(self, stylist_id: str) -> Stylist | None:
        if not stylist_id:
            return None
        return self._stylists.get(stylist_id.lower().strip())

    def list_stylists(self) -> list[Stylist]:
        return list(self._stylists.values())

    def get_hours(self, weekday: int) -> DayHours:
        return self._hours.for_weekday(weekday)
