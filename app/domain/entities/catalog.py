from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    duration_minutes: int
    price: int

    def __post_init__(self) -> None:
        if self.duration_minutes <= 0:
            raise ValueError(f"Service {self.id} must have a positive duration")
        if self.price < 0:
            raise ValueError(f"Service {self.id} must have a non-negative price")


@dataclass(frozen=True)
class Stylist:
    id: str
    name: str
    specialties: frozenset[str] = field(default_factory=frozenset)

    def offers(self, service_id: str) -> bool:
        return service_id in self.specialties


@dataclass(frozen=True)
class DayHours:
    """Opening interval [open_minute, close_minute) in minutes since midnight. None means closed."""

    open_minute: int | None = None
    close_minute: int | None = None

    @property
    def is_closed(self) -> bool:
        return self.open_minute is None or self.close_minute is None

    @staticmethod
    def closed() -> "DayHours":
        return DayHours()


@dataclass(frozen=True)
class BusinessHours:
    # weekday index follows date.weekday(): 0=Monday, 6=Sunday
    days: tuple[DayHours, ...]

    def for_weekday(self, weekday: int) -> DayHours:
        if 0 <= weekday < len(self.days):
            return self.days[weekday]
        return DayHours.closed()
