from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Slot:
    date: date
    time: int
    end_time: int
    duration_minutes: int
