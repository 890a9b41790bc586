from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date

from app.application.exceptions import SlotBusyError


@dataclass(frozen=True)
class SlotKey:
    date: date
    time: int
    service_id: str


@dataclass(frozen=True)
class SlotLockToken:
    key: SlotKey
    serial: int


class SlotLockManager:
    """
    Try-once mutual exclusion per (date, time, service_id).

    A second acquire for a held key fails immediately with SlotBusyError;
    nothing waits or queues. Release is idempotent and only frees the key
    when the token still owns it.
    """

    def __init__(self) -> None:
        self._held: dict[SlotKey, int] = {}
        self._mutex = threading.Lock()
        self._serials = itertools.count(1)
        self._logger = logging.getLogger(__name__)

    def acquire(self, key: SlotKey) -> SlotLockToken:
        with self._mutex:
            if key in self._held:
                self._logger.info(
                    "Slot lock busy",
                    extra={"date": key.date.isoformat(), "time": key.time, "service_id": key.service_id},
                )
                raise SlotBusyError()
            serial = next(self._serials)
            self._held[key] = serial
        return SlotLockToken(key=key, serial=serial)

    def release(self, token: SlotLockToken) -> None:
        with self._mutex:
            if self._held.get(token.key) == token.serial:
                del self._held[token.key]

    def is_held(self, key: SlotKey) -> bool:
        with self._mutex:
            return key in self._held

    @contextmanager
    def hold(self, key: SlotKey) -> Iterator[SlotLockToken]:
        token = self.acquire(key)
        try:
            yield token
        finally:
            self.release(token)
