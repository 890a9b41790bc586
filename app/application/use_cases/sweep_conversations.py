from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from app.application.ports.conversation_store import ConversationStorePort


class ConversationSweeper:
    """Drops conversation state for customers idle longer than the retention window."""

    def __init__(
        self,
        store: ConversationStorePort,
        retention_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._retention_seconds = retention_seconds
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def run_once(self, now_ts: float | None = None) -> int:
        now_ts = self._clock() if now_ts is None else now_ts
        removed = self._store.purge_inactive(now_ts - self._retention_seconds)
        if removed:
            self._logger.info("Purged inactive conversations", extra={"count": removed})
        return removed

    async def run_forever(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await asyncio.to_thread(self.run_once)
            except Exception:
                self._logger.exception("Conversation sweep failed")
