from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Any

from app.application.ports.conversation_store import ConversationStorePort
from app.domain.entities.conversation_state import ConversationState
from app.domain.entities.profile import CustomerProfile


class MemoryConversationStore(ConversationStorePort):
    """
    Per-customer conversation memory: bounded history, last state, profile.

    Last writer wins. Processed message ids are kept in a bounded FIFO so
    webhook redeliveries are dropped without growing forever.
    """

    def __init__(self, history_limit: int = 30, processed_limit: int = 10_000) -> None:
        self._threads: dict[str, list[dict[str, Any]]] = {}
        self._states: dict[str, ConversationState] = {}
        self._profiles: dict[str, CustomerProfile] = {}
        self._last_activity: dict[str, float] = {}
        self._processed: OrderedDict[str, None] = OrderedDict()
        self._history_limit = history_limit
        self._processed_limit = processed_limit
        self._lock = threading.Lock()

    def get_history(self, customer_id: str) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(entry) for entry in self._threads.get(customer_id, [])]

    def append_message(self, customer_id: str, role: str, text: str, meta: dict[str, Any] | None = None) -> None:
        entry = {"role": role, "content": text, "meta": dict(meta or {})}
        with self._lock:
            thread = self._threads.setdefault(customer_id, [])
            thread.append(entry)
            if len(thread) > self._history_limit:
                del thread[: len(thread) - self._history_limit]
            ts = entry["meta"].get("ts")
            if ts is not None:
                self._touch(customer_id, float(ts))

    def get_state(self, customer_id: str) -> ConversationState:
        with self._lock:
            return self._states.get(customer_id, ConversationState())

    def set_state(self, customer_id: str, state: ConversationState) -> None:
        with self._lock:
            self._states[customer_id] = state
            if state.last_seen_at is not None:
                self._touch(customer_id, state.last_seen_at)

    def get_profile(self, customer_id: str) -> CustomerProfile | None:
        with self._lock:
            return self._profiles.get(customer_id)

    def save_profile(self, profile: CustomerProfile) -> None:
        with self._lock:
            self._profiles[profile.phone] = profile
            if profile.last_interaction_at is not None:
                self._touch(profile.phone, profile.last_interaction_at)

    def has_processed(self, message_id: str) -> bool:
        with self._lock:
            return message_id in self._processed

    def mark_processed(self, message_id: str) -> bool:
        with self._lock:
            if message_id in self._processed:
                return False
            self._processed[message_id] = None
            while len(self._processed) > self._processed_limit:
                self._processed.popitem(last=False)
            return True

    def purge_inactive(self, cutoff_ts: float) -> int:
        with self._lock:
            stale = [cid for cid, ts in self._last_activity.items() if ts < cutoff_ts]
            for customer_id in stale:
                self._threads.pop(customer_id, None)
                self._states.pop(customer_id, None)
                self._profiles.pop(customer_id, None)
                self._last_activity.pop(customer_id, None)
            return len(stale)

    def last_activity(self, customer_id: str) -> float | None:
        with self._lock:
            return self._last_activity.get(customer_id)

    def _touch(self, customer_id: str, ts: float) -> None:
        # caller holds self._lock
        current = self._last_activity.get(customer_id)
        if current is None or ts > current:
            self._last_activity[customer_id] = ts
