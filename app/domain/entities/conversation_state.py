from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ConversationState:
    last_context: str | None = None
    last_actions: tuple[str, ...] = ()
    last_seen_at: float | None = None
    last_outbound_at: float | None = None
