from abc import ABC, abstractmethod
from typing import Any

from app.domain.entities.conversation_state import ConversationState
from app.domain.entities.profile import CustomerProfile


class ConversationStorePort(ABC):
    @abstractmethod
    def get_history(self, customer_id: str) -> list[dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def append_message(self, customer_id: str, role: str, text: str, meta: dict[str, Any] | None = None) -> None:
        """Append to the bounded history; oldest entries are evicted first."""
        raise NotImplementedError

    @abstractmethod
    def get_state(self, customer_id: str) -> ConversationState:
        raise NotImplementedError

    @abstractmethod
    def set_state(self, customer_id: str, state: ConversationState) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_profile(self, customer_id: str) -> CustomerProfile | None:
        raise NotImplementedError

    @abstractmethod
    def save_profile(self, profile: CustomerProfile) -> None:
        raise NotImplementedError

    @abstractmethod
    def has_processed(self, message_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def mark_processed(self, message_id: str) -> bool:
        """Record a gateway message id. Returns False when it was already recorded."""
        raise NotImplementedError

    @abstractmethod
    def purge_inactive(self, cutoff_ts: float) -> int:
        """
        Delete every customer whose last activity is older than cutoff_ts.
        Returns the number of customers removed.
        """
        raise NotImplementedError
