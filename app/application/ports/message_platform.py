from abc import ABC, abstractmethod

# WhatsApp Cloud API rejects text bodies longer than this.
MAX_TEXT_LENGTH = 4096


class MessagePlatformPort(ABC):
    """Outbound chat channel. `recipient_id` is the customer's gateway id (a WhatsApp wa_id)."""

    max_text_length: int = MAX_TEXT_LENGTH

    @abstractmethod
    def send_text(self, recipient_id: str, text: str) -> None:
        raise NotImplementedError
