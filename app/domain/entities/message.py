from dataclasses import dataclass


@dataclass(frozen=True)
class Message:
    id: str
    sender_id: str
    text: str
    timestamp: int
    contact_name: str | None = None
    platform: str = "whatsapp"
