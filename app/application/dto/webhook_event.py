from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.domain.entities.message import Message


class WebhookEventDTO(BaseModel):
    """WhatsApp Cloud API notification: entry[] -> changes[] -> value{messages, contacts}."""

    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)

    def extract_messages(self) -> list[Message]:
        messages: list[Message] = []
        for entry in self.entry or []:
            for change in entry.get("changes", []) or []:
                value = change.get("value") or {}
                names = _contact_names(value.get("contacts") or [])
                for msg in value.get("messages", []) or []:
                    text = _message_text(msg)
                    mid = msg.get("id")
                    sender = msg.get("from")
                    timestamp = msg.get("timestamp")
                    if not (mid and sender and text and timestamp):
                        continue

                    messages.append(
                        Message(
                            id=str(mid),
                            sender_id=str(sender),
                            text=text,
                            timestamp=int(timestamp),
                            contact_name=names.get(str(sender)),
                        )
                    )
        return messages


def _contact_names(contacts: list[dict[str, Any]]) -> dict[str, str]:
    names: dict[str, str] = {}
    for contact in contacts:
        wa_id = contact.get("wa_id")
        name = (contact.get("profile") or {}).get("name")
        if wa_id and name:
            names[str(wa_id)] = str(name)
    return names


def _message_text(msg: dict[str, Any]) -> str | None:
    kind = msg.get("type", "text")
    if kind == "text":
        body = (msg.get("text") or {}).get("body")
        return str(body).strip() if body else None
    if kind == "interactive":
        interactive = msg.get("interactive") or {}
        reply = interactive.get("button_reply") or interactive.get("list_reply") or {}
        title = reply.get("title")
        return str(title).strip() if title else None
    return None
