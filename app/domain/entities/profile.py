from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class CustomerProfile:
    phone: str
    name: str = "Customer"
    email: str | None = None
    conversation_count: int = 0
    last_interaction_at: float | None = None

    @staticmethod
    def from_contact(phone: str, contact_name: str | None) -> "CustomerProfile":
        return CustomerProfile(phone=phone, name=sanitize_name(contact_name))

    def touched(self, at: float, contact_name: str | None = None) -> "CustomerProfile":
        name = sanitize_name(contact_name) if contact_name and contact_name.strip() else self.name
        return replace(
            self,
            name=name,
            conversation_count=self.conversation_count + 1,
            last_interaction_at=at,
        )


def sanitize_name(first: str | None, last: str | None = None) -> str:
    first = (first or "").strip()
    last = (last or "").strip()
    if not first and not last:
        return "Customer"
    if not first:
        return last
    if not last:
        return first
    return f"{first} {last}"
