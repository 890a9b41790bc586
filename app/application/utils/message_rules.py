from __future__ import annotations

import re

BOOKING_KEYWORDS = ("book", "appointment")
SUPPORT_KEYWORDS = ("cancel", "reschedule")
SALES_KEYWORDS = ("price", "cost")
COMPLAINT_KEYWORDS = ("complaint", "problem")

RESCHEDULE_KEYWORDS = ("reschedule", "change", "move my")
CANCEL_KEYWORDS = ("cancel",)
PRICING_KEYWORDS = ("price", "pricing", "cost", "how much")
SERVICES_KEYWORDS = ("service", "treatment", "menu")
AVAILABILITY_KEYWORDS = ("time", "available", "availability", "slot", "free")
ESCALATION_KEYWORDS = ("complaint", "problem", "manager")

BOOKING_ID_PATTERN = re.compile(r"\bBK[A-Z0-9]{4,}\b", re.IGNORECASE)


def normalize_text(text: str) -> str:
    normalized = text.lower().replace("+", " ")
    normalized = re.sub(r"[^a-z0-9:'\s]", " ", normalized)
    normalized = re.sub(r"\s+", " ", normalized).strip()
    return normalized


def contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    normalized = normalize_text(text)
    return any(keyword in normalized for keyword in keywords)


def is_booking_request(text: str) -> bool:
    return contains_any(text, BOOKING_KEYWORDS)


def is_cancel_request(text: str) -> bool:
    return contains_any(text, CANCEL_KEYWORDS)


def is_reschedule_request(text: str) -> bool:
    return contains_any(text, RESCHEDULE_KEYWORDS)


def has_price_intent(text: str) -> bool:
    return contains_any(text, PRICING_KEYWORDS)


def asks_about_services(text: str) -> bool:
    return contains_any(text, SERVICES_KEYWORDS)


def asks_about_availability(text: str) -> bool:
    return contains_any(text, AVAILABILITY_KEYWORDS)


def is_complaint(text: str) -> bool:
    return contains_any(text, ESCALATION_KEYWORDS)


def extract_booking_id(text: str) -> str | None:
    match = BOOKING_ID_PATTERN.search(text)
    return match.group(0).upper() if match else None


def extract_reason(text: str) -> str:
    """Keep the whole message as the reason only when the customer actually gives one."""
    normalized = normalize_text(text)
    if "because" in normalized or "reason" in normalized:
        return text.strip()
    return "Customer request"
