from __future__ import annotations

import re

_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NAME = re.compile(r"^[^\W\d_][\w\s\-'.]*$")


def validate_phone(phone: str | None) -> str | None:
    """Return an error message, or None when the phone number is acceptable."""
    if not phone or not isinstance(phone, str):
        return "Phone number is required"
    digits = re.sub(r"\D", "", phone)
    if len(digits) < 10:
        return "Phone number too short"
    if len(digits) > 15:
        return "Phone number too long"
    return None


def normalize_phone(phone: str) -> str:
    return "+" + re.sub(r"\D", "", phone)


def validate_email(email: str | None) -> str | None:
    if not email or not isinstance(email, str):
        return "Email is required"
    if len(email) > 254:
        return "Email too long"
    if not _EMAIL.match(email):
        return "Invalid email format"
    return None


def validate_name(name: str | None) -> str | None:
    if not name or not isinstance(name, str):
        return "Name is required"
    trimmed = name.strip()
    if len(trimmed) < 2:
        return "Name must be at least 2 characters"
    if len(trimmed) > 100:
        return "Name too long"
    if not _NAME.match(trimmed):
        return "Name contains invalid characters"
    return None
