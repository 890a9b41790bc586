from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Mapping


logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="
DEV_ENVS = {"dev", "local", "test"}


def verify_subscription(params: Mapping[str, str], expected_token: str) -> str | None:
    """Return the hub challenge when the verification handshake matches, else None."""
    if not expected_token:
        return None
    if params.get("hub.mode") != "subscribe":
        return None
    if not hmac.compare_digest(params.get("hub.verify_token") or "", expected_token):
        return None
    return params.get("hub.challenge") or ""


def sign_body(body: bytes, app_secret: str) -> str:
    digest = hmac.new(app_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_signature(body: bytes, signature_header: str | None, app_secret: str | None, env: str) -> bool:
    if not app_secret:
        if env.lower() in DEV_ENVS:
            logger.warning("No app secret configured; accepting unsigned webhook in dev mode")
            return True
        logger.error("Missing app secret for signature verification")
        return False

    if not signature_header or not signature_header.lower().startswith(SIGNATURE_PREFIX):
        return False

    return hmac.compare_digest(sign_body(body, app_secret), SIGNATURE_PREFIX + signature_header[len(SIGNATURE_PREFIX):].lower())
