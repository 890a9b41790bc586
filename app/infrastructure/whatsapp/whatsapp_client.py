from __future__ import annotations

import logging

import httpx


class WhatsAppClient:
    """Thin WhatsApp Cloud API client for outbound text messages."""

    def __init__(
        self,
        access_token: str,
        phone_number_id: str,
        graph_api_version: str = "v20.0",
        http_client: httpx.Client | None = None,
    ) -> None:
        self._access_token = access_token
        self._send_endpoint = f"https://graph.facebook.com/{graph_api_version}/{phone_number_id}/messages"
        self._client = http_client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send_text(self, recipient_id: str, text: str) -> None:
        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": recipient_id,
            "type": "text",
            "text": {"body": text},
        }
        headers = {"Authorization": f"Bearer {self._access_token}"}
        resp = self._client.post(self._send_endpoint, headers=headers, json=payload)
        if resp.status_code >= 400:
            try:
                error = resp.json().get("error", {})
                error_code = error.get("code")
                error_message = error.get("message")
            except ValueError:
                error_code = None
                error_message = resp.text

            self._logger.error(
                "WhatsApp send failed",
                extra={
                    "status": resp.status_code,
                    "error_code": error_code,
                    "reason": error_message,
                    "recipient_id": recipient_id,
                    "text_length": len(text),
                },
            )
            resp.raise_for_status()
