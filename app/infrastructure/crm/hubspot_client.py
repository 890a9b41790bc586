from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from app.application.ports.crm import BookingCreatedEvent, CrmSyncPort
from app.application.utils.time_format import format_hhmm
from app.core.config import settings
from app.domain.entities.booking import CustomerIdentity

# HubSpot reports duplicate contacts as 409 with "Existing ID: <id>" in the message.
_EXISTING_ID = re.compile(r"Existing ID:\s*(\d+)")

CONTACT_TO_DEAL = 3
CONTACT_TO_TICKET = 16


class HubSpotCrm(CrmSyncPort):
    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._access_token = access_token or settings.HUBSPOT_ACCESS_TOKEN
        self._base_url = (base_url or settings.HUBSPOT_BASE_URL).rstrip("/")
        self._client = http_client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

        if not self._access_token:
            raise ValueError("HUBSPOT_ACCESS_TOKEN is required for HubSpot CRM sync")

    def booking_created(self, event: BookingCreatedEvent) -> None:
        booking = event.booking
        contact_id = self._upsert_contact(event.customer)
        properties = {
            "dealname": f"{booking.service_name} - {event.customer.name}",
            "amount": str(booking.price),
            "closedate": booking.date.isoformat(),
            "dealstage": "appointmentscheduled",
            "service_name": booking.service_name,
            "stylist_name": booking.stylist_name,
            "booking_id": booking.id,
            "appointment_date": f"{booking.date.isoformat()} {format_hhmm(booking.time)}",
        }
        data = self._post("/crm/v3/objects/deals", properties, contact_id, CONTACT_TO_DEAL)
        self._logger.info("CRM deal created", extra={"booking_id": booking.id, "deal_id": data.get("id")})

    def escalate(self, customer: CustomerIdentity, message: str) -> str | None:
        contact_id = self._upsert_contact(customer)
        properties = {
            "subject": f"Customer escalation - {customer.name}",
            "content": message,
            "hs_ticket_priority": "HIGH",
            "hs_ticket_category": "complaint",
            "hs_pipeline": "0",
            "hs_pipeline_stage": "1",
        }
        data = self._post("/crm/v3/objects/tickets", properties, contact_id, CONTACT_TO_TICKET)
        ticket_id = data.get("id")
        return str(ticket_id) if ticket_id else None

    def _upsert_contact(self, customer: CustomerIdentity) -> str | None:
        first, _, last = customer.name.partition(" ")
        properties = {"phone": customer.phone, "firstname": first, "lastname": last or None, "email": customer.email}
        properties = {k: v for k, v in properties.items() if v}

        resp = self._client.post(
            f"{self._base_url}/crm/v3/objects/contacts",
            headers=self._headers(),
            json={"properties": properties},
        )
        if resp.status_code == 409:
            match = _EXISTING_ID.search(resp.text)
            return match.group(1) if match else None
        self._raise_for_status(resp, "contact")
        return str(resp.json().get("id") or "") or None

    def _post(self, path: str, properties: dict[str, Any], contact_id: str | None, association_type: int) -> dict[str, Any]:
        body: dict[str, Any] = {"properties": properties}
        if contact_id:
            body["associations"] = [
                {
                    "to": {"id": contact_id},
                    "types": [{"associationCategory": "HUBSPOT_DEFINED", "associationTypeId": association_type}],
                }
            ]
        resp = self._client.post(f"{self._base_url}{path}", headers=self._headers(), json=body)
        self._raise_for_status(resp, path.rsplit("/", 1)[-1])
        return resp.json()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._access_token}"}

    def _raise_for_status(self, resp: httpx.Response, what: str) -> None:
        if resp.status_code >= 400:
            self._logger.error(
                "HubSpot request failed",
                extra={"status": resp.status_code, "reason": resp.text[:200], "object": what},
            )
            resp.raise_for_status()
