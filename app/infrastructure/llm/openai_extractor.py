from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import date
from typing import Any

from openai import OpenAI

from app.application.exceptions import LLMContractError, LLMUpstreamError
from app.application.ports.booking_extractor import BookingExtractorPort
from app.application.ports.catalog import CatalogPort
from app.application.utils.time_format import parse_hhmm, parse_iso_date
from app.core.config import settings
from app.domain.entities.intent import PartialBookingRequest
from app.infrastructure.llm.prompts import build_extract_prompt


class OpenAIBookingExtractor(BookingExtractorPort):
    """
    OpenAI-backed booking extraction.

    The keyword extractor runs first and provides the baseline; fields the
    model returns (and that check out against the catalog) override it.
    Upstream or contract failures fall back to the baseline.

    Raises nothing on LLM failure; LLMUpstreamError and LLMContractError are
    logged and swallowed at this boundary.
    """

    def __init__(
        self,
        catalog: CatalogPort,
        fallback: BookingExtractorPort,
        client: Any | None = None,
        model: str | None = None,
        temperature: float | None = None,
    ) -> None:
        self._catalog = catalog
        self._fallback = fallback
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)
        self._model = model or settings.OPENAI_MODEL_EXTRACT
        self._temperature = settings.OPENAI_TEMPERATURE_EXTRACT if temperature is None else temperature
        self._logger = logging.getLogger(__name__)

    def extract(self, text: str, today: date) -> PartialBookingRequest:
        baseline = self._fallback.extract(text, today)
        try:
            data = self._extract_fields(text, today)
        except (LLMUpstreamError, LLMContractError) as e:
            self._logger.warning("LLM extraction failed; using keyword extraction", extra={"reason": str(e)})
            return baseline
        return self._merge(baseline, data)

    def _extract_fields(self, text: str, today: date) -> dict[str, Any]:
        prompt = build_extract_prompt(
            text=text,
            today=today,
            services=[{"id": s.id, "name": s.name} for s in self._catalog.list_services()],
            stylists=[{"id": s.id, "name": s.name} for s in self._catalog.list_stylists()],
        )
        content = self._call_text(prompt)
        data = _parse_json(content)
        if not isinstance(data, dict):
            raise LLMContractError("Extract: expected a JSON object.")
        return data

    def _merge(self, baseline: PartialBookingRequest, data: dict[str, Any]) -> PartialBookingRequest:
        updates: dict[str, Any] = {}

        service_id = _clean(data.get("service_id"))
        if service_id and self._catalog.get_service(service_id):
            updates["service_id"] = self._catalog.get_service(service_id).id

        stylist_id = _clean(data.get("stylist_id"))
        if stylist_id and self._catalog.get_stylist(stylist_id):
            updates["stylist_id"] = self._catalog.get_stylist(stylist_id).id

        raw_date = _clean(data.get("date"))
        if raw_date:
            try:
                updates["date"] = parse_iso_date(raw_date)
                updates["date_was_explicit"] = True
            except ValueError:
                self._logger.info("Ignoring unparseable LLM date", extra={"reason": raw_date})

        raw_time = _clean(data.get("time"))
        if raw_time:
            try:
                updates["time"] = parse_hhmm(raw_time)
            except ValueError:
                self._logger.info("Ignoring unparseable LLM time", extra={"reason": raw_time})

        booking_id = _clean(data.get("booking_id"))
        if booking_id and not baseline.booking_id:
            updates["booking_id"] = booking_id.upper()

        reason = _clean(data.get("reason"))
        if reason:
            updates["reason"] = reason

        return replace(baseline, **updates)

    def _call_text(self, prompt: str) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": "Return only valid JSON. Do not include markdown or extra text."},
                    {"role": "user", "content": prompt},
                ],
                temperature=self._temperature,
                max_tokens=300,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise LLMUpstreamError(f"OpenAI API error: {e}") from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise LLMContractError("LLM returned empty response text.")
        return content


def _clean(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        snippet = text[:200].replace("\n", " ")
        raise LLMContractError(f"Extract: invalid JSON. Snippet: {snippet!r}")
