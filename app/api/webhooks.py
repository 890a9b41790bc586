from __future__ import annotations

import json
import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from app.application.dto.webhook_event import WebhookEventDTO
from app.infrastructure.whatsapp.webhook_verify import verify_signature, verify_subscription
from app.wiring.dependencies import get_handle_incoming_message_use_case
from app.core.config import settings


router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/webhooks/whatsapp")
def verify_webhook(request: Request):
    challenge = verify_subscription(request.query_params, settings.WHATSAPP_VERIFY_TOKEN)
    if challenge is None:
        raise HTTPException(status_code=403, detail="Verification failed")
    return PlainTextResponse(challenge)


@router.post("/webhooks/whatsapp")
async def whatsapp_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
) -> Response:
    body = await request.body()
    signature = request.headers.get("X-Hub-Signature-256")
    if not verify_signature(body, signature, settings.WHATSAPP_APP_SECRET, settings.ENV):
        logger.warning("Webhook signature rejected")
        return Response(status_code=403)

    try:
        payload = json.loads(body.decode("utf-8")) if body else {}
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.exception("Failed to parse webhook body")
        return Response(status_code=400)

    try:
        use_case = get_handle_incoming_message_use_case()
    except Exception as e:
        logger.exception("Failed to initialize use case", extra={"reason": str(e)})
        return Response(status_code=500)

    try:
        messages = WebhookEventDTO.model_validate(payload).extract_messages()
    except ValidationError:
        logger.warning("Webhook payload has unexpected shape")
        return Response(status_code=400)
    logger.info("Webhook received", extra={"message_count": len(messages)})

    # Acknowledge immediately; replies go out through the platform port.
    for message in messages:
        background_tasks.add_task(use_case.handle, message)

    return Response(status_code=200)
