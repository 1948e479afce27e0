from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, Request, Response
from fastapi.responses import PlainTextResponse

from app.application.dto.webhook_event import WebhookEventDTO
from app.core.config import settings
from app.infrastructure.whatsapp.webhook_verify import verify_post_signature, verify_subscription
from app.wiring.dependencies import get_handle_incoming_message_use_case


router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/webhooks/whatsapp")
def verify_webhook(
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
):
    challenge = verify_subscription(hub_mode, hub_verify_token, hub_challenge, settings.META_WA_VERIFY_TOKEN)
    if challenge is None:
        logger.warning("Webhook verification rejected", extra={"reason": f"mode={hub_mode}"})
        raise HTTPException(status_code=403, detail="Verification failed")

    logger.info("Webhook verified")
    return PlainTextResponse(challenge)


@router.post("/webhooks/whatsapp")
async def receive_whatsapp_messages(request: Request, background_tasks: BackgroundTasks) -> Response:
    """
    Accept a WhatsApp Cloud API delivery and queue each text message.

    Meta only needs a fast 2xx; conversation work runs after the response
    through BackgroundTasks.
    """
    try:
        use_case = get_handle_incoming_message_use_case()
    except Exception as e:
        logger.exception("Failed to initialize use case", extra={"error": str(e)})
        return Response(status_code=500)

    body = await request.body()
    if not verify_post_signature(body, request.headers.get("X-Hub-Signature-256"), settings.META_APP_SECRET, settings.ENV):
        logger.warning("Webhook signature rejected")
        return Response(status_code=403)

    payload = _decode_body(body)
    if payload is None:
        return Response(status_code=400)

    try:
        messages = WebhookEventDTO.model_validate(payload).extract_messages()
    except Exception as e:
        logger.exception("Webhook payload not understood", extra={"error": str(e)})
        return Response(status_code=400)

    logger.info("Webhook received", extra={"message_count": len(messages)})
    for message in messages:
        background_tasks.add_task(use_case.handle, message)
    return Response(status_code=200)


def _decode_body(body: bytes) -> dict[str, Any] | None:
    if not body:
        return {}
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.exception("Failed to parse webhook body")
        return None
    if not isinstance(payload, dict):
        logger.warning("Webhook body is not a JSON object")
        return None
    return payload
