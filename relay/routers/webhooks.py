"""Stripe webhook receiver - verifies, normalizes and fans out payment failures."""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from relay.config import Settings
from relay.dependencies import get_customer_lookup, get_notifier, get_recorder, get_settings
from relay.providers.base import CustomerLookup, Notifier, Recorder
from relay.webhooks import authenticate, decode_event, fan_out, normalize
from relay.webhooks.verification import SIGNATURE_HEADER

logger = logging.getLogger(__name__)
router = APIRouter(tags=["webhooks"])


class WebhookAck(BaseModel):
    received: bool = True


@router.post("/webhook/stripe", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    lookup: CustomerLookup = Depends(get_customer_lookup),
    notifier: Notifier = Depends(get_notifier),
    recorder: Recorder = Depends(get_recorder),
):
    """Receive a Stripe event. SignatureInvalid/DecodeFailed surface as 400 via the app handler."""
    # Verification is defined over the raw bytes, never a re-serialized body
    body = await request.body()
    authenticate(body, request.headers.get(SIGNATURE_HEADER), settings)

    event = decode_event(body)
    logger.info(f"Webhook received: {getattr(event, 'raw_type', event.kind)}")

    payment = await normalize(event, lookup)
    if payment is not None:
        await fan_out(payment, notifier, recorder, timeout=settings.downstream_timeout_seconds)

    return WebhookAck()
