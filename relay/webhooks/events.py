"""Typed Stripe webhook events.

Only the three payment-failure event types are modelled; anything else decodes
to ``Unrecognized`` and carries just its type name.
"""

import json
from typing import Any, Literal, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from relay.errors import DecodeFailed

PAYMENT_INTENT_FAILED = "payment_intent.payment_failed"
INVOICE_PAYMENT_FAILED = "invoice.payment_failed"
CHARGE_FAILED = "charge.failed"

HANDLED_EVENT_TYPES = [PAYMENT_INTENT_FAILED, INVOICE_PAYMENT_FAILED, CHARGE_FAILED]


class StripeError(BaseModel):
    message: str | None = None


class _FailedObject(BaseModel):
    id: str = Field(..., min_length=1)
    currency: str = Field(..., min_length=3, max_length=3)
    customer: str | None = None

    @field_validator("customer", mode="before")
    @classmethod
    def customer_id(cls, v: Any) -> Any:
        # Expanded customer objects are reduced to their id
        if isinstance(v, dict):
            return v.get("id")
        return v


class PaymentIntentFailed(_FailedObject):
    kind: Literal["payment_intent.payment_failed"] = PAYMENT_INTENT_FAILED
    amount: int = Field(..., ge=0)
    last_payment_error: StripeError | None = None


class InvoicePaymentFailed(_FailedObject):
    kind: Literal["invoice.payment_failed"] = INVOICE_PAYMENT_FAILED
    amount_due: int = Field(..., ge=0)
    last_finalization_error: StripeError | None = None


class ChargeFailed(_FailedObject):
    kind: Literal["charge.failed"] = CHARGE_FAILED
    amount: int = Field(..., ge=0)
    failure_message: str | None = None


class Unrecognized(BaseModel):
    kind: Literal["unrecognized"] = "unrecognized"
    raw_type: str


StripeEvent = Union[PaymentIntentFailed, InvoicePaymentFailed, ChargeFailed, Unrecognized]

_VARIANTS: dict[str, type[BaseModel]] = {
    PAYMENT_INTENT_FAILED: PaymentIntentFailed,
    INVOICE_PAYMENT_FAILED: InvoicePaymentFailed,
    CHARGE_FAILED: ChargeFailed,
}


class EventData(BaseModel):
    object: dict


class EventEnvelope(BaseModel):
    id: str | None = None
    type: str
    data: EventData


def parse_event(envelope: dict) -> StripeEvent:
    """Route an already-parsed envelope to its variant. Raises DecodeFailed."""
    try:
        env = EventEnvelope.model_validate(envelope)
    except ValidationError as e:
        raise DecodeFailed(f"Malformed event envelope: {e.error_count()} validation error(s)") from e

    variant = _VARIANTS.get(env.type)
    if variant is None:
        return Unrecognized(raw_type=env.type)

    # The variant tag comes from the envelope type, never from the payload
    fields = {k: v for k, v in env.data.object.items() if k != "kind"}
    try:
        return variant.model_validate(fields)
    except ValidationError as e:
        raise DecodeFailed(f"Malformed {env.type} payload: {e.errors()[0]['loc']}") from e


def decode_event(body: bytes) -> StripeEvent:
    """Decode a raw webhook body. Raises DecodeFailed."""
    try:
        envelope = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeFailed(f"Webhook body is not valid JSON: {e}") from e

    if not isinstance(envelope, dict):
        raise DecodeFailed("Webhook body is not a JSON object")

    return parse_event(envelope)
