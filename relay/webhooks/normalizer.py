"""Maps payment-failure events onto the canonical FailedPayment record."""

import logging
from datetime import datetime, timezone

from relay.errors import LookupFailed
from relay.providers.base import (
    DEFAULT_FAILURE_REASON,
    UNKNOWN_EMAIL,
    CustomerLookup,
    FailedPayment,
)

from .events import (
    ChargeFailed,
    InvoicePaymentFailed,
    PaymentIntentFailed,
    StripeEvent,
    Unrecognized,
)

logger = logging.getLogger(__name__)

INVOICE_ID_PREFIX = "inv_"


async def resolve_customer_email(customer_id: str | None, lookup: CustomerLookup) -> str:
    """Look up the customer's email, degrading to "Unknown" on any failure."""
    if not customer_id:
        return UNKNOWN_EMAIL

    try:
        customer = await lookup.retrieve_customer(customer_id)
    except LookupFailed as e:
        logger.warning(f"Customer lookup failed for {customer_id}: {e}")
        return UNKNOWN_EMAIL
    except Exception as e:
        logger.warning(f"Customer lookup errored for {customer_id}: {type(e).__name__}: {e}")
        return UNKNOWN_EMAIL

    email = customer.get("email") if isinstance(customer, dict) else None
    if not email or not isinstance(email, str):
        logger.warning(f"Customer {customer_id} has no email on file")
        return UNKNOWN_EMAIL
    return email


async def normalize(event: StripeEvent, lookup: CustomerLookup) -> FailedPayment | None:
    """Build the canonical record for ``event``, or None for event types we don't handle."""
    if isinstance(event, PaymentIntentFailed):
        payment_id = event.id
        amount = event.amount
        reason = event.last_payment_error.message if event.last_payment_error else None
    elif isinstance(event, InvoicePaymentFailed):
        payment_id = f"{INVOICE_ID_PREFIX}{event.id}"
        amount = event.amount_due
        reason = event.last_finalization_error.message if event.last_finalization_error else None
    elif isinstance(event, ChargeFailed):
        payment_id = event.id
        amount = event.amount
        reason = event.failure_message
    elif isinstance(event, Unrecognized):
        logger.warning(f"Unhandled event type: {event.raw_type}")
        return None
    else:
        raise TypeError(f"Not a Stripe event: {type(event).__name__}")

    email = await resolve_customer_email(event.customer, lookup)

    return FailedPayment(
        payment_id=payment_id,
        customer_id=event.customer,
        customer_email=email,
        amount_minor_units=amount,
        currency=event.currency,
        failure_reason=reason or DEFAULT_FAILURE_REASON,
        failure_date=datetime.now(timezone.utc),
    )
