"""Webhook signature verification.

The expected ``stripe-signature`` header is ``v1=`` followed by the lowercase
hex HMAC-SHA256 of the raw request body, keyed with the shared webhook secret.
Comparison is constant-time over the full header value.
"""

import hashlib
import hmac
import logging

from relay.config import Settings
from relay.errors import SignatureInvalid

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "stripe-signature"
SIGNATURE_PREFIX = "v1="


def compute_signature(body: bytes, secret: str) -> str:
    """Header value a trusted sender would attach to ``body``."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(body: bytes, signature: str | None, secret: str) -> bool:
    """Return True if ``signature`` matches ``body`` under ``secret``.

    A mismatch, an absent header or a malformed header all return False.
    """
    if not signature or not secret:
        return False

    try:
        received = signature.encode("ascii")
    except UnicodeEncodeError:
        return False

    expected = compute_signature(body, secret).encode("ascii")
    return hmac.compare_digest(expected, received)


def authenticate(body: bytes, signature: str | None, settings: Settings) -> None:
    """Apply the configured verification policy. Raises SignatureInvalid."""
    secret = settings.stripe_webhook_secret

    if secret:
        if not verify_signature(body, signature, secret):
            raise SignatureInvalid("Webhook signature verification failed")
        return

    if settings.allow_unverified_webhooks:
        logger.warning(
            "STRIPE_WEBHOOK_SECRET not set - accepting webhook WITHOUT signature verification"
        )
        return

    raise SignatureInvalid(
        "STRIPE_WEBHOOK_SECRET not set and ALLOW_UNVERIFIED_WEBHOOKS is off - rejecting webhook"
    )
