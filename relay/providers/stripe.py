"""Stripe API client for customer lookups."""

import logging

import httpx

from relay.config import Settings
from relay.errors import LookupFailed, parse_stripe_error

from .base import CustomerLookup

logger = logging.getLogger(__name__)

STRIPE_API = "https://api.stripe.com/v1"


class StripeClient(CustomerLookup):
    """Minimal Stripe REST client, authenticated with the secret key."""

    def __init__(
        self,
        settings: Settings,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.settings.stripe_secret_key}"}

    async def retrieve_customer(self, customer_id: str) -> dict:
        if not self.settings.stripe_secret_key:
            raise LookupFailed("Stripe secret key not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    f"{STRIPE_API}/customers/{customer_id}",
                    headers=self._get_headers(),
                )
        except httpx.HTTPError as e:
            raise LookupFailed(f"Stripe request failed: {e}") from e

        if response.status_code == 404:
            raise LookupFailed(f"Stripe customer not found: {customer_id}")
        if not response.is_success:
            raise LookupFailed(
                f"Stripe API error {response.status_code}: {parse_stripe_error(response.text)}"
            )

        try:
            customer = response.json()
        except ValueError as e:
            raise LookupFailed(f"Stripe returned a non-JSON body for {customer_id}") from e
        if not isinstance(customer, dict):
            raise LookupFailed(f"Stripe returned an unexpected body for {customer_id}")

        return customer
