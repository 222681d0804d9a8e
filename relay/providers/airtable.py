"""Airtable recorder: one row per failed payment."""

import logging
from urllib.parse import quote

import httpx

from relay.config import Settings
from relay.errors import RecorderFailed, parse_airtable_error

from .base import INITIAL_STATUS, FailedPayment, Recorder

logger = logging.getLogger(__name__)

AIRTABLE_API = "https://api.airtable.com/v0"


def build_fields(payment: FailedPayment) -> dict:
    """Map the canonical record onto the table's column names."""
    return {
        "Payment ID": payment.payment_id,
        "Customer ID": payment.customer_id or "",
        "Customer Email": payment.customer_email,
        "Amount": payment.amount_major_units,
        "Currency": payment.currency,
        "Failure Reason": payment.failure_reason,
        "Failure Date": payment.failure_date.isoformat(),
        "Status": INITIAL_STATUS,
    }


class AirtableRecorder(Recorder):
    def __init__(
        self,
        settings: Settings,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return "airtable"

    def _table_url(self) -> str:
        return f"{AIRTABLE_API}/{self.settings.airtable_base_id}/{quote(self.settings.airtable_table_name)}"

    async def create_record(self, fields: dict) -> str:
        if not self.settings.airtable_configured:
            raise RecorderFailed("Airtable credentials not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self._table_url(),
                    json={"fields": fields, "typecast": True},
                    headers={"Authorization": f"Bearer {self.settings.airtable_api_key}"},
                )
        except httpx.HTTPError as e:
            raise RecorderFailed(f"Airtable request failed: {e}") from e

        if not response.is_success:
            raise RecorderFailed(
                f"Airtable API error {response.status_code}: {parse_airtable_error(response.text)}"
            )

        record_id = response.json().get("id", "")
        logger.info(f"Airtable record created: {record_id}")
        return record_id

    async def record(self, payment: FailedPayment) -> str:
        return await self.create_record(build_fields(payment))
