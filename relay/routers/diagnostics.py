"""Manual end-to-end test trigger and webhook setup instructions."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.util import get_remote_address

from relay.config import Settings, settings as app_settings
from relay.dependencies import get_notifier, get_recorder, get_settings
from relay.providers.base import FailedPayment, Notifier, Recorder
from relay.webhooks import HANDLED_EVENT_TYPES, FanOutResult, fan_out

logger = logging.getLogger(__name__)
router = APIRouter(tags=["diagnostics"])

limiter = Limiter(key_func=get_remote_address)

PASSED = "passed"
FAILED = "failed"


class TestResults(BaseModel):
    email: str
    airtable: str


class TestRunResponse(BaseModel):
    success: bool
    message: str
    tests: TestResults
    results: list[FanOutResult]


class SetupResponse(BaseModel):
    webhook_url: str
    events: list[str]
    signing_secret_configured: bool
    instructions: list[str]


def build_test_payments() -> list[FailedPayment]:
    """Two fixed records covering the payment-intent and invoice id shapes."""
    now = datetime.now(timezone.utc)
    stamp = int(now.timestamp())
    return [
        FailedPayment(
            payment_id=f"pi_test_{stamp}",
            customer_id="cus_test_123",
            customer_email="test.customer@example.com",
            amount_minor_units=2000,
            currency="usd",
            failure_reason="Your card was declined. (test)",
            failure_date=now,
        ),
        FailedPayment(
            payment_id=f"inv_in_test_{stamp}",
            customer_id="cus_test_456",
            customer_email="another.customer@example.com",
            amount_minor_units=4999,
            currency="eur",
            failure_reason="Insufficient funds. (test)",
            failure_date=now,
        ),
    ]


def _test_rate_limit() -> str:
    # Parsed even when exempt, so it must always be a valid limit string
    return app_settings.test_rate_limit or "1/second"


@router.post("/test", response_model=TestRunResponse)
@limiter.limit(_test_rate_limit, exempt_when=lambda: not app_settings.test_rate_limit)
async def run_test(
    request: Request,
    settings: Settings = Depends(get_settings),
    notifier: Notifier = Depends(get_notifier),
    recorder: Recorder = Depends(get_recorder),
):
    """Run the notifier and recorder against fixture records. Sends real email."""
    logger.info("Manual end-to-end test triggered")

    try:
        results = [
            await fan_out(payment, notifier, recorder, timeout=settings.downstream_timeout_seconds)
            for payment in build_test_payments()
        ]
    except Exception as e:
        logger.exception("Test run failed unexpectedly")
        raise HTTPException(500, f"Test run failed: {e}")

    email_ok = all(r.notifier.ok for r in results)
    airtable_ok = all(r.recorder.ok for r in results)
    success = email_ok and airtable_ok

    if success:
        logger.info("End-to-end test passed")
    else:
        logger.warning(f"End-to-end test finished with failures (email={email_ok}, airtable={airtable_ok})")

    return TestRunResponse(
        success=success,
        message="All integrations working" if success else "Some integrations failed, see /logs",
        tests=TestResults(
            email=PASSED if email_ok else FAILED,
            airtable=PASSED if airtable_ok else FAILED,
        ),
        results=results,
    )


@router.get("/setup-webhook", response_model=SetupResponse)
async def setup_webhook(request: Request, settings: Settings = Depends(get_settings)):
    base_url = settings.public_url or str(request.base_url)
    webhook_url = f"{base_url.rstrip('/')}/webhook/stripe"

    return SetupResponse(
        webhook_url=webhook_url,
        events=HANDLED_EVENT_TYPES,
        signing_secret_configured=bool(settings.stripe_webhook_secret),
        instructions=[
            "Open the Stripe Dashboard and go to Developers > Webhooks.",
            f"Add an endpoint with URL: {webhook_url}",
            f"Select the events: {', '.join(HANDLED_EVENT_TYPES)}",
            "Copy the endpoint's signing secret into STRIPE_WEBHOOK_SECRET and restart the service.",
            "POST /test to check email and Airtable delivery.",
        ],
    )
