from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from relay.config import Settings
from relay.dependencies import get_log_buffer, get_settings
from relay.logbuffer import LogBuffer


router = APIRouter(tags=["health"])

VERSION = "0.1.0"

_startup_time = datetime.now(timezone.utc)


class EndpointInfo(BaseModel):
    method: str
    path: str
    description: str


class ServiceDescriptor(BaseModel):
    service: str
    version: str
    status: str
    endpoints: list[EndpointInfo]
    last_activity: datetime | None = None


class IntegrationStatus(BaseModel):
    configured: bool
    status: str


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    timestamp: datetime
    unverified_webhooks_allowed: bool
    integrations: dict[str, IntegrationStatus]


ENDPOINTS = [
    EndpointInfo(method="GET", path="/", description="Service descriptor and endpoint list"),
    EndpointInfo(method="GET", path="/health", description="Liveness and integration configuration"),
    EndpointInfo(method="GET", path="/logs", description="Recent diagnostic log entries"),
    EndpointInfo(method="POST", path="/webhook/stripe", description="Stripe webhook receiver"),
    EndpointInfo(method="POST", path="/test", description="Send a test alert and create test records"),
    EndpointInfo(method="GET", path="/setup-webhook", description="Webhook URL and setup instructions"),
]


def _status(configured: bool, missing: str) -> IntegrationStatus:
    if not configured:
        return IntegrationStatus(configured=False, status=missing)
    return IntegrationStatus(configured=True, status="ok")


def check_integrations(settings: Settings) -> dict[str, IntegrationStatus]:
    if settings.stripe_webhook_secret:
        webhook = IntegrationStatus(configured=True, status="ok")
    elif settings.allow_unverified_webhooks:
        webhook = IntegrationStatus(configured=False, status="signing secret not configured (INSECURE: unverified webhooks accepted)")
    else:
        webhook = IntegrationStatus(configured=False, status="signing secret not configured (webhooks rejected)")

    return {
        "stripe": _status(settings.stripe_configured, "secret key not configured"),
        "stripe_webhook": webhook,
        "airtable": _status(settings.airtable_configured, "api key or base id not configured"),
        "gmail": _status(settings.gmail_configured, "credentials not configured"),
    }


@router.get("/", response_model=ServiceDescriptor)
async def service_descriptor(buffer: LogBuffer = Depends(get_log_buffer)):
    return ServiceDescriptor(
        service="Payment Failure Relay",
        version=VERSION,
        status="running",
        endpoints=ENDPOINTS,
        last_activity=buffer.last_activity,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    now = datetime.now(timezone.utc)

    return HealthResponse(
        status="ok",
        version=VERSION,
        uptime_seconds=round((now - _startup_time).total_seconds(), 2),
        timestamp=now,
        unverified_webhooks_allowed=not settings.stripe_webhook_secret and settings.allow_unverified_webhooks,
        integrations=check_integrations(settings),
    )
