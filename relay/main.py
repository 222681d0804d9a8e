"""Payment Failure Relay - FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from relay.config import settings, validate_settings
from relay.dependencies import log_buffer
from relay.errors import InboundRejected
from relay.logbuffer import configure_logging
from relay.routers import diagnostics, health, logs, webhooks

logger = logging.getLogger(__name__)

configure_logging(settings.log_level, log_buffer)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # StartupFailed propagates and the server refuses to start
    validate_settings(settings)
    if not settings.stripe_webhook_secret:
        if settings.allow_unverified_webhooks:
            logger.warning("Running WITHOUT webhook signature verification (ALLOW_UNVERIFIED_WEBHOOKS=true)")
        else:
            logger.warning("STRIPE_WEBHOOK_SECRET not set - all webhooks will be rejected")
    logger.info(f"Payment relay started on port {settings.port}")
    yield
    logger.info("Payment relay shutting down")


app = FastAPI(
    title="Payment Failure Relay",
    description="Relays Stripe payment failures to email alerts and Airtable",
    version=health.VERSION,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = diagnostics.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InboundRejected)
async def inbound_rejected_handler(request: Request, exc: InboundRejected):
    logger.error(f"Webhook rejected on {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"error": exc.public_message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(health.router)
app.include_router(logs.router)
app.include_router(webhooks.router)
app.include_router(diagnostics.router)
