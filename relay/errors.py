"""Relay error types and shared error-parsing utilities for external APIs."""

import json


class RelayError(Exception):
    """Base class for every error raised by the relay."""


class StartupFailed(RelayError):
    """Configuration is unusable; the process must not serve."""


class InboundRejected(RelayError):
    """An inbound webhook was rejected before any processing. Maps to HTTP 400."""

    public_message = "Webhook rejected"


class SignatureInvalid(InboundRejected):
    public_message = "Invalid signature"


class DecodeFailed(InboundRejected):
    public_message = "Invalid payload"


class LookupFailed(RelayError):
    """Customer lookup against Stripe failed."""


class NotifierFailed(RelayError):
    """The email alert could not be sent."""


class RecorderFailed(RelayError):
    """The tabular record could not be created."""


def parse_google_error(response_text: str) -> str:
    """Extract a readable message from a Google API error response.

    Google APIs return JSON like {"error": {"code": 400, "message": "...", "status": "..."}}.
    Returns "STATUS: message" when parseable, raw text otherwise.
    """
    try:
        body = json.loads(response_text)
        err = body.get("error", {})
        if isinstance(err, str):
            # OAuth token endpoint: {"error": "invalid_grant", "error_description": "..."}
            desc = body.get("error_description", "")
            return f"{err}: {desc}" if desc else err
        msg = err.get("message", "")
        status = err.get("status", "")
        if msg:
            return f"{status}: {msg}" if status else msg
    except Exception:
        pass
    return response_text


def parse_stripe_error(response_text: str) -> str:
    """Stripe errors look like {"error": {"type": "...", "code": "...", "message": "..."}}."""
    try:
        err = json.loads(response_text).get("error", {})
        msg = err.get("message", "")
        code = err.get("code") or err.get("type", "")
        if msg:
            return f"{code}: {msg}" if code else msg
    except Exception:
        pass
    return response_text


def parse_airtable_error(response_text: str) -> str:
    """Airtable returns either {"error": {"type", "message"}} or {"error": "NOT_FOUND"}."""
    try:
        err = json.loads(response_text).get("error", {})
        if isinstance(err, str):
            return err
        msg = err.get("message", "")
        err_type = err.get("type", "")
        if msg:
            return f"{err_type}: {msg}" if err_type else msg
        if err_type:
            return err_type
    except Exception:
        pass
    return response_text
