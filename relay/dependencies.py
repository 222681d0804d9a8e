"""FastAPI dependencies - settings, log buffer and outbound collaborators.

Collaborators are created lazily and reused so the Gmail access token cache
survives across requests. Tests swap them via ``app.dependency_overrides``.
"""

from fastapi import Depends

from relay.config import Settings, settings
from relay.logbuffer import LogBuffer
from relay.providers import AirtableRecorder, GmailNotifier, StripeClient
from relay.providers.base import CustomerLookup, Notifier, Recorder

log_buffer = LogBuffer(capacity=max(settings.log_buffer_capacity, 1))

_stripe: StripeClient | None = None
_gmail: GmailNotifier | None = None
_airtable: AirtableRecorder | None = None


def get_settings() -> Settings:
    return settings


def get_log_buffer() -> LogBuffer:
    return log_buffer


def get_customer_lookup(s: Settings = Depends(get_settings)) -> CustomerLookup:
    global _stripe
    if _stripe is None or _stripe.settings is not s:
        _stripe = StripeClient(s, timeout=s.downstream_timeout_seconds)
    return _stripe


def get_notifier(s: Settings = Depends(get_settings)) -> Notifier:
    global _gmail
    if _gmail is None or _gmail.settings is not s:
        _gmail = GmailNotifier(s, timeout=s.downstream_timeout_seconds)
    return _gmail


def get_recorder(s: Settings = Depends(get_settings)) -> Recorder:
    global _airtable
    if _airtable is None or _airtable.settings is not s:
        _airtable = AirtableRecorder(s, timeout=s.downstream_timeout_seconds)
    return _airtable
