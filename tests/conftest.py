"""Shared fixtures for the payment relay test suite."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from relay.config import Settings
from relay.dependencies import (
    get_customer_lookup,
    get_notifier,
    get_recorder,
    get_settings,
    log_buffer,
)
from relay.errors import LookupFailed, NotifierFailed, RecorderFailed
from relay.main import app
from relay.providers.base import CustomerLookup, FailedPayment, Notifier, Recorder
from relay.routers import diagnostics
from relay.webhooks.verification import compute_signature

WEBHOOK_SECRET = "whsec_test_secret"


class FakeLookup(CustomerLookup):
    def __init__(self, customers: dict[str, dict] | None = None):
        self.customers = customers or {}
        self.calls: list[str] = []

    async def retrieve_customer(self, customer_id: str) -> dict:
        self.calls.append(customer_id)
        if customer_id not in self.customers:
            raise LookupFailed(f"no such customer: {customer_id}")
        return self.customers[customer_id]


class FakeNotifier(Notifier):
    name = "fake-email"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[FailedPayment] = []

    async def notify(self, payment: FailedPayment) -> str:
        self.calls.append(payment)
        if self.fail:
            raise NotifierFailed("mail server unavailable")
        return f"msg_{len(self.calls)}"


class FakeRecorder(Recorder):
    name = "fake-table"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[FailedPayment] = []

    async def record(self, payment: FailedPayment) -> str:
        self.calls.append(payment)
        if self.fail:
            raise RecorderFailed("table not found")
        return f"rec_{len(self.calls)}"


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def stripe_event(event_type: str, obj: dict, event_id: str = "evt_test_1") -> bytes:
    return json.dumps({"id": event_id, "type": event_type, "data": {"object": obj}}).encode()


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> dict[str, str]:
    return {"stripe-signature": compute_signature(body, secret), "content-type": "application/json"}


@pytest.fixture()
def settings() -> Settings:
    return make_settings(stripe_webhook_secret=WEBHOOK_SECRET)


@pytest.fixture()
def lookup() -> FakeLookup:
    return FakeLookup({"cus_known": {"id": "cus_known", "email": "jane@example.com"}})


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def recorder() -> FakeRecorder:
    return FakeRecorder()


@pytest.fixture()
def client(settings, lookup, notifier, recorder):
    """TestClient with settings and every outbound collaborator replaced."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_customer_lookup] = lambda: lookup
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_recorder] = lambda: recorder
    diagnostics.limiter.reset()

    with TestClient(app) as c:
        # Drop startup messages so each test sees only its own entries
        log_buffer.clear()
        yield c

    app.dependency_overrides.clear()
