"""POST /webhook/stripe end to end, with fake collaborators."""

from __future__ import annotations

from relay.dependencies import log_buffer

from .conftest import make_settings, sign, stripe_event

CHARGE = {
    "id": "ch_3Nabc",
    "object": "charge",
    "amount": 2500,
    "currency": "usd",
    "customer": "cus_known",
    "failure_message": "Your card has insufficient funds.",
}


def test_valid_charge_failed_fans_out_once(client, notifier, recorder):
    body = stripe_event("charge.failed", CHARGE)
    resp = client.post("/webhook/stripe", content=body, headers=sign(body))

    assert resp.status_code == 200
    assert resp.json() == {"received": True}
    assert len(notifier.calls) == 1
    assert len(recorder.calls) == 1
    assert notifier.calls[0].payment_id == recorder.calls[0].payment_id == "ch_3Nabc"
    assert notifier.calls[0].customer_email == "jane@example.com"
    assert notifier.calls[0].currency == "USD"


def test_bad_signature_rejected_without_side_effects(client, notifier, recorder):
    body = stripe_event("charge.failed", CHARGE)
    headers = sign(body, secret="whsec_wrong")
    resp = client.post("/webhook/stripe", content=body, headers=headers)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid signature"}
    assert notifier.calls == []
    assert recorder.calls == []
    assert any(e.level == "ERROR" for e in log_buffer.snapshot())


def test_tampered_body_rejected(client, notifier):
    body = stripe_event("charge.failed", CHARGE)
    headers = sign(body)
    tampered = body.replace(b"2500", b"2501")
    resp = client.post("/webhook/stripe", content=tampered, headers=headers)

    assert resp.status_code == 400
    assert notifier.calls == []


def test_missing_signature_header(client, notifier):
    body = stripe_event("charge.failed", CHARGE)
    resp = client.post("/webhook/stripe", content=body)

    assert resp.status_code == 400
    assert notifier.calls == []


def test_signed_but_malformed_json(client, notifier):
    body = b"{not json"
    resp = client.post("/webhook/stripe", content=body, headers=sign(body))

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid payload"}
    assert notifier.calls == []


def test_signed_known_type_missing_fields(client, recorder):
    body = stripe_event("payment_intent.payment_failed", {"id": "pi_1"})
    resp = client.post("/webhook/stripe", content=body, headers=sign(body))

    assert resp.status_code == 400
    assert recorder.calls == []


def test_unrecognized_type_acknowledged(client, notifier, recorder):
    body = stripe_event("customer.updated", {"id": "cus_1"})
    resp = client.post("/webhook/stripe", content=body, headers=sign(body))

    assert resp.status_code == 200
    assert resp.json() == {"received": True}
    assert notifier.calls == [] and recorder.calls == []
    assert any("customer.updated" in e.message and e.level == "WARNING" for e in log_buffer.snapshot())


def test_invoice_failure_prefixed(client, recorder):
    body = stripe_event(
        "invoice.payment_failed",
        {"id": "in_123", "amount_due": 999, "currency": "eur", "customer": "cus_unknown"},
    )
    resp = client.post("/webhook/stripe", content=body, headers=sign(body))

    assert resp.status_code == 200
    assert recorder.calls[0].payment_id == "inv_in_123"
    # Lookup failure degrades, never fails the request
    assert recorder.calls[0].customer_email == "Unknown"


def test_downstream_failures_still_acknowledged(client, notifier, recorder):
    notifier.fail = True
    recorder.fail = True
    body = stripe_event("charge.failed", CHARGE)
    resp = client.post("/webhook/stripe", content=body, headers=sign(body))

    assert resp.status_code == 200
    assert resp.json() == {"received": True}
    errors = [e.message for e in log_buffer.snapshot() if e.level == "ERROR"]
    assert any("mail server unavailable" in m for m in errors)
    assert any("table not found" in m for m in errors)


def test_replayed_webhook_is_processed_again(client, notifier):
    body = stripe_event("charge.failed", CHARGE)
    for _ in range(2):
        assert client.post("/webhook/stripe", content=body, headers=sign(body)).status_code == 200
    assert len(notifier.calls) == 2


def test_no_secret_rejects_unless_explicitly_allowed(client, settings, notifier):
    body = stripe_event("charge.failed", CHARGE)

    settings.stripe_webhook_secret = ""
    assert client.post("/webhook/stripe", content=body).status_code == 400
    assert notifier.calls == []

    settings.allow_unverified_webhooks = True
    resp = client.post("/webhook/stripe", content=body)
    assert resp.status_code == 200
    assert len(notifier.calls) == 1
    assert any(
        "WITHOUT signature verification" in e.message and e.level == "WARNING"
        for e in log_buffer.snapshot()
    )


def test_unverified_mode_still_rejects_bad_json(client):
    from relay.dependencies import get_settings
    from relay.main import app

    unverified = make_settings(stripe_webhook_secret="", allow_unverified_webhooks=True)
    app.dependency_overrides[get_settings] = lambda: unverified
    resp = client.post("/webhook/stripe", content=b"nope")
    assert resp.status_code == 400


def test_garbled_customer_lookup_still_fans_out(client, notifier, recorder):
    import httpx

    from relay.dependencies import get_customer_lookup
    from relay.main import app
    from relay.providers import StripeClient

    transport = httpx.MockTransport(lambda r: httpx.Response(200, text="<html>proxy error</html>"))
    stripe = StripeClient(make_settings(stripe_secret_key="sk_test"), transport=transport)
    app.dependency_overrides[get_customer_lookup] = lambda: stripe

    body = stripe_event("charge.failed", {**CHARGE, "customer": "cus_x"})
    resp = client.post("/webhook/stripe", content=body, headers=sign(body))

    assert resp.status_code == 200
    assert resp.json() == {"received": True}
    assert len(notifier.calls) == 1 and len(recorder.calls) == 1
    assert notifier.calls[0].customer_email == "Unknown"
