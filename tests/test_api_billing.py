"""Tests for checkout, Stripe webhooks and premium access."""

from datetime import datetime, timezone

import pytest
import stripe

PERIOD_END = int(datetime(2030, 1, 1, tzinfo=timezone.utc).timestamp())


@pytest.fixture
def billing(settings, monkeypatch):
    monkeypatch.setattr(settings, "billing_enabled", True)
    monkeypatch.setattr(settings, "stripe_secret_key", "sk_test_123")
    monkeypatch.setattr(settings, "stripe_price_id", "price_premium_monthly")
    monkeypatch.setattr(settings, "stripe_webhook_secret", "whsec_test")
    return settings


@pytest.fixture
def stripe_events(monkeypatch):
    """Accept any signature and return the event the test queued."""
    queued = []

    def construct_event(payload, signature, secret):
        if signature != "valid":
            raise stripe.SignatureVerificationError("bad signature", signature)
        return queued.pop(0)

    def retrieve(subscription_id):
        return {"id": subscription_id, "status": "active", "current_period_end": PERIOD_END, "cancel_at_period_end": False}

    monkeypatch.setattr(stripe.Webhook, "construct_event", construct_event)
    monkeypatch.setattr(stripe.Subscription, "retrieve", retrieve)
    return queued


def send(client, queued, event_type, obj):
    queued.append({"type": event_type, "data": {"object": obj}})
    return client.post("/api/webhooks/stripe", content=b"{}", headers={"stripe-signature": "valid"})


def user_id(client, headers):
    return client.get("/auth/me", headers=headers).json()["id"]


def subscribe(client, queued, headers):
    return send(
        client,
        queued,
        "checkout.session.completed",
        {"customer": "cus_1", "subscription": "sub_1", "metadata": {"user_id": str(user_id(client, headers))}},
    )


class TestCheckout:
    def test_billing_disabled(self, client, auth_headers):
        response = client.post("/api/checkout", headers=auth_headers)
        assert response.status_code == 503
        assert response.json()["code"] == "BILLING_DISABLED"

    def test_creates_session(self, client, auth_headers, billing, monkeypatch):
        captured = {}

        def create(**kwargs):
            captured.update(kwargs)
            return {"url": "https://checkout.stripe.test/session"}

        monkeypatch.setattr(stripe.checkout.Session, "create", create)
        response = client.post("/api/checkout", headers={**auth_headers, "Origin": "https://app.example"})
        assert response.json() == {"url": "https://checkout.stripe.test/session"}
        assert captured["mode"] == "subscription"
        assert captured["line_items"] == [{"price": "price_premium_monthly", "quantity": 1}]
        assert captured["success_url"].startswith("https://app.example/billing/success")

    def test_stripe_failure_is_502(self, client, auth_headers, billing, monkeypatch):
        def create(**kwargs):
            raise stripe.APIConnectionError("network down")

        monkeypatch.setattr(stripe.checkout.Session, "create", create)
        response = client.post("/api/checkout", headers=auth_headers)
        assert response.status_code == 502
        assert response.json()["code"] == "EXTERNAL_SERVICE_ERROR"

    def test_checkout_rate_limit(self, client, auth_headers, billing, monkeypatch):
        monkeypatch.setattr(stripe.checkout.Session, "create", lambda **kwargs: {"url": "https://x.test"})
        codes = [client.post("/api/checkout", headers=auth_headers).status_code for _ in range(4)]
        assert codes == [200, 200, 200, 429]


class TestWebhooks:
    def test_missing_signature(self, client, billing):
        response = client.post("/api/webhooks/stripe", content=b"{}")
        assert response.status_code == 400

    def test_invalid_signature(self, client, billing, stripe_events):
        response = client.post("/api/webhooks/stripe", content=b"{}", headers={"stripe-signature": "forged"})
        assert response.status_code == 400

    def test_checkout_completed_grants_premium(self, client, auth_headers, billing, stripe_events):
        assert client.get("/api/check-premium", headers=auth_headers).json()["has_premium"] is False

        response = subscribe(client, stripe_events, auth_headers)
        assert response.status_code == 200
        assert response.json()["received"] is True
        assert response.json()["status"] == "active"

        premium = client.get("/api/check-premium", headers=auth_headers).json()
        assert premium == {"has_premium": True, "status": "active", "cancel_at_period_end": False}

        access = client.get("/api/check-module-access?moduleId=module2", headers=auth_headers).json()
        assert access["can_access"] is True

    def test_checkout_for_unknown_user(self, client, billing, stripe_events):
        response = send(
            client, stripe_events, "checkout.session.completed", {"subscription": "sub_9", "metadata": {"user_id": "999"}}
        )
        assert response.status_code == 404

    def test_subscription_lifecycle(self, client, auth_headers, billing, stripe_events):
        subscribe(client, stripe_events, auth_headers)

        send(client, stripe_events, "customer.subscription.updated", {"id": "sub_1", "status": "active", "cancel_at_period_end": True})
        assert client.get("/api/check-premium", headers=auth_headers).json()["cancel_at_period_end"] is True

        send(client, stripe_events, "invoice.payment_failed", {"subscription": "sub_1"})
        assert client.get("/api/check-premium", headers=auth_headers).json() == {
            "has_premium": False,
            "status": "past_due",
            "cancel_at_period_end": True,
        }

        send(client, stripe_events, "invoice.payment_succeeded", {"subscription": "sub_1"})
        assert client.get("/api/check-premium", headers=auth_headers).json()["has_premium"] is True

        send(client, stripe_events, "customer.subscription.deleted", {"id": "sub_1"})
        premium = client.get("/api/check-premium", headers=auth_headers).json()
        assert premium["has_premium"] is False
        assert premium["status"] == "canceled"

    def test_unhandled_event_is_acknowledged(self, client, billing, stripe_events):
        response = send(client, stripe_events, "customer.created", {"id": "cus_1"})
        assert response.json() == {"received": True, "type": "customer.created", "ignored": True}

    @pytest.mark.parametrize(
        "event_type, obj",
        [
            ("customer.subscription.updated", {"id": "sub_404", "status": "active"}),
            ("customer.subscription.deleted", {"id": "sub_404"}),
            ("invoice.payment_failed", {"subscription": "sub_404"}),
        ],
    )
    def test_unknown_subscription_is_ignored(self, client, billing, stripe_events, event_type, obj):
        response = send(client, stripe_events, event_type, obj)
        assert response.status_code == 200
        assert response.json() == {"received": True, "type": event_type, "ignored": True}


class TestModuleAccessEndpoint:
    def test_invalid_module_id(self, client, auth_headers):
        assert client.get("/api/check-module-access?moduleId=../etc", headers=auth_headers).status_code == 400

    def test_premium_required(self, client, auth_headers):
        access = client.get("/api/check-module-access?moduleId=module2", headers=auth_headers).json()
        assert access["can_access"] is False
        assert access["reason"] == "no_premium"

    def test_missing_param(self, client, auth_headers):
        assert client.get("/api/check-module-access", headers=auth_headers).status_code == 422
