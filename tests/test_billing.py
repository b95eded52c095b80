import hashlib
import hmac
import json
import time
from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
import stripe

from market_warrior.config import get_settings
from market_warrior.models import Affiliate, Enrollment, Payment, PromoCode, Referral
from tests.conftest import START, auth_headers, make_enrollment


@pytest.fixture
def stripe_calls(monkeypatch):
    calls = {"sessions": [], "coupons": []}

    def create_session(**params):
        calls["sessions"].append(params)
        return SimpleNamespace(id="cs_test_123", url="https://checkout.stripe.com/pay/cs_test_123")

    def create_coupon(**params):
        calls["coupons"].append(params)
        return SimpleNamespace(id="coupon_test")

    monkeypatch.setattr(stripe.checkout.Session, "create", create_session)
    monkeypatch.setattr(stripe.Coupon, "create", create_coupon)
    return calls


def signed(payload: dict, secret: str = None):
    body = json.dumps(payload)
    timestamp = int(time.time())
    secret = secret or get_settings().STRIPE_WEBHOOK_SECRET
    signature = hmac.new(secret.encode(), f"{timestamp}.{body}".encode(), hashlib.sha256).hexdigest()
    return body, {"stripe-signature": f"t={timestamp},v1={signature}", "content-type": "application/json"}


def checkout_completed(user_id="user-1", session_id="cs_test_123", **metadata):
    return {
        "id": "evt_test",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": {
            "id": session_id,
            "object": "checkout.session",
            "amount_total": 9700,
            "currency": "usd",
            "customer": "cus_test",
            "payment_intent": "pi_test",
            "metadata": {"user_id": user_id, "user_email": f"{user_id}@example.com", **metadata},
        }},
    }


def add_promo(db, code="SAVE20", **fields):
    db.add(PromoCode(code=code, discount_percent=fields.pop("discount_percent", 20), current_uses=0, **fields))
    db.commit()


def test_checkout_uses_server_price(client, db, stripe_calls):
    make_enrollment(db, paid=False, started=None)
    response = client.post("/checkout/stripe", json={}, headers=auth_headers("user-1"))
    assert response.status_code == 200
    assert response.json() == {"url": "https://checkout.stripe.com/pay/cs_test_123", "session_id": "cs_test_123"}

    params = stripe_calls["sessions"][0]
    assert params["mode"] == "payment"
    assert params["line_items"] == [{"price": "price_test_challenge", "quantity": 1}]
    assert params["metadata"]["user_id"] == "user-1"
    assert "discounts" not in params


def test_checkout_with_promo_creates_coupon(client, db, stripe_calls):
    make_enrollment(db, paid=False, started=None)
    add_promo(db)

    response = client.post("/checkout/stripe", json={"promo_code": "save20"}, headers=auth_headers("user-1"))
    assert response.status_code == 200
    assert stripe_calls["coupons"] == [{"percent_off": 20, "duration": "once"}]
    assert stripe_calls["sessions"][0]["discounts"] == [{"coupon": "coupon_test"}]
    assert stripe_calls["sessions"][0]["metadata"]["promo_code"] == "SAVE20"


def test_checkout_with_invalid_promo_is_400(client, db, stripe_calls):
    make_enrollment(db, paid=False, started=None)
    response = client.post("/checkout/stripe", json={"promo_code": "NOPE"}, headers=auth_headers("user-1"))
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid promo code"
    assert stripe_calls["sessions"] == []


def test_checkout_stripe_failure_is_500(client, db, monkeypatch):
    make_enrollment(db, paid=False, started=None)

    def fail(**params):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(stripe.checkout.Session, "create", fail)
    response = client.post("/checkout/stripe", json={}, headers=auth_headers("user-1"))
    assert response.status_code == 500
    assert response.json()["error"] == "dependency_error"


def test_promo_validation_messages(client, db, clock):
    add_promo(db, "ACTIVE")
    add_promo(db, "OFF", is_active=False)
    add_promo(db, "OLD", expires_at=START - timedelta(days=1))
    add_promo(db, "FULL", max_uses=1)
    db.query(PromoCode).filter_by(code="FULL").update({"current_uses": 1})
    db.commit()

    def check(code):
        return client.post("/promo/validate", json={"code": code}).json()

    assert check("active") == {"valid": True, "message": "20% discount applied!", "code": "ACTIVE", "discount_percent": 20}
    assert check("missing")["message"] == "Invalid promo code"
    assert check("OFF")["message"] == "Promo code is no longer active"
    assert check("OLD")["message"] == "Promo code has expired"
    assert check("FULL")["message"] == "Promo code usage limit reached"


def test_webhook_rejects_bad_signature(client, db):
    body, headers = signed(checkout_completed(), secret="whsec_wrong")
    response = client.post("/webhooks/stripe", content=body, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid signature"


def test_webhook_requires_signature_header(client, db):
    response = client.post("/webhooks/stripe", content=json.dumps(checkout_completed()))
    assert response.status_code == 400


def test_webhook_grants_access_once(client, db, clock, sent_emails):
    make_enrollment(db, paid=False, terms=False, started=None)

    body, headers = signed(checkout_completed())
    assert client.post("/webhooks/stripe", content=body, headers=headers).status_code == 200

    enrollment = db.get(Enrollment, "user-1")
    assert enrollment.is_paid is True
    assert enrollment.challenge_start_date.replace(tzinfo=None) == START.replace(tzinfo=None)
    assert enrollment.access_expires_at.replace(tzinfo=None) == (START + timedelta(days=120)).replace(tzinfo=None)
    assert enrollment.stripe_customer_id == "cus_test"

    payment = db.query(Payment).one()
    assert payment.amount == Decimal("97.00")
    assert [e["subject"] for e in sent_emails] == ["Welcome to Market Warrior!"]

    # Replay later: no second payment, start unchanged
    clock.advance(days=3)
    body, headers = signed(checkout_completed())
    assert client.post("/webhooks/stripe", content=body, headers=headers).status_code == 200

    db.expire_all()
    assert db.query(Payment).count() == 1
    assert db.get(Enrollment, "user-1").challenge_start_date.replace(tzinfo=None) == START.replace(tzinfo=None)
    assert len(sent_emails) == 1


def test_webhook_never_moves_existing_start(client, db, clock):
    make_enrollment(db, paid=False)
    clock.advance(days=10)

    body, headers = signed(checkout_completed())
    client.post("/webhooks/stripe", content=body, headers=headers)

    enrollment = db.get(Enrollment, "user-1")
    assert enrollment.is_paid is True
    assert enrollment.challenge_start_date.replace(tzinfo=None) == START.replace(tzinfo=None)


def test_webhook_credits_affiliate_and_promo(client, db):
    make_enrollment(db, paid=False, started=None)
    add_promo(db)
    db.add(Affiliate(user_id="partner", affiliate_code="PARTNER", commission_rate=Decimal("0.30")))
    db.commit()

    body, headers = signed(checkout_completed(affiliate_code="PARTNER", promo_code="SAVE20"))
    assert client.post("/webhooks/stripe", content=body, headers=headers).status_code == 200

    referral = db.query(Referral).one()
    assert referral.referrer_user_id == "partner"
    assert referral.commission_earned == Decimal("29.10")

    affiliate = db.query(Affiliate).one()
    assert affiliate.total_referrals == 1
    assert db.query(PromoCode).filter_by(code="SAVE20").one().current_uses == 1


def test_webhook_ignores_other_events(client, db):
    body, headers = signed({"id": "evt_other", "object": "event", "type": "customer.created", "data": {"object": {}}})
    response = client.post("/webhooks/stripe", content=body, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"received": True}
