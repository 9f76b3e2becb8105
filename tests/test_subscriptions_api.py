from datetime import datetime, timedelta

import pytest

from models import db
from models.status import PaymentStatus, SubscriptionStatus
from models.subscription import Subscription, SubscriptionPayment, SubscriptionPlan
from routes.subscriptions import add_months
from utils.clock import utcnow
from utils.seed import seed_plans


@pytest.fixture
def plans(app):
    seed_plans()
    return {p.code: p for p in SubscriptionPlan.query.all()}


@pytest.mark.parametrize(
    "start, months, expected",
    [
        (datetime(2026, 1, 31, 10, 0), 1, datetime(2026, 2, 28, 10, 0)),
        (datetime(2028, 1, 31), 1, datetime(2028, 2, 29)),
        (datetime(2026, 11, 15), 2, datetime(2027, 1, 15)),
        (datetime(2026, 2, 28), 12, datetime(2027, 2, 28)),
    ],
)
def test_add_months(start, months, expected):
    assert add_months(start, months) == expected


def test_seed_plans_is_idempotent(app):
    assert seed_plans() == ["basic", "pro", "premium"]
    assert seed_plans() == []


def test_list_plans_is_public(client, plans):
    resp = client.get("/subscriptions/plans")
    assert resp.status_code == 200
    assert [p["code"] for p in resp.get_json()["plans"]] == ["basic", "pro", "premium"]
    assert "Priority support" in resp.get_json()["plans"][1]["features"]


def test_create_subscription_then_webhook_activates_it(client, gateway, owner, plans, auth_header):
    headers = auth_header("gym_owner", owner)
    start = utcnow().replace(microsecond=0)
    resp = client.post("/subscriptions/create",
                       json={"planId": plans["pro"].id, "billingCycle": "annual",
                             "startDate": start.isoformat()},
                       headers=headers)

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["subscription"]["status"] == SubscriptionStatus.PENDING_PAYMENT
    assert body["subscription"]["amount"] == 250000
    assert body["subscription"]["expires_at"] == add_months(start, 12).isoformat()
    assert body["payment"]["status"] == PaymentStatus.PENDING
    assert body["mercadopago"]["preference_id"] == "pref-1"
    assert gateway.preferences[0]["external_reference"] == body["payment"]["id"]
    assert gateway.preferences[0]["payer_email"] == owner.email

    assert client.get("/subscriptions/current", headers=headers).status_code == 404

    gateway.add_payment(555, status="approved", external_reference=str(body["payment"]["id"]))
    client.post("/payments/webhook", json={"type": "payment", "data": {"id": "555"}})

    resp = client.get("/subscriptions/current", headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["subscription"]["id"] == body["subscription"]["id"]
    assert resp.get_json()["plan"]["code"] == "pro"

    history = client.get("/subscriptions/payments", headers=headers).get_json()["payments"]
    assert [p["status"] for p in history] == [PaymentStatus.APPROVED]


def test_create_subscription_rejects_second_active(client, owner, plans, auth_header):
    now = utcnow()
    db.session.add(Subscription(owner_id=owner.id, plan_id=plans["basic"].id, status=SubscriptionStatus.ACTIVE,
                                amount=15000, starts_at=now, expires_at=now + timedelta(days=10)))
    db.session.commit()

    resp = client.post("/subscriptions/create", json={"planId": plans["pro"].id, "billingCycle": "monthly"},
                       headers=auth_header("gym_owner", owner))

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "AlreadySubscribed"
    assert SubscriptionPayment.query.count() == 0


def test_create_subscription_validation(client, owner, plans, auth_header):
    headers = auth_header("gym_owner", owner)

    resp = client.post("/subscriptions/create", json={"planId": "1", "billingCycle": "weekly"}, headers=headers)
    assert resp.status_code == 400
    assert set(resp.get_json()["details"]) == {"planId", "billingCycle"}

    resp = client.post("/subscriptions/create", json={"planId": 999, "billingCycle": "monthly"}, headers=headers)
    assert resp.status_code == 404


def test_create_subscription_survives_gateway_outage(client, gateway, owner, plans, auth_header):
    gateway.fail_preference = True
    resp = client.post("/subscriptions/create", json={"planId": plans["basic"].id, "billingCycle": "monthly"},
                       headers=auth_header("gym_owner", owner))

    assert resp.status_code == 201
    assert resp.get_json()["mercadopago"]["error"] == "Payment gateway unavailable"


def test_current_subscription_expires(client, owner, plans, auth_header):
    past = utcnow() - timedelta(days=40)
    row = Subscription(owner_id=owner.id, plan_id=plans["basic"].id, status=SubscriptionStatus.ACTIVE,
                       amount=15000, starts_at=past, expires_at=past + timedelta(days=30))
    db.session.add(row)
    db.session.commit()

    resp = client.get("/subscriptions/current", headers=auth_header("gym_owner", owner))

    assert resp.status_code == 404
    assert resp.get_json()["code"] == "SubscriptionExpired"
    assert db.session.get(Subscription, row.id).status == SubscriptionStatus.EXPIRED


def test_cancel_subscription(client, owner, plans, auth_header):
    headers = auth_header("gym_owner", owner)
    assert client.post("/subscriptions/cancel", headers=headers).status_code == 404

    now = utcnow()
    row = Subscription(owner_id=owner.id, plan_id=plans["basic"].id, status=SubscriptionStatus.ACTIVE,
                       amount=15000, starts_at=now, expires_at=now + timedelta(days=30))
    db.session.add(row)
    db.session.commit()

    resp = client.post("/subscriptions/cancel", headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["subscription"]["status"] == SubscriptionStatus.CANCELLED


def test_subscription_routes_require_owner(client, make_user, auth_header):
    resp = client.get("/subscriptions/current", headers=auth_header("user", make_user()))
    assert resp.status_code == 403


def test_only_one_open_subscription_per_owner(client, gateway, owner, plans, auth_header):
    headers = auth_header("gym_owner", owner)
    first = client.post("/subscriptions/create", json={"planId": plans["basic"].id, "billingCycle": "monthly"},
                        headers=headers).get_json()

    resp = client.post("/subscriptions/create", json={"planId": plans["pro"].id, "billingCycle": "monthly"},
                       headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "SubscriptionPending"
    assert SubscriptionPayment.query.count() == 1

    resp = client.post("/subscriptions/cancel", headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["subscription"]["id"] == first["subscription"]["id"]

    second = client.post("/subscriptions/create", json={"planId": plans["pro"].id, "billingCycle": "monthly"},
                         headers=headers)
    assert second.status_code == 201

    gateway.add_payment(700, status="approved", external_reference=str(second.get_json()["payment"]["id"]))
    client.post("/payments/webhook", json={"type": "payment", "data": {"id": "700"}})
    active = Subscription.query.filter_by(owner_id=owner.id, status=SubscriptionStatus.ACTIVE).all()
    assert [s.id for s in active] == [second.get_json()["subscription"]["id"]]
