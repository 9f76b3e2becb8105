import calendar
import json
import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, g, jsonify, request

from models import db
from models.status import BillingCycle, PaymentStatus, SubscriptionStatus
from models.subscription import Subscription, SubscriptionPayment, SubscriptionPlan
from security.rbac import require_kinds
from services.errors import Conflict, NotFound, UpstreamUnavailable, ValidationError
from utils.audit import log_event
from utils.clock import utcnow

logger = logging.getLogger(__name__)

subscriptions_bp = Blueprint("subscriptions", __name__, url_prefix="/subscriptions")


def _parse_iso(dt_str: str) -> datetime:
    # Expect ISO format like "2026-01-20T18:00:00"; offsets are folded to naive UTC
    value = datetime.fromisoformat(dt_str.replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def add_months(start: datetime, months: int) -> datetime:
    """Calendar month arithmetic, clamping to the last day (Jan 31 + 1 month = Feb 28/29)."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def _active_subscription(owner_id: int):
    return (
        Subscription.query
        .filter_by(owner_id=owner_id, status=SubscriptionStatus.ACTIVE)
        .first()
    )


def _open_subscription(owner_id: int):
    """The ACTIVE subscription, else one still waiting for its first payment."""
    return _active_subscription(owner_id) or (
        Subscription.query
        .filter_by(owner_id=owner_id, status=SubscriptionStatus.PENDING_PAYMENT)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .first()
    )


@subscriptions_bp.get("/plans")
def list_plans():
    plans = SubscriptionPlan.query.filter_by(is_active=True).order_by(SubscriptionPlan.monthly_price.asc()).all()
    return jsonify(plans=[p.to_dict() for p in plans]), 200


@subscriptions_bp.get("/current")
@require_kinds("gym_owner")
def current_subscription():
    subscription = _active_subscription(g.principal.id)
    if not subscription:
        raise NotFound("No active subscription found")

    now = utcnow()
    if subscription.expires_at < now:
        subscription.status = SubscriptionStatus.EXPIRED
        subscription.updated_at = now
        db.session.commit()
        log_event("SUBSCRIPTION_EXPIRED", entity="subscription", entity_id=subscription.id)
        raise NotFound("Subscription has expired", code="SubscriptionExpired")

    seconds_left = (subscription.expires_at - now).total_seconds()
    return jsonify(
        subscription=subscription.to_dict(),
        plan=subscription.plan.to_dict() if subscription.plan else None,
        days_until_expiry=int(-(-seconds_left // 86400)),
    ), 200


@subscriptions_bp.post("/create")
@require_kinds("gym_owner")
def create_subscription():
    data = request.get_json(silent=True) or {}
    plan_id = data.get("planId", data.get("plan_id"))
    billing_cycle = str(data.get("billingCycle", data.get("billing_cycle")) or "").strip().upper()
    start_date = data.get("startDate", data.get("start_date"))

    errors = {}
    if isinstance(plan_id, bool) or not isinstance(plan_id, int):
        errors["planId"] = "must be an integer"
    if billing_cycle not in BillingCycle.ALL:
        errors["billingCycle"] = "must be MONTHLY or ANNUAL"
    starts_at = utcnow()
    if start_date:
        try:
            starts_at = _parse_iso(str(start_date))
        except ValueError:
            errors["startDate"] = "must be an ISO datetime"
    if errors:
        raise ValidationError("Invalid subscription request", details=errors)

    plan = SubscriptionPlan.query.filter_by(id=plan_id, is_active=True).first()
    if not plan:
        raise NotFound("Subscription plan not found")

    # one open subscription per owner, so at most one can ever be paid into ACTIVE
    existing = _open_subscription(g.principal.id)
    if existing is not None and existing.status == SubscriptionStatus.ACTIVE:
        raise Conflict("You already have an active subscription", code="AlreadySubscribed")
    if existing is not None:
        raise Conflict("A subscription is already awaiting payment; cancel it first",
                       code="SubscriptionPending", details={"subscription_id": existing.id})

    amount = plan.price_for(billing_cycle)
    expires_at = add_months(starts_at, 12 if billing_cycle == BillingCycle.ANNUAL else 1)
    currency = current_app.config.get("DEFAULT_CURRENCY", "ARS")

    subscription = Subscription(
        owner_id=g.principal.id,
        plan_id=plan.id,
        status=SubscriptionStatus.PENDING_PAYMENT,
        billing_cycle=billing_cycle,
        amount=amount,
        currency=currency,
        starts_at=starts_at,
        expires_at=expires_at,
        metadata_json=json.dumps({"plan_name": plan.name, "plan_code": plan.code, "created_via": "api"}),
    )
    db.session.add(subscription)
    db.session.flush()

    payment = SubscriptionPayment(
        subscription_id=subscription.id,
        owner_id=g.principal.id,
        amount=amount,
        currency=currency,
        status=PaymentStatus.PENDING,
        payment_method="mercadopago",
        billing_period_start=starts_at,
        billing_period_end=expires_at,
        description=f"{plan.name} Plan - {billing_cycle.lower()} subscription",
    )
    payment.merge_metadata({
        "subscription_id": subscription.id,
        "plan_id": plan.id,
        "billing_cycle": billing_cycle,
    })
    db.session.add(payment)
    db.session.commit()

    log_event("SUBSCRIPTION_CREATE", entity="subscription", entity_id=subscription.id,
              metadata={"plan": plan.code, "billing_cycle": billing_cycle, "payment_id": payment.id})

    checkout = {"preference_id": None, "init_point": None}
    try:
        preference = current_app.extensions["payment_gateway"].create_preference(
            title=f"{plan.name} Plan - {billing_cycle.lower()}",
            amount=amount,
            currency=currency,
            external_reference=payment.id,
            section="subscription",
            payer_email=g.principal.email,
        )
        checkout = {
            "preference_id": preference.get("id"),
            "init_point": preference.get("init_point"),
            "sandbox_init_point": preference.get("sandbox_init_point"),
        }
    except UpstreamUnavailable as exc:
        logger.warning("Preference for subscription payment %s not created: %s", payment.id, exc.message)
        checkout["error"] = "Payment gateway unavailable"

    return jsonify(
        subscription=subscription.to_dict(),
        payment=payment.to_dict(),
        plan=plan.to_dict(),
        mercadopago=checkout,
    ), 201


@subscriptions_bp.post("/cancel")
@require_kinds("gym_owner")
def cancel_subscription():
    subscription = _open_subscription(g.principal.id)
    if not subscription:
        raise NotFound("No active subscription found")

    subscription.status = SubscriptionStatus.CANCELLED
    subscription.updated_at = utcnow()
    db.session.commit()

    log_event("SUBSCRIPTION_CANCEL", entity="subscription", entity_id=subscription.id)
    return jsonify(message="Subscription cancelled successfully", subscription=subscription.to_dict()), 200


@subscriptions_bp.get("/payments")
@require_kinds("gym_owner")
def subscription_payments():
    rows = (
        SubscriptionPayment.query
        .filter_by(owner_id=g.principal.id)
        .order_by(SubscriptionPayment.created_at.asc(), SubscriptionPayment.id.asc())
        .all()
    )
    return jsonify(payments=[p.to_dict() for p in rows]), 200
