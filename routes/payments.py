import logging

from flask import Blueprint, current_app, g, jsonify, request

from models import db
from models.gym import Gym
from models.payment import Payment
from models.status import PaymentStatus
from security.rbac import can_manage_gym, require_kinds
from services.errors import Forbidden, NotFound, ServiceError, UpstreamUnavailable, ValidationError
from utils.audit import log_event

logger = logging.getLogger(__name__)

payments_bp = Blueprint("payments", __name__, url_prefix="/payments")


def _engine():
    return current_app.extensions["reconciliation_engine"]


def _gateway():
    return current_app.extensions["payment_gateway"]


def _parse_payment_request(data):
    errors = {}
    amount = data.get("amount")
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount <= 0:
        errors["amount"] = "must be a positive number"

    description = data.get("description")
    if not isinstance(description, str) or not description.strip():
        errors["description"] = "required"

    currency = data.get("currency") or current_app.config.get("DEFAULT_CURRENCY", "ARS")
    if not isinstance(currency, str):
        errors["currency"] = "must be a string"

    metadata = data.get("metadata") or {}
    if not isinstance(metadata, dict):
        errors["metadata"] = "must be an object"

    if errors:
        raise ValidationError("Invalid payment request", details=errors)
    return float(amount), description.strip(), currency.upper(), metadata


# ---------- GATEWAY: MercadoPago notifications ----------
@payments_bp.post("/webhook")
def mercadopago_webhook():
    body = request.get_json(silent=True)
    try:
        result = _engine().handle_notification(body)
    except ServiceError:
        raise
    except Exception:
        db.session.rollback()
        logger.exception("Webhook processing error")
        return jsonify(error="Webhook processing failed"), 500

    data = body.get("data") or {}
    log_event("PAYMENT_WEBHOOK", entity=body.get("type"), entity_id=data.get("id"),
              metadata={"action": body.get("action"), "date_created": body.get("date_created")},
              actor_type="gateway")
    return jsonify(result), 200


# ---------- USERS: start a one-off payment ----------
@payments_bp.post("/create-preference")
@require_kinds("user")
def create_preference():
    data = request.get_json(silent=True) or {}
    amount, description, currency, metadata = _parse_payment_request(data)

    payment = Payment(
        user_id=g.principal.id,
        gym_id=g.principal.gym_id,
        amount=amount,
        currency=currency,
        status=PaymentStatus.PENDING,
        payment_method="mercadopago",
        description=description,
    )
    payment.merge_metadata(metadata)
    db.session.add(payment)
    db.session.commit()

    try:
        preference = _gateway().create_preference(
            title=description,
            amount=amount,
            currency=currency,
            external_reference=payment.id,
            section="payment",
        )
    except UpstreamUnavailable as exc:
        # the pending payment stays; the user can retry checkout later
        logger.warning("Preference for payment %s not created: %s", payment.id, exc.message)
        log_event("PAYMENT_PREFERENCE_FAILED", entity="payment", entity_id=payment.id)
        return jsonify(payment=payment.to_dict(), preference_id=None, init_point=None,
                       error="Payment gateway unavailable"), 201

    log_event("PAYMENT_PREFERENCE_CREATED", entity="payment", entity_id=payment.id,
              metadata={"preference_id": preference.get("id")})
    return jsonify(
        payment=payment.to_dict(),
        preference_id=preference.get("id"),
        init_point=preference.get("init_point"),
        sandbox_init_point=preference.get("sandbox_init_point"),
    ), 201


# ---------- USERS: my payments ----------
@payments_bp.get("/my-payments")
@require_kinds("user")
def my_payments():
    rows = (
        Payment.query
        .filter_by(user_id=g.principal.id, gym_id=g.principal.gym_id)
        .order_by(Payment.created_at.desc())
        .all()
    )
    return jsonify(payments=[p.to_dict() for p in rows]), 200


# ---------- OWNERS: payments across all their gyms ----------
@payments_bp.get("/gym-payments")
@require_kinds("gym_owner")
def gym_payments():
    gym_ids = [gym.id for gym in Gym.query.filter_by(owner_id=g.principal.id).all()]
    if not gym_ids:
        return jsonify(payments=[]), 200

    rows = (
        Payment.query
        .filter(Payment.gym_id.in_(gym_ids))
        .order_by(Payment.created_at.desc())
        .all()
    )
    return jsonify(payments=[p.to_dict() for p in rows]), 200


@payments_bp.get("/<int:payment_id>")
@require_kinds("user", "gym_owner")
def get_payment(payment_id: int):
    payment = db.session.get(Payment, payment_id)
    if not payment:
        raise NotFound("Payment not found")

    principal = g.principal
    if principal.kind == "user":
        allowed = payment.user_id == principal.id
    else:
        allowed = can_manage_gym(principal, payment.gym_id)
    if not allowed:
        raise Forbidden("Access denied to this payment")

    return jsonify(payment=payment.to_dict()), 200
