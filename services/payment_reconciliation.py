"""
Reconciles MercadoPago payment notifications into local payment records.

The gateway is the source of truth: a notification only tells us *which*
payment changed, so every delivery re-fetches the payment and compares its
status against what we have stored. A delivery whose status we already hold
is a no-op, which is what makes redelivery safe.
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from models.status import PaymentStatus, SubscriptionStatus
from models.subscription import SubscriptionPayment
from services.errors import ValidationError
from services.status_mapping import map_provider_status
from services.store import GymStore
from utils.clock import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentNotification:
    payment_id: str
    action: str = None


@dataclass(frozen=True)
class UnhandledNotification:
    type: str
    resource_id: str
    action: str = None


def parse_notification(body):
    """Turn a raw webhook body into PaymentNotification or UnhandledNotification."""
    if not isinstance(body, dict):
        raise ValidationError("Invalid webhook structure")

    kind = body.get("type")
    data = body.get("data")
    resource_id = data.get("id") if isinstance(data, dict) else None

    details = {}
    if not kind:
        details["type"] = "required"
    if resource_id in (None, ""):
        details["data.id"] = "required"
    if details:
        raise ValidationError("Invalid webhook structure", details=details)

    action = body.get("action")
    if kind == "payment":
        return PaymentNotification(payment_id=str(resource_id), action=action)
    return UnhandledNotification(type=str(kind), resource_id=str(resource_id), action=action)


def _parse_gateway_datetime(value):
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring unparseable gateway timestamp %r", value)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _reference_to_id(reference):
    """Leading integer of the reference ("42abc" -> 42), or None."""
    match = _LEADING_INT.match(str(reference))
    if not match:
        return None
    return int(match.group(1))


def _log_approved_payment(payment):
    # membership activation hooks in here once memberships are sold online
    logger.info("Payment %s approved for user %s, gym %s", payment.id, payment.user_id, payment.gym_id)


class PaymentReconciliationEngine:
    def __init__(self, store: GymStore, gateway, on_payment_approved=None):
        self.store = store
        self.gateway = gateway
        self.on_payment_approved = on_payment_approved or _log_approved_payment

    def handle_notification(self, body) -> dict:
        notification = parse_notification(body)
        logger.info("MercadoPago webhook received: %s", notification)

        if isinstance(notification, PaymentNotification):
            self.process_payment_webhook(notification.payment_id, notification.action)
        elif notification.type in ("subscription", "preapproval"):
            logger.info("%s webhook %s (action=%s) acknowledged without changes",
                        notification.type, notification.resource_id, notification.action)
        else:
            logger.info("Unhandled webhook type: %s", notification.type)

        return {"received": True, "processed": True}

    def process_payment_webhook(self, external_payment_id, action=None):
        """
        Returns the updated record, or None when nothing changed. Lookup
        failures are logged and swallowed; failures while applying an update
        propagate so the gateway retries.
        """
        try:
            resolved = self._resolve(external_payment_id)
        except Exception:
            logger.exception("Error resolving payment webhook %s", external_payment_id)
            return None
        if resolved is None:
            return None

        record, gateway_payment, new_status = resolved
        return self._apply(record, gateway_payment, new_status, external_payment_id, action)

    def _resolve(self, external_payment_id):
        gateway_payment = self.gateway.fetch_payment_by_id(external_payment_id)
        reference = (gateway_payment or {}).get("external_reference")
        if not reference:
            logger.warning("Payment %s not found or missing external_reference", external_payment_id)
            return None

        new_status = map_provider_status(gateway_payment.get("status"))

        local_id = _reference_to_id(reference)
        if local_id is None:
            logger.warning("Payment %s has non-numeric external_reference %r", external_payment_id, reference)
            return None

        record = self.store.find_subscription_payment_by_external_ref(local_id)
        if record is None:
            record = self.store.find_payment_by_external_ref(local_id)
        if record is None:
            logger.warning("Payment with external_reference %s not found in database", reference)
            return None

        return record, gateway_payment, new_status

    def _apply(self, record, gateway_payment, new_status, external_payment_id, action):
        label = "Subscription payment" if isinstance(record, SubscriptionPayment) else "Payment"
        previous_status = record.status

        if previous_status == new_status:
            logger.info("%s %s status unchanged: %s", label, record.id, new_status)
            return None

        self.store.update_payment_status(
            record,
            status=new_status,
            external_payment_id=gateway_payment.get("id") or external_payment_id,
            paid_at=_parse_gateway_datetime(gateway_payment.get("date_approved")),
            metadata={
                "mercadopago_status": gateway_payment.get("status"),
                "mercadopago_status_detail": gateway_payment.get("status_detail"),
                "payment_method_id": gateway_payment.get("payment_method_id"),
                "payment_type_id": gateway_payment.get("payment_type_id"),
                "last_webhook_action": action,
                "last_webhook_date": utcnow().isoformat(),
            },
        )
        logger.info("%s %s updated from %s to %s", label, record.id, previous_status, new_status)

        if new_status == PaymentStatus.APPROVED and previous_status != PaymentStatus.APPROVED:
            if isinstance(record, SubscriptionPayment):
                self._activate_subscription(record)
            else:
                self.on_payment_approved(record)
        return record

    def _activate_subscription(self, subscription_payment):
        subscription = self.store.update_subscription_status(
            subscription_payment.subscription_id, SubscriptionStatus.ACTIVE
        )
        if subscription is None:
            logger.warning("Subscription %s for payment %s not found",
                           subscription_payment.subscription_id, subscription_payment.id)
            return
        logger.info("Subscription %s activated", subscription.id)
