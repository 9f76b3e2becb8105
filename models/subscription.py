import json

from models.db import db
from models.payment import PaymentRecordMixin
from models.status import BillingCycle, SubscriptionStatus
from utils.clock import utcnow


class SubscriptionPlan(db.Model):
    __tablename__ = "subscription_plans"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    code = db.Column(db.String(40), unique=True, nullable=False)
    description = db.Column(db.String(255), nullable=True)
    monthly_price = db.Column(db.Float, nullable=False)
    annual_price = db.Column(db.Float, nullable=False)
    max_gyms = db.Column(db.Integer, nullable=False, default=1)
    max_users_per_gym = db.Column(db.Integer, nullable=False, default=50)
    max_classes_per_month = db.Column(db.Integer, nullable=False, default=100)
    features_json = db.Column(db.Text, nullable=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def price_for(self, billing_cycle: str) -> float:
        return self.annual_price if billing_cycle == BillingCycle.ANNUAL else self.monthly_price

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "description": self.description,
            "monthly_price": self.monthly_price,
            "annual_price": self.annual_price,
            "max_gyms": self.max_gyms,
            "max_users_per_gym": self.max_users_per_gym,
            "max_classes_per_month": self.max_classes_per_month,
            "features": json.loads(self.features_json) if self.features_json else [],
        }


class Subscription(db.Model):
    __tablename__ = "subscriptions"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("gym_owners.id"), nullable=False, index=True)
    plan_id = db.Column(db.Integer, db.ForeignKey("subscription_plans.id"), nullable=False)

    status = db.Column(db.String(20), nullable=False, default=SubscriptionStatus.PENDING_PAYMENT, index=True)
    # status values: PENDING_PAYMENT, ACTIVE, CANCELLED, EXPIRED, SUSPENDED
    billing_cycle = db.Column(db.String(10), nullable=False, default=BillingCycle.MONTHLY)
    amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(10), nullable=False, default="ARS")

    starts_at = db.Column(db.DateTime, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    trial_ends_at = db.Column(db.DateTime, nullable=True)
    mercadopago_preapproval_id = db.Column(db.String(64), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    plan = db.relationship("SubscriptionPlan", lazy="joined")

    def to_dict(self):
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "plan_id": self.plan_id,
            "status": self.status,
            "billing_cycle": self.billing_cycle,
            "amount": self.amount,
            "currency": self.currency,
            "starts_at": self.starts_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "metadata": json.loads(self.metadata_json) if self.metadata_json else {},
        }


class SubscriptionPayment(PaymentRecordMixin, db.Model):
    __tablename__ = "subscription_payments"

    id = db.Column(db.Integer, primary_key=True)
    subscription_id = db.Column(db.Integer, db.ForeignKey("subscriptions.id"), nullable=False, index=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("gym_owners.id"), nullable=False, index=True)

    billing_period_start = db.Column(db.DateTime, nullable=False)
    billing_period_end = db.Column(db.DateTime, nullable=False)

    def to_dict(self):
        out = self._lifecycle_dict()
        out.update(
            subscription_id=self.subscription_id,
            owner_id=self.owner_id,
            billing_period_start=self.billing_period_start.isoformat(),
            billing_period_end=self.billing_period_end.isoformat(),
        )
        return out
