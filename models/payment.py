import json

from models.db import db
from models.status import PaymentStatus
from utils.clock import utcnow


class PaymentRecordMixin:
    """Lifecycle columns shared by one-off payments and subscription payments."""

    amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(10), nullable=False, default="ARS")

    status = db.Column(db.String(20), nullable=False, default=PaymentStatus.PENDING, index=True)
    # status values: PENDING, APPROVED, CANCELLED, REFUNDED
    payment_method = db.Column(db.String(30), nullable=False, default="mercadopago")
    mercadopago_id = db.Column(db.String(64), nullable=True, index=True)
    description = db.Column(db.String(255), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    paid_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def get_metadata(self) -> dict:
        if not self.metadata_json:
            return {}
        try:
            value = json.loads(self.metadata_json)
        except ValueError:
            return {}
        return value if isinstance(value, dict) else {}

    def merge_metadata(self, fields: dict) -> None:
        merged = self.get_metadata()
        merged.update(fields)
        self.metadata_json = json.dumps(merged)

    def _lifecycle_dict(self):
        return {
            "id": self.id,
            "amount": self.amount,
            "currency": self.currency,
            "status": self.status,
            "payment_method": self.payment_method,
            "mercadopago_id": self.mercadopago_id,
            "description": self.description,
            "metadata": self.get_metadata(),
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Payment(PaymentRecordMixin, db.Model):
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    gym_id = db.Column(db.Integer, db.ForeignKey("gyms.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    def to_dict(self):
        out = self._lifecycle_dict()
        out.update(gym_id=self.gym_id, user_id=self.user_id)
        return out
