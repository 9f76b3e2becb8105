from models.db import db
from models.status import BookingStatus
from utils.clock import utcnow


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    gym_id = db.Column(db.Integer, db.ForeignKey("gyms.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=False, index=True)
    payment_id = db.Column(db.Integer, db.ForeignKey("payments.id"), nullable=True)

    status = db.Column(db.String(20), nullable=False, default=BookingStatus.CONFIRMED, index=True)
    # status values: CONFIRMED, WAITLISTED, CANCELLED, ATTENDED, NO_SHOW
    notes = db.Column(db.Text, nullable=True)

    booked_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    gym_class = db.relationship("GymClass", lazy="joined")

    __table_args__ = (
        # waitlist promotion scans (class_id, status) ordered by booked_at
        db.Index("ix_bookings_class_status_booked", "class_id", "status", "booked_at"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "gym_id": self.gym_id,
            "user_id": self.user_id,
            "class_id": self.class_id,
            "payment_id": self.payment_id,
            "status": self.status,
            "notes": self.notes,
            "booked_at": self.booked_at.isoformat() if self.booked_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
        }
