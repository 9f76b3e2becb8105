from models.db import db
from utils.clock import utcnow


class GymClass(db.Model):
    __tablename__ = "classes"

    id = db.Column(db.Integer, primary_key=True)
    gym_id = db.Column(db.Integer, db.ForeignKey("gyms.id"), nullable=False, index=True)
    location_id = db.Column(db.Integer, db.ForeignKey("gym_locations.id"), nullable=True, index=True)
    instructor_id = db.Column(db.Integer, db.ForeignKey("gym_staff.id"), nullable=True)

    name = db.Column(db.String(160), nullable=False)
    description = db.Column(db.Text, nullable=True)
    capacity = db.Column(db.Integer, nullable=False, default=20)
    duration_minutes = db.Column(db.Integer, nullable=False, default=60)
    price = db.Column(db.Float, nullable=False, default=0)
    starts_at = db.Column(db.DateTime, nullable=False, index=True)
    is_recurring = db.Column(db.Boolean, default=False, nullable=False)
    recurring_pattern = db.Column(db.String(20), nullable=True)  # WEEKLY, DAILY

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("capacity > 0", name="ck_classes_capacity_positive"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "gym_id": self.gym_id,
            "location_id": self.location_id,
            "instructor_id": self.instructor_id,
            "name": self.name,
            "description": self.description,
            "capacity": self.capacity,
            "duration_minutes": self.duration_minutes,
            "price": self.price,
            "starts_at": self.starts_at.isoformat() if self.starts_at else None,
            "is_active": self.is_active,
        }
