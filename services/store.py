from sqlalchemy import func

from models import db
from models.booking import Booking
from models.gym_class import GymClass
from models.payment import Payment
from models.status import BookingStatus
from models.subscription import Subscription, SubscriptionPayment
from utils.clock import utcnow


class GymStore:
    """
    Data access used by the booking and payment services.

    Every write commits on its own. Nothing here wraps a read and the write
    that depends on it in one transaction.
    """

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session or db.session

    # ---------- classes / bookings ----------
    def find_class_by_id(self, class_id: int):
        return self.session.get(GymClass, class_id)

    def find_active_booking(self, user_id: int, class_id: int):
        return (
            self.session.query(Booking)
            .filter(
                Booking.user_id == user_id,
                Booking.class_id == class_id,
                Booking.status != BookingStatus.CANCELLED,
            )
            .first()
        )

    def count_confirmed_reservations(self, class_id: int) -> int:
        return (
            self.session.query(func.count(Booking.id))
            .filter(Booking.class_id == class_id, Booking.status == BookingStatus.CONFIRMED)
            .scalar()
        ) or 0

    def insert_reservation(self, *, gym_id: int, user_id: int, class_id: int, status: str, notes=None):
        now = utcnow()
        booking = Booking(
            gym_id=gym_id,
            user_id=user_id,
            class_id=class_id,
            status=status,
            notes=notes,
            booked_at=now,
        )
        self.session.add(booking)
        self.session.commit()
        return booking

    def find_reservation_by_id(self, reservation_id: int):
        return self.session.get(Booking, reservation_id)

    def update_reservation_status(self, booking: Booking, status: str, cancelled_at=None):
        booking.status = status
        if cancelled_at is not None:
            booking.cancelled_at = cancelled_at
        booking.updated_at = utcnow()
        self.session.commit()
        return booking

    def find_oldest_waitlisted(self, class_id: int):
        return (
            self.session.query(Booking)
            .filter(Booking.class_id == class_id, Booking.status == BookingStatus.WAITLISTED)
            .order_by(Booking.booked_at.asc(), Booking.id.asc())
            .first()
        )

    def list_reservations_for_class(self, class_id: int):
        return (
            self.session.query(Booking)
            .filter(Booking.class_id == class_id)
            .order_by(Booking.booked_at.asc(), Booking.id.asc())
            .all()
        )

    def list_reservations_for_user(self, user_id: int, status: str = None):
        q = self.session.query(Booking).filter(Booking.user_id == user_id)
        if status:
            q = q.filter(Booking.status == status)
        return q.order_by(Booking.booked_at.desc()).all()

    # ---------- payments / subscriptions ----------
    def find_payment_by_external_ref(self, ref: int):
        return self.session.get(Payment, ref)

    def find_subscription_payment_by_external_ref(self, ref: int):
        return self.session.get(SubscriptionPayment, ref)

    def update_payment_status(self, record, *, status: str, external_payment_id=None, paid_at=None, metadata=None):
        """Works for both Payment and SubscriptionPayment rows."""
        record.status = status
        if external_payment_id is not None:
            record.mercadopago_id = str(external_payment_id)
        if paid_at is not None:
            record.paid_at = paid_at
        if metadata:
            record.merge_metadata(metadata)
        record.updated_at = utcnow()
        self.session.commit()
        return record

    def update_subscription_status(self, subscription_id: int, status: str):
        subscription = self.session.get(Subscription, subscription_id)
        if subscription is None:
            return None
        subscription.status = status
        subscription.updated_at = utcnow()
        self.session.commit()
        return subscription
