import logging

from models.status import BookingStatus
from services.errors import Conflict, Forbidden, NotFound
from services.store import GymStore
from utils.clock import utcnow

logger = logging.getLogger(__name__)


class BookingAdmissionController:
    """
    Decides whether a booking is confirmed or waitlisted against the class
    capacity, and fills a freed seat from the waitlist on cancellation.

    Count-then-insert and scan-then-promote run as separate statements, so
    two concurrent requests can still overbook a nearly full class.
    """

    def __init__(self, store: GymStore):
        self.store = store

    def create_reservation(self, user_id: int, class_id: int, notes: str = None):
        """Returns (booking, message)."""
        gym_class = self.store.find_class_by_id(class_id)
        if not gym_class or not gym_class.is_active:
            raise NotFound("Class not found or inactive", code="ClassNotFound")

        if self.store.find_active_booking(user_id, class_id):
            raise Conflict("You already have a booking for this class", code="AlreadyBooked")

        confirmed = self.store.count_confirmed_reservations(class_id)
        if confirmed < gym_class.capacity:
            status = BookingStatus.CONFIRMED
        else:
            status = BookingStatus.WAITLISTED

        booking = self.store.insert_reservation(
            gym_id=gym_class.gym_id,
            user_id=user_id,
            class_id=class_id,
            status=status,
            notes=notes,
        )
        logger.info("Booking %s for class %s created as %s (%s/%s confirmed before insert)",
                    booking.id, class_id, status, confirmed, gym_class.capacity)

        message = "Added to waitlist" if status == BookingStatus.WAITLISTED else "Booking confirmed"
        return booking, message

    def cancel_reservation(self, reservation_id: int, requesting_user_id: int):
        """Returns (cancelled_booking, promoted_booking_or_None)."""
        booking = self.store.find_reservation_by_id(reservation_id)
        if not booking:
            raise NotFound("Booking not found")
        if booking.user_id != requesting_user_id:
            raise Forbidden("Booking belongs to another user")
        if booking.status == BookingStatus.CANCELLED:
            raise Conflict("Booking already cancelled", code="AlreadyCancelled")

        prior_status = booking.status
        self.store.update_reservation_status(booking, BookingStatus.CANCELLED, cancelled_at=utcnow())

        promoted = None
        if prior_status == BookingStatus.CONFIRMED:
            promoted = self.promote_next(booking.class_id)
        return booking, promoted

    def promote_next(self, class_id: int):
        # exactly one seat was freed, so at most one waitlisted booking moves up
        candidate = self.store.find_oldest_waitlisted(class_id)
        if candidate is None:
            return None
        self.store.update_reservation_status(candidate, BookingStatus.CONFIRMED)
        logger.info("Booking %s promoted from waitlist for class %s", candidate.id, class_id)
        return candidate

    def list_reservations_for_class(self, class_id: int):
        if not self.store.find_class_by_id(class_id):
            raise NotFound("Class not found", code="ClassNotFound")
        return self.store.list_reservations_for_class(class_id)

    def list_reservations_for_user(self, user_id: int, status: str = None):
        return self.store.list_reservations_for_user(user_id, status=status)
