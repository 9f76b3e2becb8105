from flask import Blueprint, current_app, g, jsonify, request

from models.status import BookingStatus
from security.rbac import can_manage_gym, require_kinds
from services.errors import Forbidden, ValidationError
from utils.audit import log_event

booking_bp = Blueprint("booking", __name__, url_prefix="/bookings")


def _controller():
    return current_app.extensions["booking_controller"]


def _parse_class_id(data):
    class_id = data.get("classId", data.get("class_id"))
    if isinstance(class_id, bool) or not isinstance(class_id, int):
        raise ValidationError("Invalid booking request", details={"classId": "must be an integer"})
    return class_id


# ---------- USERS: book a class (confirmed or waitlisted) ----------
@booking_bp.post("")
@require_kinds("user")
def create_booking():
    data = request.get_json(silent=True) or {}
    class_id = _parse_class_id(data)
    notes = data.get("notes")
    if notes is not None and not isinstance(notes, str):
        raise ValidationError("Invalid booking request", details={"notes": "must be a string"})

    booking, message = _controller().create_reservation(g.principal.id, class_id, notes=notes)

    log_event("BOOKING_CREATE", entity="booking", entity_id=booking.id,
              metadata={"class_id": class_id, "status": booking.status})
    return jsonify(booking=booking.to_dict(), message=message), 201


# ---------- USERS: cancel booking (frees a seat for the waitlist) ----------
@booking_bp.patch("/<int:booking_id>/cancel")
@require_kinds("user")
def cancel_booking(booking_id: int):
    booking, promoted = _controller().cancel_reservation(booking_id, g.principal.id)

    log_event("BOOKING_CANCEL", entity="booking", entity_id=booking.id)
    if promoted is not None:
        log_event("BOOKING_PROMOTED", entity="booking", entity_id=promoted.id,
                  metadata={"class_id": promoted.class_id, "freed_by": booking.id})

    return jsonify(
        booking=booking.to_dict(),
        promoted=promoted.to_dict() if promoted else None,
    ), 200


# ---------- USERS: view my bookings ----------
@booking_bp.get("/my-bookings")
@require_kinds("user")
def my_bookings():
    status = (request.args.get("status") or "").strip().upper() or None
    if status and status not in BookingStatus.ALL:
        raise ValidationError("Invalid status filter", details={"status": list(BookingStatus.ALL)})

    rows = _controller().list_reservations_for_user(g.principal.id, status=status)
    return jsonify(bookings=[
        {"booking": b.to_dict(), "class": b.gym_class.to_dict() if b.gym_class else None}
        for b in rows
    ]), 200


# ---------- OWNER/STAFF: bookings of one class ----------
@booking_bp.get("/class/<int:class_id>")
@require_kinds("gym_owner", "staff")
def class_bookings(class_id: int):
    gym_class = _controller().store.find_class_by_id(class_id)
    if gym_class is not None and not can_manage_gym(g.principal, gym_class.gym_id):
        raise Forbidden("Access denied to this class")

    rows = _controller().list_reservations_for_class(class_id)
    return jsonify(bookings=[b.to_dict() for b in rows]), 200
