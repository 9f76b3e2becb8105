from functools import wraps
from flask import g, jsonify

from models.gym import Gym


def can_manage_gym(principal, gym_id: int) -> bool:
    if principal is None:
        return False
    if principal.kind == "gym_owner":
        gym = Gym.query.filter_by(id=gym_id, owner_id=principal.id).first()
        return gym is not None
    if principal.kind == "staff":
        return principal.gym_id == gym_id
    return False


def require_kinds(*kinds: str):
    """
    Usage: @require_kinds("gym_owner")
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            principal = getattr(g, "principal", None)
            if principal is None:
                return jsonify(error="Authentication required"), 401

            if principal.kind not in kinds:
                return jsonify(error="Forbidden"), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
