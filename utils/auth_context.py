from dataclasses import dataclass
from functools import wraps

from flask import g, jsonify, request

from models import db
from models.gym import GymOwner, GymStaff
from models.user import User
from security.tokens import decode_access_token

_MODELS = {"user": User, "gym_owner": GymOwner, "staff": GymStaff}


@dataclass(frozen=True)
class Principal:
    kind: str  # user, gym_owner, staff
    id: int
    email: str
    gym_id: int = None


def _bearer_token():
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def load_current_user():
    g.principal = None

    claims = decode_access_token(_bearer_token())
    if not claims:
        return

    try:
        principal_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return

    row = db.session.get(_MODELS[claims["kind"]], principal_id)
    if row is None or not row.is_active:
        return

    g.principal = Principal(
        kind=claims["kind"],
        id=row.id,
        email=row.email,
        gym_id=getattr(row, "gym_id", None),
    )


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "principal", None) is None:
            return jsonify(error="Authentication required"), 401
        return fn(*args, **kwargs)
    return wrapper
