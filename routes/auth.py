from flask import Blueprint, current_app, g, jsonify, request

from models.gym import GymOwner, GymStaff
from models.user import User
from security.password import verify_password
from security.tokens import PRINCIPAL_KINDS, create_access_token
from utils.audit import log_event
from utils.auth_context import login_required

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


def _find_account(kind: str, email: str, gym_id):
    if kind == "gym_owner":
        return [GymOwner.query.filter_by(email=email).first()]

    model = User if kind == "user" else GymStaff
    q = model.query.filter_by(email=email)
    if gym_id is not None:
        q = q.filter_by(gym_id=gym_id)
    # emails are only unique per gym
    return q.limit(2).all()


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    kind = (data.get("userType") or data.get("user_type") or "user").strip().lower()
    gym_id = data.get("gymId", data.get("gym_id"))

    if not _is_valid_email(email) or not password:
        return jsonify(error="email and password are required"), 400
    if kind not in PRINCIPAL_KINDS:
        return jsonify(error="userType must be one of user, gym_owner, staff"), 400
    if gym_id is not None and (isinstance(gym_id, bool) or not isinstance(gym_id, int)):
        return jsonify(error="gymId must be an integer"), 400

    matches = [row for row in _find_account(kind, email, gym_id) if row is not None]
    if len(matches) > 1:
        return jsonify(error="gymId is required for this account"), 400

    account = matches[0] if matches else None
    if not account or not verify_password(password, account.password_hash):
        log_event("LOGIN_FAIL", metadata={"email": email, "user_type": kind})
        return jsonify(error="Invalid credentials"), 401
    if not account.is_active:
        log_event("LOGIN_INACTIVE", actor_type=kind, actor_id=account.id)
        return jsonify(error="Account is inactive"), 403

    token = create_access_token(kind, account.id, gym_id=getattr(account, "gym_id", None))
    log_event("LOGIN_SUCCESS", actor_type=kind, actor_id=account.id)
    return jsonify(
        access_token=token,
        token_type="Bearer",
        expires_in=current_app.config.get("JWT_EXPIRES_SECONDS", 86400),
    ), 200


@auth_bp.get("/me")
@login_required
def me():
    p = g.principal
    return jsonify(id=p.id, email=p.email, user_type=p.kind, gym_id=p.gym_id), 200
