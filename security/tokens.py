from datetime import timedelta

import jwt
from flask import current_app

from utils.clock import utcnow

PRINCIPAL_KINDS = ("user", "gym_owner", "staff")


def _secret() -> str:
    secret = current_app.config.get("JWT_SECRET_KEY")
    if not secret:
        # development fallback; production refuses to start without a secret
        secret = current_app.config["SECRET_KEY"]
    return secret


def create_access_token(kind: str, principal_id: int, gym_id: int = None) -> str:
    if kind not in PRINCIPAL_KINDS:
        raise ValueError(f"Unknown principal kind: {kind}")

    lifetime = current_app.config.get("JWT_EXPIRES_SECONDS", 86400)
    now = utcnow()
    claims = {
        "sub": str(principal_id),
        "kind": kind,
        "iat": now,
        "exp": now + timedelta(seconds=lifetime),
    }
    if gym_id is not None:
        claims["gym_id"] = gym_id
    return jwt.encode(claims, _secret(), algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"))


def decode_access_token(token: str):
    """Returns the claims dict, or None for a bad/expired token."""
    if not token:
        return None
    try:
        claims = jwt.decode(
            token,
            _secret(),
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        )
    except jwt.PyJWTError:
        return None
    if claims.get("kind") not in PRINCIPAL_KINDS:
        return None
    return claims
