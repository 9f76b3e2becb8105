from datetime import timedelta

import jwt
import pytest

from models import db
from models.audit_log import AuditLog
from security.password import hash_password, verify_password
from security.tokens import create_access_token, decode_access_token
from utils.clock import utcnow


def test_password_hashing_round_trip(app):
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret-pass", "not-a-bcrypt-hash")
    with pytest.raises(ValueError):
        hash_password("")


def test_token_claims(app):
    token = create_access_token("user", 7, gym_id=3)
    claims = decode_access_token(token)
    assert claims["sub"] == "7"
    assert claims["kind"] == "user"
    assert claims["gym_id"] == 3

    with pytest.raises(ValueError):
        create_access_token("admin", 1)


def test_rejects_tampered_expired_and_foreign_tokens(app):
    token = create_access_token("gym_owner", 1)
    assert decode_access_token(token[:-2] + "xx") is None
    assert decode_access_token(None) is None

    expired = jwt.encode({"sub": "1", "kind": "user", "exp": utcnow() - timedelta(minutes=1)},
                         "test-secret", algorithm="HS256")
    assert decode_access_token(expired) is None

    foreign = jwt.encode({"sub": "1", "kind": "user"}, "someone-elses-secret", algorithm="HS256")
    assert decode_access_token(foreign) is None

    wrong_kind = jwt.encode({"sub": "1", "kind": "root"}, "test-secret", algorithm="HS256")
    assert decode_access_token(wrong_kind) is None


def test_login_user_and_me(client, make_user, gym):
    user = make_user(email="ana@fitmax.test", password="ana-pass-123")

    resp = client.post("/auth/login", json={"email": "ANA@fitmax.test", "password": "ana-pass-123"})
    assert resp.status_code == 200
    token = resp.get_json()["access_token"]
    assert resp.get_json()["token_type"] == "Bearer"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).get_json()
    assert me == {"id": user.id, "email": "ana@fitmax.test", "user_type": "user", "gym_id": gym.id}
    assert AuditLog.query.filter_by(action="LOGIN_SUCCESS", actor_id=user.id).count() == 1


def test_login_owner(client, owner):
    resp = client.post("/auth/login",
                       json={"email": owner.email, "password": "owner-pass-123", "userType": "gym_owner"})
    assert resp.status_code == 200


def test_login_failures(client, make_user):
    make_user(email="ben@fitmax.test", password="ben-pass-123")
    make_user(email="off@fitmax.test", password="off-pass-123", is_active=False)

    assert client.post("/auth/login", json={"email": "ben@fitmax.test", "password": "nope"}).status_code == 401
    assert client.post("/auth/login", json={"email": "ghost@fitmax.test", "password": "x"}).status_code == 401
    assert client.post("/auth/login", json={"email": "bad", "password": "x"}).status_code == 400
    assert client.post("/auth/login",
                       json={"email": "ben@fitmax.test", "password": "x", "userType": "root"}).status_code == 400
    assert client.post("/auth/login", json={"email": "off@fitmax.test", "password": "off-pass-123"}).status_code == 403


def test_login_same_email_in_two_gyms_needs_gym_id(client, make_user, owner):
    from models.gym import Gym

    other = Gym(owner_id=owner.id, name="FitMax Belgrano")
    db.session.add(other)
    db.session.commit()
    make_user(email="twin@fitmax.test", password="twin-pass-123")
    second = make_user(email="twin@fitmax.test", password="twin-pass-123", gym_id=other.id)

    resp = client.post("/auth/login", json={"email": "twin@fitmax.test", "password": "twin-pass-123"})
    assert resp.status_code == 400

    resp = client.post("/auth/login",
                       json={"email": "twin@fitmax.test", "password": "twin-pass-123", "gymId": other.id})
    assert resp.status_code == 200
    assert decode_access_token(resp.get_json()["access_token"])["sub"] == str(second.id)


def test_inactive_principal_token_is_ignored(client, make_user, auth_header):
    user = make_user()
    headers = auth_header("user", user)
    user.is_active = False
    db.session.commit()

    assert client.get("/auth/me", headers=headers).status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Basic abc"}).status_code == 401
