from datetime import timedelta

import pytest

from app import create_app
from models import db
from models.gym import Gym, GymOwner, GymStaff
from models.gym_class import GymClass
from models.user import User
from security.password import hash_password
from security.tokens import create_access_token
from services.errors import UpstreamUnavailable
from utils.clock import utcnow

TEST_SETTINGS = {
    "TESTING": True,
    "APP_ENV": "test",
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "JWT_SECRET_KEY": "test-secret",
    "BCRYPT_ROUNDS": 4,
    "MERCADOPAGO_ACCESS_TOKEN": "TEST-token",
    "LOG_LEVEL": "WARNING",
}


class FakeGateway:
    """Stands in for MercadoPago: payments are registered by id, calls are recorded."""

    def __init__(self):
        self.payments = {}
        self.fetch_calls = []
        self.preferences = []
        self.fail_fetch = False
        self.fail_preference = False

    def add_payment(self, payment_id, **fields):
        body = {"id": int(payment_id)}
        body.update(fields)
        self.payments[str(payment_id)] = body
        return body

    def fetch_payment_by_id(self, payment_id):
        self.fetch_calls.append(str(payment_id))
        if self.fail_fetch:
            raise UpstreamUnavailable("MercadoPago payment lookup failed (timeout)")
        try:
            return self.payments[str(payment_id)]
        except KeyError:
            raise UpstreamUnavailable("MercadoPago payment lookup failed (status=404)") from None

    def create_preference(self, **kwargs):
        if self.fail_preference:
            raise UpstreamUnavailable("MercadoPago preference creation failed (status=500)")
        self.preferences.append(kwargs)
        pref_id = f"pref-{len(self.preferences)}"
        return {
            "id": pref_id,
            "init_point": f"https://www.mercadopago.com.ar/checkout?pref_id={pref_id}",
            "sandbox_init_point": f"https://sandbox.mercadopago.com.ar/checkout?pref_id={pref_id}",
        }


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def app(gateway):
    app = create_app(TEST_SETTINGS, gateway=gateway)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def controller(app):
    return app.extensions["booking_controller"]


@pytest.fixture
def engine(app):
    return app.extensions["reconciliation_engine"]


@pytest.fixture
def owner(app):
    row = GymOwner(
        email="owner@fitmax.test",
        password_hash=hash_password("owner-pass-123"),
        first_name="Olivia",
        last_name="Owner",
        company_name="FitMax SA",
    )
    db.session.add(row)
    db.session.commit()
    return row


@pytest.fixture
def gym(owner):
    row = Gym(owner_id=owner.id, name="FitMax Palermo")
    db.session.add(row)
    db.session.commit()
    return row


@pytest.fixture
def make_user(gym):
    counter = {"n": 0}

    def _make(email=None, gym_id=None, password="user-pass-123", is_active=True):
        counter["n"] += 1
        row = User(
            gym_id=gym_id or gym.id,
            email=email or f"member{counter['n']}@fitmax.test",
            password_hash=hash_password(password),
            first_name="Member",
            last_name=str(counter["n"]),
            is_active=is_active,
        )
        db.session.add(row)
        db.session.commit()
        return row

    return _make


@pytest.fixture
def make_class(gym):
    def _make(capacity=2, is_active=True, gym_id=None, name="Spinning"):
        row = GymClass(
            gym_id=gym_id or gym.id,
            name=name,
            capacity=capacity,
            starts_at=utcnow() + timedelta(days=1),
            is_active=is_active,
        )
        db.session.add(row)
        db.session.commit()
        return row

    return _make


@pytest.fixture
def make_staff(gym):
    def _make(gym_id=None, role="INSTRUCTOR"):
        row = GymStaff(
            gym_id=gym_id or gym.id,
            email="coach@fitmax.test",
            password_hash=hash_password("coach-pass-123"),
            first_name="Coach",
            last_name="Carter",
            role=role,
        )
        db.session.add(row)
        db.session.commit()
        return row

    return _make


@pytest.fixture
def auth_header(app):
    def _header(kind, principal):
        token = create_access_token(kind, principal.id, gym_id=getattr(principal, "gym_id", None))
        return {"Authorization": f"Bearer {token}"}

    return _header
