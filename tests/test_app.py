import pytest

from app import create_app
from config import missing_required_settings
from services.gateway import GatewaySettings, MercadoPagoGateway
from services.errors import UpstreamUnavailable


def test_health_and_security_headers(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "database": "ok"}
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_unknown_route_renders_json(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_production_requires_secrets():
    assert missing_required_settings({"APP_ENV": "development"}) == []
    assert missing_required_settings({"APP_ENV": "production", "JWT_SECRET_KEY": "x"}) == [
        "MERCADOPAGO_ACCESS_TOKEN"
    ]
    with pytest.raises(RuntimeError):
        create_app({"APP_ENV": "production", "JWT_SECRET_KEY": "", "MERCADOPAGO_ACCESS_TOKEN": ""})


def test_default_gateway_is_built_from_settings():
    app = create_app({"SQLALCHEMY_DATABASE_URI": "sqlite://", "MERCADOPAGO_ACCESS_TOKEN": "TEST-abc",
                      "MERCADOPAGO_TIMEOUT_SECONDS": 5, "API_URL": "https://api.gymdesk.test/"})
    gateway = app.extensions["payment_gateway"]
    assert isinstance(gateway, MercadoPagoGateway)
    assert gateway.settings.timeout_seconds == 5.0
    assert gateway.settings.notification_url == "https://api.gymdesk.test/payments/webhook"
    assert app.extensions["reconciliation_engine"].gateway is gateway


def test_gateway_without_token_is_unavailable():
    gateway = MercadoPagoGateway(GatewaySettings(access_token=""))
    with pytest.raises(UpstreamUnavailable):
        gateway.fetch_payment_by_id("1")


def test_gateway_unwraps_sdk_responses():
    class FakePaymentResource:
        def __init__(self, result):
            self.result = result

        def get(self, payment_id):
            return self.result

    class FakeSdk:
        def __init__(self, result):
            self.result = result

        def payment(self):
            return FakePaymentResource(self.result)

    gateway = MercadoPagoGateway(GatewaySettings(access_token="TEST-abc"))

    gateway._sdk = FakeSdk({"status": 200, "response": {"id": 1, "status": "approved"}})
    assert gateway.fetch_payment_by_id("1")["status"] == "approved"

    gateway._sdk = FakeSdk({"status": 404, "response": {"message": "Payment not found"}})
    with pytest.raises(UpstreamUnavailable):
        gateway.fetch_payment_by_id("1")


def test_cli_issue_token_and_seed(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["issue-token", "user", "5", "--gym-id", "2"])
    assert result.exit_code == 0
    assert result.output.count(".") == 2

    result = runner.invoke(args=["seed-plans"])
    assert "basic" in result.output
    result = runner.invoke(args=["seed-plans"])
    assert "already seeded" in result.output


def test_gateway_makes_a_single_bounded_attempt(monkeypatch):
    from urllib3.connectionpool import HTTPConnectionPool
    from urllib3.exceptions import ConnectTimeoutError

    attempts = []

    def _timeout(pool, conn, method, url, *args, **kwargs):
        attempts.append((url, kwargs.get("timeout")))
        raise ConnectTimeoutError(pool, "connect timed out")

    monkeypatch.setattr(HTTPConnectionPool, "_make_request", _timeout)
    # an int timeout is accepted too
    gateway = MercadoPagoGateway(GatewaySettings(access_token="TEST-abc", timeout_seconds=5))

    with pytest.raises(UpstreamUnavailable):
        gateway.fetch_payment_by_id("555")

    assert len(attempts) == 1
    url, timeout = attempts[0]
    assert url.endswith("/v1/payments/555")
    assert timeout.connect_timeout == 5.0
    assert gateway._sdk.request_options.max_retries == 0
    assert gateway._sdk.request_options.connection_timeout == 5.0
