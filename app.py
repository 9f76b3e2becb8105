import logging

from flask import Flask, jsonify
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config, missing_required_settings
from routes import health_bp, auth_bp, booking_bp, payments_bp, subscriptions_bp

from models import db
from services.booking_admission import BookingAdmissionController
from services.errors import ServiceError
from services.gateway import GatewaySettings, MercadoPagoGateway
from services.payment_reconciliation import PaymentReconciliationEngine
from services.store import GymStore
from utils.auth_context import load_current_user

logger = logging.getLogger(__name__)


def create_app(overrides=None, gateway=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    missing = missing_required_settings(app.config)
    if missing:
        raise RuntimeError("Missing required settings for production: " + ", ".join(missing))

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(subscriptions_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Core services, built once from explicit settings
    store = GymStore()
    if gateway is None:
        gateway = MercadoPagoGateway(GatewaySettings.from_config(app.config))
    app.extensions["payment_gateway"] = gateway
    app.extensions["booking_controller"] = BookingAdmissionController(store)
    app.extensions["reconciliation_engine"] = PaymentReconciliationEngine(store, gateway)

    @app.before_request
    def _load_user():
        load_current_user()

    @app.errorhandler(ServiceError)
    def _service_error(exc):
        db.session.rollback()
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        return jsonify(error=exc.description), exc.code

    @app.errorhandler(Exception)
    def _unexpected_error(exc):
        db.session.rollback()
        logger.exception("Unhandled error")
        message = str(exc) if app.config.get("DEBUG") else "Internal server error"
        return jsonify(error=message, code="InternalError"), 500

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp


    register_cli(app)


    return app

#-------------------------
import click
from security.tokens import PRINCIPAL_KINDS, create_access_token
from utils.seed import seed_plans

def register_cli(app):
    @app.cli.command("seed-plans")
    def seed_plans_command():
        """Insert the default subscription plans (idempotent)."""
        added = seed_plans()
        if not added:
            print("Plans already seeded")
            return
        print("Seeded plans: " + ", ".join(added))

    @app.cli.command("issue-token")
    @click.argument("kind", type=click.Choice(PRINCIPAL_KINDS))
    @click.argument("principal_id", type=int)
    @click.option("--gym-id", type=int, default=None)
    def issue_token(kind, principal_id, gym_id):
        """Print a bearer token for local testing."""
        print(create_access_token(kind, principal_id, gym_id=gym_id))

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5000)
