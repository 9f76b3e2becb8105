import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    APP_ENV = os.getenv("APP_ENV", "development")  # development, production, test

    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as gymdesk.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "gymdesk.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_SECONDS = int(os.getenv("JWT_EXPIRES_SECONDS", str(24 * 60 * 60)))

    # bcrypt cost factor
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # MercadoPago
    MERCADOPAGO_ACCESS_TOKEN = os.getenv("MERCADOPAGO_ACCESS_TOKEN", "")
    MERCADOPAGO_TIMEOUT_SECONDS = float(os.getenv("MERCADOPAGO_TIMEOUT_SECONDS", "5"))
    DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "ARS")

    # Public URLs (webhook notification_url and checkout back_urls)
    API_URL = os.getenv("API_URL", "http://localhost:5000")
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3001")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False


REQUIRED_IN_PRODUCTION = ("JWT_SECRET_KEY", "MERCADOPAGO_ACCESS_TOKEN")


def missing_required_settings(config) -> list:
    """Names of settings that must be set before serving production traffic."""
    if config.get("APP_ENV") != "production":
        return []
    return [name for name in REQUIRED_IN_PRODUCTION if not config.get(name)]
