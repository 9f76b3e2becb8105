import logging
from dataclasses import dataclass

import mercadopago
from mercadopago.config import RequestOptions

from services.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewaySettings:
    access_token: str
    timeout_seconds: float = 5.0
    api_url: str = "http://localhost:5000"
    frontend_url: str = "http://localhost:3001"

    @classmethod
    def from_config(cls, config) -> "GatewaySettings":
        return cls(
            access_token=config.get("MERCADOPAGO_ACCESS_TOKEN") or "",
            timeout_seconds=float(config.get("MERCADOPAGO_TIMEOUT_SECONDS", 5)),
            api_url=(config.get("API_URL") or "").rstrip("/"),
            frontend_url=(config.get("FRONTEND_URL") or "").rstrip("/"),
        )

    @property
    def notification_url(self) -> str:
        return f"{self.api_url}/payments/webhook"

    def back_urls(self, section: str) -> dict:
        return {
            "success": f"{self.frontend_url}/{section}/success",
            "failure": f"{self.frontend_url}/{section}/failure",
            "pending": f"{self.frontend_url}/{section}/pending",
        }


class MercadoPagoGateway:
    """Thin wrapper over the MercadoPago SDK that raises UpstreamUnavailable on any failure."""

    def __init__(self, settings: GatewaySettings):
        self.settings = settings
        self._sdk = None

    def _client(self):
        if not self.settings.access_token:
            raise UpstreamUnavailable("MercadoPago access token not configured")
        if self._sdk is None:
            # one attempt per call; MercadoPago redelivers the webhook on failure
            options = RequestOptions(
                connection_timeout=float(self.settings.timeout_seconds),
                max_retries=0,
            )
            self._sdk = mercadopago.SDK(self.settings.access_token, request_options=options)
        return self._sdk

    @staticmethod
    def _unwrap(result, what: str) -> dict:
        status = (result or {}).get("status")
        body = (result or {}).get("response")
        if not isinstance(status, int) or status >= 300 or not isinstance(body, dict):
            raise UpstreamUnavailable(f"MercadoPago {what} failed (status={status})")
        return body

    def fetch_payment_by_id(self, payment_id) -> dict:
        """
        Returns the canonical payment object; the keys we rely on are status,
        external_reference, date_approved, status_detail, payment_method_id
        and payment_type_id.
        """
        try:
            result = self._client().payment().get(payment_id)
        except UpstreamUnavailable:
            raise
        except Exception as exc:
            raise UpstreamUnavailable(f"MercadoPago payment lookup failed: {exc}") from exc
        return self._unwrap(result, "payment lookup")

    def create_preference(self, *, title: str, amount: float, currency: str, external_reference,
                          section: str = "payment", payer_email: str = None) -> dict:
        preference = {
            "items": [{
                "title": title,
                "quantity": 1,
                "currency_id": currency,
                "unit_price": float(amount),
            }],
            "external_reference": str(external_reference),
            "notification_url": self.settings.notification_url,
            "back_urls": self.settings.back_urls(section),
            "auto_return": "approved",
        }
        if payer_email:
            preference["payer"] = {"email": payer_email}

        try:
            result = self._client().preference().create(preference)
        except UpstreamUnavailable:
            raise
        except Exception as exc:
            raise UpstreamUnavailable(f"MercadoPago preference creation failed: {exc}") from exc
        body = self._unwrap(result, "preference creation")
        logger.info("Created MercadoPago preference %s for reference %s", body.get("id"), external_reference)
        return body
