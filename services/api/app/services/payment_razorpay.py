from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import httpx

from services.api.app.services.payment_base import (
    AuthenticationFailedError,
    GatewayCredentialFormatError,
    GatewayNotConfiguredError,
    GatewayRequestError,
    PaymentIntent,
    signature_payload,
    verify_signature,
)

logger = logging.getLogger("foodie.payments")

_KEY_PREFIXES = ("rzp_test_", "rzp_live_")
_PLACEHOLDER_MARKER = "your_razorpay"


@dataclass(frozen=True, slots=True)
class GatewayConfig:
    key_id: str
    key_secret: str
    base_url: str
    timeout_secs: float

    def validate(self) -> None:
        if not self.key_id or not self.key_secret:
            raise GatewayNotConfiguredError()

        if _PLACEHOLDER_MARKER in self.key_id or _PLACEHOLDER_MARKER in self.key_secret:
            raise GatewayCredentialFormatError(
                "Razorpay credentials are using placeholder values. "
                "Replace them with real API keys from the Razorpay dashboard."
            )

        if not self.key_id.startswith(_KEY_PREFIXES):
            raise GatewayCredentialFormatError(
                'Invalid Razorpay key id format. Keys start with "rzp_test_" (test mode) '
                'or "rzp_live_" (live mode).'
            )

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        return cls(
            key_id=os.getenv("RAZORPAY_KEY_ID", "").strip(),
            key_secret=os.getenv("RAZORPAY_KEY_SECRET", "").strip(),
            base_url=os.getenv("RAZORPAY_BASE_URL", "https://api.razorpay.com/v1").rstrip("/"),
            timeout_secs=float(os.getenv("RAZORPAY_TIMEOUT_SECS", "10")),
        )


class RazorpayGateway:
    """Payment gateway backed by the Razorpay Orders API.

    Credentials are validated once, when the adapter is built. Each intent is a
    single HTTP attempt; callers decide whether to retry order creation.

    Env vars:
    - FOODIE_PAYMENT_GATEWAY=razorpay
    - RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET (required)
    - RAZORPAY_BASE_URL (default: https://api.razorpay.com/v1)
    - RAZORPAY_TIMEOUT_SECS (default: 10)
    """

    vendor = "RAZORPAY"

    def __init__(self, cfg: GatewayConfig, transport: httpx.BaseTransport | None = None) -> None:
        cfg.validate()
        self._cfg = cfg
        self._transport = transport

    @classmethod
    def from_env(cls) -> "RazorpayGateway":
        return cls(GatewayConfig.from_env())

    @property
    def key_id(self) -> str:
        return self._cfg.key_id

    def create_intent(self, amount_minor: int, currency: str, receipt: str) -> PaymentIntent:
        payload = {"amount": amount_minor, "currency": currency, "receipt": receipt}

        try:
            with httpx.Client(
                base_url=self._cfg.base_url,
                auth=(self._cfg.key_id, self._cfg.key_secret),
                timeout=self._cfg.timeout_secs,
                transport=self._transport,
            ) as client:
                resp = client.post("/orders", json=payload)
        except httpx.HTTPError as e:
            logger.warning(
                "gateway unreachable",
                extra={"amount": amount_minor, "error": f"{type(e).__name__}: {e}"},
            )
            raise GatewayRequestError(
                f"Payment gateway request failed: {type(e).__name__}"
            ) from e

        if resp.status_code >= 400:
            raise _error_from_response(resp, amount_minor)

        try:
            data = resp.json()
            return PaymentIntent(
                intent_id=str(data["id"]),
                amount=int(data.get("amount", amount_minor)),
                currency=str(data.get("currency", currency)),
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(
                "gateway returned invalid intent",
                extra={"http_status": resp.status_code, "amount": amount_minor},
            )
            raise GatewayRequestError(
                "Payment gateway returned an invalid response", http_status=resp.status_code
            ) from e

    def verify(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        payload = signature_payload(gateway_order_id, gateway_payment_id)
        return verify_signature(payload, signature, self._cfg.key_secret)


def _error_from_response(resp: httpx.Response, amount_minor: int) -> GatewayRequestError:
    try:
        body = resp.json()
    except ValueError:
        body = {}

    error = body.get("error") if isinstance(body, dict) else None
    error = error if isinstance(error, dict) else {}
    code = error.get("code")
    description = error.get("description") or f"Payment error: {code or 'Unknown error'}"

    logger.warning(
        "gateway rejected intent",
        extra={
            "http_status": resp.status_code,
            "gateway_code": code,
            "gateway_description": description,
            "amount": amount_minor,
        },
    )

    if resp.status_code == 401 or "authentication" in description.lower():
        return AuthenticationFailedError(description, gateway_code=code)

    return GatewayRequestError(description, gateway_code=code, http_status=resp.status_code)
