from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Any, Protocol

from services.api.app.errors import FoodieError


class PaymentGatewayError(FoodieError):
    """Base class for payment gateway errors."""


class GatewayNotConfiguredError(PaymentGatewayError):
    status_code = 500
    error_code = "GATEWAY_NOT_CONFIGURED"

    def __init__(self) -> None:
        super().__init__(
            "Payment gateway not configured. Set RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET."
        )


class GatewayCredentialFormatError(PaymentGatewayError):
    status_code = 500
    error_code = "GATEWAY_CREDENTIAL_FORMAT"


class GatewayRequestError(PaymentGatewayError):
    """The gateway rejected a request or could not be reached."""

    status_code = 400
    error_code = "GATEWAY_REQUEST_FAILED"

    def __init__(
        self,
        description: str,
        *,
        gateway_code: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(description)
        self.description = description
        self.gateway_code = gateway_code
        self.http_status = http_status

    def extra(self) -> dict[str, Any]:
        return {"gateway_code": self.gateway_code}


class AuthenticationFailedError(GatewayRequestError):
    status_code = 401
    error_code = "AUTHENTICATION_FAILED"

    def __init__(self, description: str, *, gateway_code: str | None = None) -> None:
        super().__init__(
            f"Payment gateway authentication failed: {description}. "
            "Check the gateway API keys.",
            gateway_code=gateway_code,
            http_status=401,
        )


@dataclass(frozen=True, slots=True)
class PaymentIntent:
    intent_id: str
    amount: int
    currency: str


class PaymentGateway(Protocol):
    vendor: str
    key_id: str

    def create_intent(self, amount_minor: int, currency: str, receipt: str) -> PaymentIntent: ...

    def verify(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool: ...


def signature_payload(gateway_order_id: str, gateway_payment_id: str) -> str:
    return f"{gateway_order_id}|{gateway_payment_id}"


def sign(payload: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_signature(payload: str, signature: str, secret: str) -> bool:
    expected = sign(payload, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
