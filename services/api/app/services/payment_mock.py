from __future__ import annotations

import os
from uuid import uuid4

from services.api.app.services.payment_base import (
    GatewayRequestError,
    PaymentIntent,
    sign,
    signature_payload,
    verify_signature,
)

DEFAULT_MOCK_SECRET = "mock_secret"


class MockPaymentGateway:
    """Deterministic in-process gateway for tests and local development.

    Mirrors the remote gateway's minimum-amount rule so local flows fail the
    same way production would.
    """

    vendor = "MOCK"
    key_id = "rzp_test_mock"
    min_amount = 100

    def __init__(self, secret: str | None = None) -> None:
        self._secret = secret or os.getenv("FOODIE_PAYMENT_MOCK_SECRET", DEFAULT_MOCK_SECRET)
        self.intents: list[PaymentIntent] = []

    def create_intent(self, amount_minor: int, currency: str, receipt: str) -> PaymentIntent:
        del receipt

        if amount_minor < self.min_amount:
            raise GatewayRequestError(
                "Order amount less than minimum amount allowed",
                gateway_code="BAD_REQUEST_ERROR",
                http_status=400,
            )

        intent = PaymentIntent(
            intent_id=f"order_mock_{uuid4().hex[:14]}",
            amount=amount_minor,
            currency=currency,
        )
        self.intents.append(intent)
        return intent

    def verify(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        payload = signature_payload(gateway_order_id, gateway_payment_id)
        return verify_signature(payload, signature, self._secret)

    def sign_payment(self, gateway_order_id: str, gateway_payment_id: str) -> str:
        """Produce the signature a client would receive from the checkout widget."""

        return sign(signature_payload(gateway_order_id, gateway_payment_id), self._secret)
