from __future__ import annotations

import os

from services.api.app.services.payment_base import PaymentGateway
from services.api.app.services.payment_mock import MockPaymentGateway

_GATEWAY: PaymentGateway | None = None
_GATEWAY_KEY: tuple[str, ...] | None = None

_ENV_KEYS = (
    "FOODIE_PAYMENT_GATEWAY",
    "FOODIE_PAYMENT_MOCK_SECRET",
    "RAZORPAY_KEY_ID",
    "RAZORPAY_KEY_SECRET",
    "RAZORPAY_BASE_URL",
    "RAZORPAY_TIMEOUT_SECS",
)


def get_payment_gateway() -> PaymentGateway:
    """Return the payment gateway selected by env vars.

    Defaults to the mock gateway so tests and local dev are deterministic unless
    explicitly configured otherwise. Building the real gateway validates its
    credentials and raises the matching configuration error.

    The adapter is built once and cached, keyed on the env vars it was built from,
    so startup validates it and requests reuse it.
    """

    global _GATEWAY, _GATEWAY_KEY

    key = tuple(os.getenv(name, "") for name in _ENV_KEYS)
    if _GATEWAY is not None and _GATEWAY_KEY == key:
        return _GATEWAY

    gateway = _build_gateway()
    _GATEWAY = gateway
    _GATEWAY_KEY = key
    return gateway


def _build_gateway() -> PaymentGateway:
    mode = os.getenv("FOODIE_PAYMENT_GATEWAY", "mock").strip().lower()

    if mode == "mock":
        return MockPaymentGateway()

    if mode == "razorpay":
        from services.api.app.services.payment_razorpay import RazorpayGateway

        return RazorpayGateway.from_env()

    raise ValueError(f"Unknown FOODIE_PAYMENT_GATEWAY={mode!r}. Expected mock or razorpay.")
