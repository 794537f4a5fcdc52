from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Settings:
    """Service-wide settings read from the environment.

    Env vars:
    - FOODIE_JWT_SECRET (default: a local-only development secret)
    - FOODIE_JWT_TTL_DAYS (default: 7)
    - FOODIE_SUPER_ADMIN_EMAIL (default: admin@foodie.com)
    - FOODIE_DELIVERY_FEE (minor units, default: 5000)
    - FOODIE_MIN_ORDER_AMOUNT (minor units, default: 100)
    - FOODIE_CURRENCY (default: INR)
    """

    jwt_secret: str
    jwt_ttl_days: int
    super_admin_email: str
    delivery_fee: int
    min_order_amount: int
    currency: str

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            # Local-only default. Production must provide FOODIE_JWT_SECRET explicitly.
            jwt_secret=os.getenv("FOODIE_JWT_SECRET", "foodie-dev-secret-change-me"),
            jwt_ttl_days=int(os.getenv("FOODIE_JWT_TTL_DAYS", "7")),
            super_admin_email=os.getenv("FOODIE_SUPER_ADMIN_EMAIL", "admin@foodie.com")
            .strip()
            .lower(),
            delivery_fee=int(os.getenv("FOODIE_DELIVERY_FEE", "5000")),
            min_order_amount=int(os.getenv("FOODIE_MIN_ORDER_AMOUNT", "100")),
            currency=os.getenv("FOODIE_CURRENCY", "INR").strip().upper(),
        )


def get_settings() -> Settings:
    return Settings.from_env()


def parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}
