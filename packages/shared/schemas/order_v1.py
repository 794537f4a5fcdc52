"""Shared order schema (v1).

These enums and models are shared between the backend and its web/mobile
clients. They should remain stable and backwards compatible once shipped.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class OrderStatusV1(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatusV1(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_ORDER_STATUSES = frozenset({OrderStatusV1.DELIVERED, OrderStatusV1.CANCELLED})


class StatusHistoryEntryV1(BaseModel):
    status: OrderStatusV1
    timestamp: str


class ErrorV1(BaseModel):
    """Body returned for every handled error.

    ``error_code`` is machine readable; ``detail`` is safe to show to users.
    """

    detail: str
    error_code: str
    extra: dict[str, Any] = Field(default_factory=dict)
