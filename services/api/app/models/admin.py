from __future__ import annotations

from pydantic import BaseModel


class OrderStatusUpdateRequest(BaseModel):
    # Validated by the service so unknown values map to INVALID_STATUS, not 422.
    order_status: str


class StatsOut(BaseModel):
    total_orders: int
    pending_orders: int
    completed_orders: int
    total_revenue: int
