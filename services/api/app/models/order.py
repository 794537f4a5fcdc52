from __future__ import annotations

from pydantic import BaseModel, Field

from packages.shared.schemas.order_v1 import (
    OrderStatusV1,
    PaymentStatusV1,
    StatusHistoryEntryV1,
)


class OrderCreateRequest(BaseModel):
    delivery_address: str = ""
    phone: str = ""


class OrderItemOut(BaseModel):
    menu_item_id: str
    name: str
    quantity: int
    price: int


class OrderOut(BaseModel):
    id: str
    user_id: str
    items: list[OrderItemOut]
    total_amount: int
    delivery_address: str
    phone: str
    payment_id: str
    payment_status: PaymentStatusV1
    order_status: OrderStatusV1
    status_history: list[StatusHistoryEntryV1] = Field(default_factory=list)
    estimated_delivery_time: str | None = None
    gateway_order_id: str
    created_at: str
    updated_at: str


class OrderCreateResponse(BaseModel):
    order: OrderOut
    gateway_order_id: str
    amount: int
    currency: str
    key_id: str


class OrderDirectResponse(BaseModel):
    message: str
    order: OrderOut


class PaymentVerifyRequest(BaseModel):
    order_id: str
    gateway_order_id: str = ""
    gateway_payment_id: str = ""
    signature: str = ""


class PaymentVerifyResponse(BaseModel):
    message: str
    order: OrderOut
