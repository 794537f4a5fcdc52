from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from packages.shared.schemas.order_v1 import StatusHistoryEntryV1
from services.api.app.auth import get_current_user
from services.api.app.config import Settings, get_settings
from services.api.app.db.database import get_db
from services.api.app.db.models import Order, User
from services.api.app.models.order import (
    OrderCreateRequest,
    OrderCreateResponse,
    OrderDirectResponse,
    OrderItemOut,
    OrderOut,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
)
from services.api.app.services.orders import OrderLifecycleService
from services.api.app.services.payment_factory import get_payment_gateway

router = APIRouter()


def order_out(order: Order) -> OrderOut:
    return OrderOut(
        id=order.id,
        user_id=order.user_id,
        items=[OrderItemOut(**item) for item in order.items_json],
        total_amount=order.total_amount,
        delivery_address=order.delivery_address,
        phone=order.phone,
        payment_id=order.payment_id,
        payment_status=order.payment_status,
        order_status=order.order_status,
        status_history=[StatusHistoryEntryV1(**e) for e in order.status_history_json or []],
        estimated_delivery_time=(
            order.estimated_delivery_time.isoformat() if order.estimated_delivery_time else None
        ),
        gateway_order_id=order.gateway_order_id,
        created_at=order.created_at.isoformat(),
        updated_at=order.updated_at.isoformat(),
    )


def _service(db: Session, settings: Settings) -> OrderLifecycleService:
    return OrderLifecycleService(db, settings, gateway_factory=get_payment_gateway)


@router.post("/v1/orders/create", response_model=OrderCreateResponse)
def create_order(
    payload: OrderCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> OrderCreateResponse:
    created = _service(db, settings).create_order(user.id, payload.delivery_address, payload.phone)
    return OrderCreateResponse(
        order=order_out(created.order),
        gateway_order_id=created.intent.intent_id,
        amount=created.intent.amount,
        currency=created.intent.currency,
        key_id=created.key_id,
    )


@router.post("/v1/orders/create-direct", response_model=OrderDirectResponse)
def create_order_direct(
    payload: OrderCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> OrderDirectResponse:
    order = _service(db, settings).create_order_direct(
        user.id, payload.delivery_address, payload.phone
    )
    return OrderDirectResponse(
        message="Order placed successfully! Payment completed.",
        order=order_out(order),
    )


@router.post("/v1/orders/verify", response_model=PaymentVerifyResponse)
def verify_payment(
    payload: PaymentVerifyRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> PaymentVerifyResponse:
    order = _service(db, settings).verify_payment(
        user.id,
        payload.order_id,
        payload.gateway_order_id,
        payload.gateway_payment_id,
        payload.signature,
    )
    return PaymentVerifyResponse(message="Payment verified successfully", order=order_out(order))


@router.get("/v1/orders/my-orders", response_model=list[OrderOut])
def my_orders(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> list[OrderOut]:
    return [order_out(o) for o in _service(db, settings).list_user_orders(user.id)]


@router.get("/v1/orders/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> OrderOut:
    return order_out(_service(db, settings).get_order(user, order_id))
