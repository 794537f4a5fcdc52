"""Order lifecycle: cart to order, payment confirmation, delivery status.

An order only reaches ``confirmed`` through ``verify_payment`` (gateway path),
``create_order_direct`` (offline settlement) or an administrator. Every failure
before that point leaves no order at all, or an order still in ``pending``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from packages.shared.schemas.order_v1 import OrderStatusV1, PaymentStatusV1
from services.api.app.auth import is_admin
from services.api.app.config import Settings
from services.api.app.db.models import Cart, MenuItem, Order, User
from services.api.app.errors import (
    EmptyCartError,
    ForbiddenError,
    InvalidAmountError,
    NotFoundError,
    SignatureMismatchError,
    ValidationError,
)
from services.api.app.services.cart import CartService
from services.api.app.services.order_status import (
    apply_status,
    check_transition,
    estimated_delivery_for,
    parse_status,
)
from services.api.app.services.payment_base import (
    PaymentGateway,
    PaymentGatewayError,
    PaymentIntent,
)

logger = logging.getLogger("foodie.orders")


@dataclass(frozen=True, slots=True)
class CreatedOrder:
    order: Order
    intent: PaymentIntent
    key_id: str


@dataclass(frozen=True, slots=True)
class OrderStats:
    total_orders: int
    pending_orders: int
    completed_orders: int
    total_revenue: int


def _epoch_ms(now: datetime) -> int:
    return int((now - datetime(1970, 1, 1)).total_seconds() * 1000)


class OrderLifecycleService:
    def __init__(
        self,
        db: Session,
        settings: Settings,
        gateway_factory: Callable[[], PaymentGateway] | None = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._db = db
        self._settings = settings
        self._gateway_factory = gateway_factory
        self._clock = clock
        self._carts = CartService(db)

    # ---- Placement ----

    def create_order(self, user_id: str, delivery_address: str, phone: str) -> CreatedOrder:
        """Create a pending order backed by a gateway payment intent.

        The cart is left intact; it is emptied once the payment is verified.
        """

        delivery_address, phone = _require_contact(delivery_address, phone)
        cart = self._checkout_cart(user_id)
        amount = self._charge_amount(cart)
        items = self._snapshot_items(cart)

        if self._gateway_factory is None:
            raise ValidationError("Payment gateway is not available")
        gateway = self._gateway_factory()

        now = self._clock()
        try:
            intent = gateway.create_intent(
                amount, self._settings.currency, f"receipt_{_epoch_ms(now)}"
            )
        except PaymentGatewayError as e:
            logger.warning(
                "payment intent failed",
                extra={"user_id": user_id, "amount": amount, "error_code": e.error_code},
            )
            raise

        order = self._new_order(
            user_id,
            cart,
            items,
            delivery_address=delivery_address,
            phone=phone,
            now=now,
            status=OrderStatusV1.PENDING,
            payment_status=PaymentStatusV1.PENDING,
            payment_id="",
            gateway_order_id=intent.intent_id,
        )
        self._db.commit()
        self._db.refresh(order)

        logger.info(
            "order created",
            extra={"order_id": order.id, "gateway_order_id": intent.intent_id, "amount": amount},
        )
        return CreatedOrder(order=order, intent=intent, key_id=gateway.key_id)

    def create_order_direct(self, user_id: str, delivery_address: str, phone: str) -> Order:
        """Place an already-settled order without talking to the gateway."""

        delivery_address, phone = _require_contact(delivery_address, phone)
        cart = self._checkout_cart(user_id)
        self._charge_amount(cart)
        items = self._snapshot_items(cart)

        now = self._clock()
        order = self._new_order(
            user_id,
            cart,
            items,
            delivery_address=delivery_address,
            phone=phone,
            now=now,
            status=OrderStatusV1.CONFIRMED,
            payment_status=PaymentStatusV1.COMPLETED,
            payment_id=f"direct_{_epoch_ms(now)}",
            gateway_order_id="",
        )

        # Order and emptied cart land in the same commit.
        cart.items_json = []
        cart.total_amount = 0
        self._db.commit()
        self._db.refresh(order)

        logger.info("direct order created", extra={"order_id": order.id, "user_id": user_id})
        return order

    # ---- Payment ----

    def verify_payment(
        self,
        user_id: str,
        order_id: str,
        gateway_order_id: str,
        gateway_payment_id: str,
        signature: str,
    ) -> Order:
        if not gateway_order_id or not gateway_payment_id or not signature:
            raise ValidationError("Payment verification failed")

        if self._gateway_factory is None:
            raise ValidationError("Payment gateway is not available")
        gateway = self._gateway_factory()

        if not gateway.verify(gateway_order_id, gateway_payment_id, signature):
            logger.warning(
                "payment signature mismatch",
                extra={"order_id": order_id, "gateway_order_id": gateway_order_id},
            )
            raise SignatureMismatchError()

        order = self._db.get(Order, order_id)
        if order is None:
            raise NotFoundError("Order not found")

        if order.user_id != user_id:
            logger.warning(
                "payment submitted for another user's order",
                extra={"order_id": order_id, "user_id": user_id},
            )
            raise ForbiddenError("Access denied")

        if order.gateway_order_id and order.gateway_order_id != gateway_order_id:
            logger.warning(
                "payment belongs to another order",
                extra={"order_id": order_id, "gateway_order_id": gateway_order_id},
            )
            raise SignatureMismatchError()

        if order.payment_status == PaymentStatusV1.COMPLETED.value:
            if order.payment_id != gateway_payment_id:
                raise ValidationError("Order is already paid")
            return order

        current = OrderStatusV1(order.order_status)
        check_transition(current, OrderStatusV1.CONFIRMED)

        order.payment_id = gateway_payment_id
        order.payment_status = PaymentStatusV1.COMPLETED.value
        apply_status(order, OrderStatusV1.CONFIRMED, self._clock())
        self._db.commit()
        self._db.refresh(order)

        logger.info(
            "payment verified",
            extra={"order_id": order.id, "payment_id": gateway_payment_id},
        )

        # The order is already confirmed; a failure here must not undo it.
        try:
            cart = self._carts.find(user_id)
            if cart is not None:
                cart.items_json = []
                cart.total_amount = 0
                self._db.commit()
        except Exception:
            self._db.rollback()
            logger.exception("cart clear failed after payment", extra={"user_id": user_id})

        return order

    # ---- Administration ----

    def update_order_status(self, order_id: str, new_status: Any) -> Order:
        status = parse_status(new_status)

        order = self._db.get(Order, order_id)
        if order is None:
            raise NotFoundError("Order not found")

        current = OrderStatusV1(order.order_status)
        check_transition(current, status)

        now = self._clock()
        eta = estimated_delivery_for(status, now)
        if eta is not None:
            order.estimated_delivery_time = eta

        if apply_status(order, status, now):
            logger.info(
                "order status changed",
                extra={"order_id": order.id, "from": current.value, "to": status.value},
            )
        self._db.commit()
        self._db.refresh(order)
        return order

    def list_orders(self, status: Any = None) -> list[Order]:
        stmt = select(Order).order_by(Order.created_at.desc())
        if status:
            stmt = stmt.where(Order.order_status == parse_status(status).value)
        return list(self._db.execute(stmt).scalars().all())

    def stats(self) -> OrderStats:
        def _count(*criteria: Any) -> int:
            stmt = select(func.count()).select_from(Order)
            if criteria:
                stmt = stmt.where(*criteria)
            return int(self._db.execute(stmt).scalar_one())

        revenue = self._db.execute(
            select(func.coalesce(func.sum(Order.total_amount), 0)).where(
                Order.payment_status == PaymentStatusV1.COMPLETED.value
            )
        ).scalar_one()

        return OrderStats(
            total_orders=_count(),
            pending_orders=_count(Order.order_status == OrderStatusV1.PENDING.value),
            completed_orders=_count(Order.order_status == OrderStatusV1.DELIVERED.value),
            total_revenue=int(revenue),
        )

    # ---- Queries ----

    def list_user_orders(self, user_id: str) -> list[Order]:
        stmt = select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc())
        return list(self._db.execute(stmt).scalars().all())

    def get_order(self, user: User, order_id: str) -> Order:
        order = self._db.get(Order, order_id)
        if order is None:
            raise NotFoundError("Order not found")

        if order.user_id != user.id and not is_admin(user):
            raise ForbiddenError("Access denied")
        return order

    # ---- Helpers ----

    def _checkout_cart(self, user_id: str) -> Cart:
        cart = self._carts.find(user_id)
        if cart is None or not cart.items_json:
            raise EmptyCartError()
        return cart

    def _charge_amount(self, cart: Cart) -> int:
        # Stored orders keep the cart total; the charged amount adds the delivery fee.
        amount = cart.total_amount + self._settings.delivery_fee
        if amount < self._settings.min_order_amount:
            raise InvalidAmountError(amount, self._settings.min_order_amount)
        return amount

    def _new_order(
        self,
        user_id: str,
        cart: Cart,
        items: list[dict[str, Any]],
        *,
        delivery_address: str,
        phone: str,
        now: datetime,
        status: OrderStatusV1,
        payment_status: PaymentStatusV1,
        payment_id: str,
        gateway_order_id: str,
    ) -> Order:
        order = Order(
            id=uuid4().hex,
            user_id=user_id,
            items_json=items,
            total_amount=cart.total_amount,
            delivery_address=delivery_address,
            phone=phone,
            payment_id=payment_id,
            payment_status=payment_status.value,
            order_status=OrderStatusV1.PENDING.value,
            status_history_json=[],
            gateway_order_id=gateway_order_id,
            created_at=now,
        )
        apply_status(order, status, now)
        self._db.add(order)
        return order

    def _snapshot_items(self, cart: Cart) -> list[dict[str, Any]]:
        ids = [line["menu_item_id"] for line in cart.items_json]
        names = {
            m.id: m.name
            for m in self._db.execute(select(MenuItem).where(MenuItem.id.in_(ids))).scalars()
        }

        out: list[dict[str, Any]] = []
        for line in cart.items_json:
            name = names.get(line["menu_item_id"])
            if name is None:
                raise ValidationError("A menu item in your cart no longer exists")
            out.append(
                {
                    "menu_item_id": line["menu_item_id"],
                    "name": name,
                    "quantity": int(line["quantity"]),
                    "price": int(line["price"]),
                }
            )
        return out


def _require_contact(delivery_address: str | None, phone: str | None) -> tuple[str, str]:
    address = (delivery_address or "").strip()
    phone_clean = (phone or "").strip()
    if not address or not phone_clean:
        raise ValidationError("Please provide delivery address and phone")
    return address, phone_clean
