from __future__ import annotations

from typing import Any
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from services.api.app.db.models import Cart, MenuItem
from services.api.app.errors import NotFoundError, ValidationError


def compute_total(items: list[dict[str, Any]]) -> int:
    return sum(int(item["quantity"]) * int(item["price"]) for item in items)


class CartService:
    """One cart per user. Each mutation is a single locked read-compute-write."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, user_id: str) -> Cart:
        cart = self._find(user_id)
        if cart is None:
            cart = self._create(user_id)
        return cart

    def find(self, user_id: str) -> Cart | None:
        return self._find(user_id)

    def add_item(self, user_id: str, menu_item_id: str, quantity: int) -> Cart:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        menu_item = self._db.get(MenuItem, menu_item_id)
        if menu_item is None or not menu_item.available:
            raise ValidationError("Menu item not available")

        cart = self._find(user_id, lock=True)
        if cart is None:
            # Creation commits, so take the row lock again before mutating.
            self._create(user_id)
            cart = self._find(user_id, lock=True)
            assert cart is not None

        items = [dict(line) for line in cart.items_json or []]
        for line in items:
            if line["menu_item_id"] == menu_item_id:
                line["quantity"] = int(line["quantity"]) + quantity
                break
        else:
            items.append(
                {
                    "id": uuid4().hex,
                    "menu_item_id": menu_item_id,
                    "quantity": quantity,
                    "price": menu_item.price,
                }
            )

        return self._save(cart, items)

    def update_item(self, user_id: str, line_id: str, quantity: int) -> Cart:
        cart = self._require(user_id)

        items = [dict(line) for line in cart.items_json or []]
        index = next((i for i, line in enumerate(items) if line["id"] == line_id), None)
        if index is None:
            self._db.rollback()
            raise NotFoundError("Item not found in cart")

        if quantity <= 0:
            del items[index]
        else:
            items[index]["quantity"] = quantity

        return self._save(cart, items)

    def remove_item(self, user_id: str, line_id: str) -> Cart:
        cart = self._require(user_id)
        items = [dict(line) for line in cart.items_json or [] if line["id"] != line_id]
        return self._save(cart, items)

    def clear(self, user_id: str) -> Cart:
        cart = self._require(user_id)
        return self._save(cart, [])

    def _find(self, user_id: str, *, lock: bool = False) -> Cart | None:
        stmt = select(Cart).where(Cart.user_id == user_id)
        if lock:
            stmt = stmt.with_for_update()
        return self._db.execute(stmt).scalars().first()

    def _require(self, user_id: str) -> Cart:
        cart = self._find(user_id, lock=True)
        if cart is None:
            raise NotFoundError("Cart not found")
        return cart

    def _create(self, user_id: str) -> Cart:
        cart = Cart(id=uuid4().hex, user_id=user_id, items_json=[], total_amount=0)
        self._db.add(cart)
        try:
            self._db.commit()
        except IntegrityError:
            # Another request created it first.
            self._db.rollback()
            existing = self._find(user_id)
            assert existing is not None
            return existing
        return cart

    def _save(self, cart: Cart, items: list[dict[str, Any]]) -> Cart:
        cart.items_json = items
        cart.total_amount = compute_total(items)
        self._db.commit()
        self._db.refresh(cart)
        return cart
