from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from services.api.app.auth import get_current_user
from services.api.app.db.database import get_db
from services.api.app.db.models import Cart, MenuItem, User
from services.api.app.models.cart import (
    CartAddRequest,
    CartClearResponse,
    CartLineOut,
    CartOut,
    CartUpdateRequest,
)
from services.api.app.routers.menu import menu_item_out
from services.api.app.services.cart import CartService

router = APIRouter()


def cart_out(db: Session, cart: Cart) -> CartOut:
    lines = cart.items_json or []
    ids = [line["menu_item_id"] for line in lines]
    menu = {m.id: m for m in db.execute(select(MenuItem).where(MenuItem.id.in_(ids))).scalars()}

    items = []
    for line in lines:
        item = menu.get(line["menu_item_id"])
        items.append(
            CartLineOut(
                id=line["id"],
                menu_item_id=line["menu_item_id"],
                quantity=line["quantity"],
                price=line["price"],
                line_total=line["quantity"] * line["price"],
                menu_item=menu_item_out(item) if item is not None else None,
            )
        )

    return CartOut(id=cart.id, user_id=cart.user_id, items=items, total_amount=cart.total_amount)


@router.get("/v1/cart", response_model=CartOut)
def get_cart(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> CartOut:
    return cart_out(db, CartService(db).get(user.id))


@router.post("/v1/cart/add", response_model=CartOut)
def add_to_cart(
    payload: CartAddRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CartOut:
    cart = CartService(db).add_item(user.id, payload.menu_item_id, payload.quantity)
    return cart_out(db, cart)


@router.put("/v1/cart/update/{line_id}", response_model=CartOut)
def update_cart_item(
    line_id: str,
    payload: CartUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CartOut:
    cart = CartService(db).update_item(user.id, line_id, payload.quantity)
    return cart_out(db, cart)


@router.delete("/v1/cart/remove/{line_id}", response_model=CartOut)
def remove_cart_item(
    line_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CartOut:
    return cart_out(db, CartService(db).remove_item(user.id, line_id))


@router.delete("/v1/cart/clear", response_model=CartClearResponse)
def clear_cart(
    user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> CartClearResponse:
    cart = CartService(db).clear(user.id)
    return CartClearResponse(message="Cart cleared successfully", cart=cart_out(db, cart))
