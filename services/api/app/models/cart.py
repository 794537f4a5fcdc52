from __future__ import annotations

from pydantic import BaseModel, Field

from services.api.app.models.menu import MenuItemOut


class CartAddRequest(BaseModel):
    menu_item_id: str
    quantity: int = Field(..., ge=1)


class CartUpdateRequest(BaseModel):
    # Zero or less removes the line.
    quantity: int


class CartLineOut(BaseModel):
    id: str
    menu_item_id: str
    quantity: int
    price: int
    line_total: int
    menu_item: MenuItemOut | None = None


class CartOut(BaseModel):
    id: str
    user_id: str
    items: list[CartLineOut]
    total_amount: int


class CartClearResponse(BaseModel):
    message: str
    cart: CartOut
