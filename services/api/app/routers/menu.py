from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from services.api.app.db.database import get_db
from services.api.app.db.models import MenuItem
from services.api.app.errors import NotFoundError
from services.api.app.models.menu import MenuItemOut

router = APIRouter()


def menu_item_out(item: MenuItem) -> MenuItemOut:
    return MenuItemOut(
        id=item.id,
        name=item.name,
        description=item.description,
        price=item.price,
        category=item.category,
        image=item.image,
        available=item.available,
        preparation_time=item.preparation_time,
    )


@router.get("/v1/menu", response_model=list[MenuItemOut])
def list_menu(category: str | None = None, db: Session = Depends(get_db)) -> list[MenuItemOut]:
    stmt = select(MenuItem).where(MenuItem.available.is_(True))
    if category:
        stmt = stmt.where(MenuItem.category == category.strip().lower())
    stmt = stmt.order_by(MenuItem.category, MenuItem.name)
    return [menu_item_out(m) for m in db.execute(stmt).scalars()]


@router.get("/v1/menu/{menu_item_id}", response_model=MenuItemOut)
def get_menu_item(menu_item_id: str, db: Session = Depends(get_db)) -> MenuItemOut:
    item = db.get(MenuItem, menu_item_id)
    if item is None:
        raise NotFoundError("Menu item not found")
    return menu_item_out(item)
