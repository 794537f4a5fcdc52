from __future__ import annotations

from pydantic import BaseModel


class MenuItemOut(BaseModel):
    id: str
    name: str
    description: str
    price: int
    category: str
    image: str
    available: bool
    preparation_time: int
