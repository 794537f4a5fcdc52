from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from services.api.app.auth import ADMIN_ROLE, require_admin, require_super_admin
from services.api.app.config import Settings, get_settings
from services.api.app.db.database import get_db
from services.api.app.db.models import User
from services.api.app.models.admin import OrderStatusUpdateRequest, StatsOut
from services.api.app.models.auth import UserOut
from services.api.app.models.order import OrderOut
from services.api.app.routers.auth import user_out
from services.api.app.routers.order import order_out
from services.api.app.services.orders import OrderLifecycleService

router = APIRouter()


@router.get("/v1/admin/orders", response_model=list[OrderOut])
def list_orders(
    status: str | None = None,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> list[OrderOut]:
    return [order_out(o) for o in OrderLifecycleService(db, settings).list_orders(status)]


@router.put("/v1/admin/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdateRequest,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> OrderOut:
    order = OrderLifecycleService(db, settings).update_order_status(
        order_id, payload.order_status
    )
    return order_out(order)


@router.get("/v1/admin/stats", response_model=StatsOut)
def stats(
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> StatsOut:
    s = OrderLifecycleService(db, settings).stats()
    return StatsOut(
        total_orders=s.total_orders,
        pending_orders=s.pending_orders,
        completed_orders=s.completed_orders,
        total_revenue=s.total_revenue,
    )


@router.get("/v1/admin/admins", response_model=list[UserOut])
def list_admins(
    _super: User = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> list[UserOut]:
    stmt = select(User).where(User.role == ADMIN_ROLE).order_by(User.created_at.desc())
    return [user_out(u) for u in db.execute(stmt).scalars()]
