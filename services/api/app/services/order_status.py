"""Order status machine and status-history bookkeeping.

Status changes go through ``apply_status`` so the history step runs exactly
once per assignment, before the caller commits. Everything here is pure apart
from mutating the ``Order`` row it is handed; nothing touches the session.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from packages.shared.schemas.order_v1 import TERMINAL_ORDER_STATUSES, OrderStatusV1
from services.api.app.db.models import Order
from services.api.app.errors import InvalidStatusError, InvalidTransitionError

OUT_FOR_DELIVERY_ETA = timedelta(minutes=30)


def parse_status(value: Any) -> OrderStatusV1:
    try:
        return OrderStatusV1(value)
    except ValueError as e:
        raise InvalidStatusError(value) from e


def record_status(
    history: list[dict[str, str]],
    status: OrderStatusV1,
    *,
    created_at: datetime | None,
    now: datetime,
) -> list[dict[str, str]]:
    """Return a new history list with ``status`` recorded.

    Orders saved before history tracking existed have an empty list; those get a
    synthetic ``pending`` entry stamped with their creation time first.
    """

    out = [dict(entry) for entry in history]
    if not out:
        out.append(
            {
                "status": OrderStatusV1.PENDING.value,
                "timestamp": (created_at or now).isoformat(),
            }
        )

    if out[-1]["status"] != status.value:
        out.append({"status": status.value, "timestamp": now.isoformat()})

    return out


def check_transition(current: OrderStatusV1, requested: OrderStatusV1) -> None:
    if current == requested:
        return
    if current in TERMINAL_ORDER_STATUSES:
        raise InvalidTransitionError(current.value, requested.value)


def estimated_delivery_for(status: OrderStatusV1, now: datetime) -> datetime | None:
    if status == OrderStatusV1.OUT_FOR_DELIVERY:
        return now + OUT_FOR_DELIVERY_ETA
    if status == OrderStatusV1.DELIVERED:
        return now
    return None


def apply_status(order: Order, status: OrderStatusV1, now: datetime) -> bool:
    """Assign ``status`` to ``order`` and grow its history.

    Returns False when nothing changed.
    """

    history = list(order.status_history_json or [])
    if order.order_status == status.value and history:
        return False

    order.order_status = status.value
    # Reassign rather than mutate: JSON columns do not track in-place changes.
    order.status_history_json = record_status(
        history, status, created_at=order.created_at, now=now
    )
    return True
