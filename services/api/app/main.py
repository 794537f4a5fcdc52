"""Foodie API service entrypoint."""

from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from packages.shared.schemas.order_v1 import ErrorV1
from services.api.app.db.init_db import init_db
from services.api.app.errors import FoodieError
from services.api.app.logging_config import REQUEST_ID_CTX, configure_logging
from services.api.app.routers.admin import router as admin_router
from services.api.app.routers.auth import router as auth_router
from services.api.app.routers.cart import router as cart_router
from services.api.app.routers.menu import router as menu_router
from services.api.app.routers.order import router as order_router
from services.api.app.services.payment_factory import get_payment_gateway

configure_logging()
logger = logging.getLogger("foodie.api")

app = FastAPI(title="Foodie API")

app.include_router(auth_router)
app.include_router(menu_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(admin_router)


@app.on_event("startup")
def _startup() -> None:
    init_db()

    # The server runs without a gateway; payment routes then report the config error.
    try:
        gateway = get_payment_gateway()
    except (FoodieError, ValueError) as e:
        logger.warning("payment gateway unavailable", extra={"reason": str(e)})
    else:
        logger.info("payment gateway ready", extra={"vendor": gateway.vendor})


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    token = REQUEST_ID_CTX.set(rid)
    try:
        response = await call_next(request)
        logger.info(
            "request handled",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status": response.status_code,
            },
        )
    finally:
        REQUEST_ID_CTX.reset(token)
    response.headers["X-Request-ID"] = rid
    return response


@app.exception_handler(FoodieError)
async def _foodie_error(request: Request, exc: FoodieError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request failed",
            extra={"error_code": exc.error_code, "detail": exc.message, "path": request.url.path},
        )
    body = ErrorV1(detail=exc.message, error_code=exc.error_code, extra=exc.extra())
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
