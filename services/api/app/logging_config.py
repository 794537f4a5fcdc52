"""JSON logging with per-request correlation ids.

Every record emitted through the ``foodie`` logger tree carries a
``request_id`` attribute. The value comes from ``REQUEST_ID_CTX``, which the
HTTP middleware in ``main.py`` sets from the incoming ``X-Request-ID`` header
(or a fresh UUID when the client sends none).
"""

from __future__ import annotations

import contextvars
import logging
import os

from pythonjsonlogger import jsonlogger

REQUEST_ID_CTX: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s"


class RequestIdFilter(logging.Filter):
    """Attach ``request_id`` so formatters can always reference it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = REQUEST_ID_CTX.get()
        return True


def configure_logging() -> None:
    logger = logging.getLogger("foodie")
    level = os.getenv("FOODIE_LOG_LEVEL", "INFO").strip().upper()
    logger.setLevel(level)

    if logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(_FORMAT))
    handler.addFilter(RequestIdFilter())
    logger.addHandler(handler)
