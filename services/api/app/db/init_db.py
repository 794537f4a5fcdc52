from __future__ import annotations

import logging
import os

from services.api.app.config import parse_bool
from services.api.app.db.database import get_engine
from services.api.app.db.models import Base

logger = logging.getLogger("foodie.db")


def init_db() -> None:
    if not parse_bool(os.getenv("FOODIE_DB_AUTO_CREATE", "true")):
        logger.info("table auto-create disabled")
        return

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
