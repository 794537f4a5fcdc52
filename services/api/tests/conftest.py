from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from services.api.app.config import Settings
from services.api.app.db.models import MenuItem, User

TEST_MOCK_SECRET = "test_secret"
TEST_JWT_SECRET = "test-jwt-secret"
SUPER_ADMIN_EMAIL = "admin@foodie.com"


@pytest.fixture()
def db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Session, None, None]:
    db_path = tmp_path / "foodie_test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("FOODIE_DB_AUTO_CREATE", "true")
    monkeypatch.setenv("FOODIE_PAYMENT_GATEWAY", "mock")
    monkeypatch.setenv("FOODIE_PAYMENT_MOCK_SECRET", TEST_MOCK_SECRET)
    monkeypatch.setenv("FOODIE_JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("FOODIE_SUPER_ADMIN_EMAIL", SUPER_ADMIN_EMAIL)
    monkeypatch.setenv("FOODIE_DELIVERY_FEE", "5000")
    monkeypatch.setenv("FOODIE_MIN_ORDER_AMOUNT", "100")

    from services.api.app.db.database import db_session
    from services.api.app.db.init_db import init_db

    init_db()
    session = db_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db: Session) -> Generator[TestClient, None, None]:
    from services.api.app.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        jwt_secret=TEST_JWT_SECRET,
        jwt_ttl_days=7,
        super_admin_email=SUPER_ADMIN_EMAIL,
        delivery_fee=5000,
        min_order_amount=100,
        currency="INR",
    )


@pytest.fixture()
def make_user(db: Session) -> Callable[..., User]:
    from services.api.app.auth import hash_password

    def _make(email: str | None = None, role: str = "user") -> User:
        user = User(
            id=uuid4().hex,
            name="Test User",
            email=(email or f"{uuid4().hex[:8]}@example.com").lower(),
            password_hash=hash_password("secret123"),
            phone="9999999999",
            address="221B Baker Street",
            role=role,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture()
def make_menu_item(db: Session) -> Callable[..., str]:
    def _make(name: str = "Dish", price: int = 100, available: bool = True) -> str:
        item = MenuItem(
            id=uuid4().hex,
            name=name,
            description=f"{name} description",
            price=price,
            category="mains",
            available=available,
        )
        db.add(item)
        db.commit()
        return item.id

    return _make


@pytest.fixture()
def auth_headers(db: Session) -> Callable[[User], dict[str, str]]:
    from services.api.app.auth import issue_token
    from services.api.app.config import get_settings

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(user.id, get_settings())}"}

    return _headers
