from __future__ import annotations

from uuid import uuid4

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from services.api.app.auth import check_password, get_current_user, hash_password, issue_token
from services.api.app.config import Settings, get_settings
from services.api.app.db.database import get_db
from services.api.app.db.models import User
from services.api.app.errors import AuthError, DuplicateEmailError
from services.api.app.models.auth import LoginRequest, RegisterRequest, TokenResponse, UserOut

router = APIRouter()


def user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone,
        address=user.address,
        role=user.role,
    )


@router.post("/v1/auth/register", response_model=TokenResponse, status_code=201)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    email = payload.email.strip().lower()
    if db.execute(select(User).where(User.email == email)).scalars().first() is not None:
        raise DuplicateEmailError()

    user = User(
        id=uuid4().hex,
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        phone=payload.phone.strip(),
        address=payload.address.strip(),
        role="user",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateEmailError() from e

    return TokenResponse(token=issue_token(user.id, settings), user=user_out(user))


@router.post("/v1/auth/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    email = payload.email.strip().lower()
    user = db.execute(select(User).where(User.email == email)).scalars().first()
    if user is None or not check_password(user.password_hash, payload.password):
        raise AuthError("Invalid credentials")

    return TokenResponse(token=issue_token(user.id, settings), user=user_out(user))


@router.get("/v1/auth/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)) -> UserOut:
    return user_out(user)
