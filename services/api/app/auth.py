from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from services.api.app.config import Settings, get_settings
from services.api.app.db.database import get_db
from services.api.app.db.models import User
from services.api.app.errors import AuthError, ForbiddenError

ADMIN_ROLE = "admin"
_ALGORITHM = "HS256"

_bearer = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def check_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def issue_token(user_id: str, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    payload = {"sub": user_id, "iat": now, "exp": now + timedelta(days=settings.jwt_ttl_days)}
    return jwt.encode(payload, settings.jwt_secret, algorithm=_ALGORITHM)


def decode_token(token: str, settings: Settings) -> str:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthError("Invalid token") from e

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise AuthError("Invalid token")
    return user_id


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    if credentials is None:
        raise AuthError("No token provided, authorization denied")

    user = db.get(User, decode_token(credentials.credentials, settings))
    if user is None:
        raise AuthError("User not found")
    return user


def is_admin(user: User) -> bool:
    return user.role == ADMIN_ROLE


def is_super_admin(user: User, settings: Settings) -> bool:
    return is_admin(user) and user.email == settings.super_admin_email


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_admin(user):
        raise ForbiddenError("Access denied. Admin only.")
    return user


def require_super_admin(
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
) -> User:
    if not is_super_admin(user, settings):
        raise ForbiddenError("Access denied. Super admin only.")
    return user
